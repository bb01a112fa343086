"""
Database module - MongoDB connection.
"""
from career_api.db.mongodb import get_mongo_db, test_mongo_connection, COLLECTIONS

__all__ = [
    "get_mongo_db",
    "test_mongo_connection",
    "COLLECTIONS"
]
