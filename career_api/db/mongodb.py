"""
MongoDB Connection Utility

Every record of the platform lives in MongoDB:
- users (identity + role) and the role profiles keyed by the same id
- courses / jobs owned by institutions / companies
- course applications and job applications
- notifications and prospectuses

Documents use string ids (ObjectId hex) so they can be passed straight
through the API.
"""
import logging

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from career_api.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, tz_aware=True, serverSelectionTimeoutMS=5000)
    return _client


def get_mongo_db() -> Database:
    """Get the career_guidance database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "students": "students",
    "institutions": "institutions",
    "companies": "companies",
    "courses": "courses",
    "jobs": "jobs",
    "applications": "applications",
    "job_applications": "job_applications",
    "notifications": "notifications",
    "prospectuses": "prospectuses",
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    db[COLLECTIONS["users"]].create_index("email", unique=True)
    db[COLLECTIONS["users"]].create_index("role")

    db[COLLECTIONS["courses"]].create_index("institution_id")
    db[COLLECTIONS["jobs"]].create_index([("active", ASCENDING), ("deadline", ASCENDING)])
    db[COLLECTIONS["jobs"]].create_index("company_id")

    # Capacity / duplicate checks and waitlist lookups
    db[COLLECTIONS["applications"]].create_index([
        ("student_id", ASCENDING),
        ("institution_id", ASCENDING)
    ])
    db[COLLECTIONS["applications"]].create_index([
        ("student_id", ASCENDING),
        ("course_id", ASCENDING)
    ], unique=True)
    db[COLLECTIONS["applications"]].create_index([
        ("course_id", ASCENDING),
        ("institution_id", ASCENDING),
        ("status", ASCENDING),
        ("applied_at", ASCENDING)
    ])

    db[COLLECTIONS["job_applications"]].create_index([
        ("job_id", ASCENDING),
        ("student_id", ASCENDING)
    ], unique=True)

    db[COLLECTIONS["notifications"]].create_index([
        ("user_id", ASCENDING),
        ("created_at", DESCENDING)
    ])
    db[COLLECTIONS["prospectuses"]].create_index("institution_id")

    logger.info("MongoDB indexes created successfully")
