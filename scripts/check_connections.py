#!/usr/bin/env python3
"""
Connection Check Script

Verifies MongoDB is reachable and supports the multi-document transactions
used when a student accepts an offer (needs a replica set).

Usage: python scripts/check_connections.py
"""
import sys

from career_api.core.config import get_settings
from career_api.db.mongodb import get_mongo_client, init_mongo_indexes, test_mongo_connection


def main() -> int:
    settings = get_settings()
    print("=" * 50)
    print("CAREER GUIDANCE API - CONNECTION CHECK")
    print("=" * 50)

    print("\n[1] MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if not test_mongo_connection():
        print("    FAILED: cannot reach MongoDB")
        return 1
    print("    CONNECTED")

    print("\n[2] Transactions...")
    hello = get_mongo_client().admin.command("hello")
    if hello.get("setName"):
        print(f"    OK: replica set '{hello['setName']}'")
    else:
        print("    WARNING: standalone server, accepting offers will fail (transactions need a replica set)")

    print("\n[3] Indexes...")
    init_mongo_indexes()
    print("    OK")

    print("\n" + "=" * 50)
    return 0


if __name__ == "__main__":
    sys.exit(main())
