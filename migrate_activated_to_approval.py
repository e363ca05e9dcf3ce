#!/usr/bin/env python3
"""
Migration script to set the 'approval' status for tutors from the old 'activated' flag
- activated truthy -> approval 1
- activated falsy -> approval 0
Only users that have 'activated' and no 'approval' are touched.

Run once:
  python migrate_activated_to_approval.py mongodb://localhost:27017/tutoring

The "Modified <n> users" line is the summary to parse from stdout.
"""

from pymongo import MongoClient
import os
import sys
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

MONGO_URI = os.getenv('MONGO_URI')
DATABASE_NAME = os.getenv('DATABASE_NAME', 'tutoring')

PENDING_QUERY = {
    "approval": {"$exists": False},
    "activated": {"$exists": True},
}


def approval_from_activated(user):
    """Return the approval status a user gets from its 'activated' flag"""
    return 1 if user.get('activated') else 0


def run(db):
    """Set 'approval' on every pending user, returns the number of users modified"""
    users = db['users']
    pending = list(users.find(PENDING_QUERY))

    count = 0
    for user in pending:
        # Skip users that received an approval since the scan
        result = users.update_one(
            {"_id": user["_id"], "approval": {"$exists": False}},
            {"$set": {"approval": approval_from_activated(user)}}
        )
        if result.modified_count > 0:
            count += 1
    return count


def connection_target(argv):
    if len(argv) > 1:
        return argv[1]
    if not MONGO_URI:
        raise ValueError("MONGO_URI environment variable is required")
    return MONGO_URI


def main(argv=None):
    uri = connection_target(sys.argv if argv is None else argv)
    client = MongoClient(uri)
    try:
        db = client.get_default_database(DATABASE_NAME)

        # Test connection
        client.admin.command('ping')
        print(f"[OK] Connected to MongoDB - Database: {db.name}")

        count = run(db)
        print(f"Modified {count} users")

        # Verify the migration
        remaining = db['users'].count_documents(PENDING_QUERY)
        print(f"\nVerification:")
        print(f"Users with 'activated' and no 'approval': {remaining}")

        if remaining == 0:
            print("[OK] Migration verification passed!")
        else:
            print("[ERROR] Migration verification failed!")

    except Exception as e:
        print(f"[ERROR] Migration failed: {e}")
        raise
    finally:
        client.close()


if __name__ == "__main__":
    main()
