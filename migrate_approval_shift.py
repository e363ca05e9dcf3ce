#!/usr/bin/env python3
"""
Migration script to add 1 to the 'approval' status so 0 is no longer a used value
- New: 0 -> 1
- Approved: 1 -> 2

RUN ONCE. Every call to run() shifts the values again, so main() records a marker
in the 'migrations' collection and refuses to start when the marker is present.
Users whose approval is not a number are reported and left as they are.

The "Modified <n> users" line is the summary to parse from stdout.
"""

from datetime import datetime, timezone
from pymongo import MongoClient
import os
import sys
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

MONGO_URI = os.getenv('MONGO_URI')
DATABASE_NAME = os.getenv('DATABASE_NAME', 'tutoring')

MARKER_ID = 'approval-shift'


def shifted_approval(user):
    return user['approval'] + 1


def run(db):
    """Shift 'approval' of every user that has one, returns the number of users modified"""
    users = db['users']
    to_shift = list(users.find({"approval": {"$exists": True}}))

    count = 0
    for user in to_shift:
        approval = user["approval"]
        if isinstance(approval, bool) or not isinstance(approval, (int, float)):
            print(f"Unable to shift approval {approval!r} of user {user['_id']}")
            continue

        # Only write over the value that was read
        result = users.update_one(
            {"_id": user["_id"], "approval": approval},
            {"$set": {"approval": shifted_approval(user)}}
        )
        if result.modified_count > 0:
            count += 1
    return count


def applied_marker(db):
    return db['migrations'].find_one({"_id": MARKER_ID})


def record_marker(db, count):
    db['migrations'].insert_one({
        "_id": MARKER_ID,
        "applied_at": datetime.now(timezone.utc),
        "modified": count,
    })


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

        marker = applied_marker(db)
        if marker:
            print(f"[ERROR] approval shift already applied at {marker.get('applied_at')}")
            raise SystemExit(1)

        count = run(db)
        record_marker(db, count)
        print(f"Modified {count} users")

    except Exception as e:
        print(f"[ERROR] Migration failed: {e}")
        raise
    finally:
        client.close()


if __name__ == "__main__":
    main()
