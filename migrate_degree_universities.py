#!/usr/bin/env python3
"""
Migration script to denormalize users.tutoring.degrees[].university
- ObjectId reference -> the 'name' of the matching document in universities
- Plain string values are already names and are left as they are
- References with no matching university are left untouched and reported

Run once:
  python migrate_degree_universities.py mongodb://localhost:27017/tutoring

The "Updated <n> users" line is the summary to parse from stdout.
"""

from collections import namedtuple
from bson import ObjectId
from pymongo import MongoClient
import os
import sys
from marshmallow import Schema, fields, ValidationError, INCLUDE
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

MONGO_URI = os.getenv('MONGO_URI')
DATABASE_NAME = os.getenv('DATABASE_NAME', 'tutoring')

UniversityRef = namedtuple('UniversityRef', ['id'])
UniversityName = namedtuple('UniversityName', ['name'])


class University(fields.Field):
    """Reads a degree's university as either a reference or an already resolved name"""

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, ObjectId):
            return UniversityRef(value)
        if isinstance(value, str):
            return UniversityName(value)
        raise ValidationError(f"Unsupported university value: {value!r}")


class DegreeSchema(Schema):
    class Meta:
        unknown = INCLUDE

    university = University()


degree_schema = DegreeSchema()


def denormalize_degrees(degrees, find_name, user_id):
    """
    Replace university references in degrees with their names, in place.
    find_name(id) returns the name or None when the university does not exist.
    Returns True if at least one degree changed.
    """
    has_update = False
    for degree in degrees:
        if 'university' not in degree:
            continue

        try:
            university = degree_schema.load(degree)['university']
        except ValidationError:
            print(f"Unable to read university {degree['university']!r} of user {user_id}")
            continue

        if isinstance(university, UniversityName):
            continue

        name = find_name(university.id)
        if name is None:
            print(f"Unable to find university with id {university.id} of user {user_id}")
            continue

        degree['university'] = name
        has_update = True
    return has_update


def run(db):
    """Denormalize degree universities of every user, returns the number of users updated"""
    users = db['users']
    universities = db['universities']

    def find_name(university_id):
        university = universities.find_one({"_id": university_id}, {"name": 1})
        if university is None:
            return None
        return university.get('name')

    all_users = list(users.find({"tutoring.degrees": {"$exists": True}}))

    count = 0
    for user in all_users:
        degrees = user.get('tutoring', {}).get('degrees') or []
        if len(degrees) == 0:
            continue

        if denormalize_degrees(degrees, find_name, user['_id']):
            result = users.update_one(
                {"_id": user["_id"]},
                {"$set": {"tutoring.degrees": degrees}}
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
        print(f"Updated {count} users")

        # Verify the migration
        remaining = db['users'].count_documents(
            {"tutoring.degrees.university": {"$type": "objectId"}}
        )
        print(f"\nVerification:")
        print(f"Users with unresolved university references: {remaining}")

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
