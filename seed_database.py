#!/usr/bin/env python3
"""
Seed the users collection with sample accounts.
Existing accounts (matched by email) are left untouched.
"""

from datetime import datetime, timezone

from pymongo import MongoClient

from accounts_api.core.config import get_settings
from accounts_api.core.security import get_password_hash
from accounts_api.db.database import USERS_COLLECTION

SAMPLE_PASSWORD = "password123"

SAMPLE_USERS = [
    ("Admin User", "admin@example.com", "admin"),
    ("Regular User", "user@example.com", "user"),
    ("John Doe", "john.doe@example.com", "user"),
    ("Jane Smith", "jane.smith@example.com", "user"),
    ("Super Admin", "superadmin@example.com", "admin"),
]


def seed_database() -> None:
    """Insert any sample account that does not exist yet."""
    settings = get_settings()
    client: MongoClient = MongoClient(
        settings.MONGO_URI,
        authSource=settings.MONGO_AUTH_SOURCE,
        serverSelectionTimeoutMS=settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
    )

    try:
        users = client[settings.MONGO_DATABASE][USERS_COLLECTION]
        users.create_index("email", unique=True)
        password_hash = get_password_hash(SAMPLE_PASSWORD)

        for name, email, role in SAMPLE_USERS:
            result = users.update_one(
                {"email": email},
                {
                    "$setOnInsert": {
                        "name": name,
                        "email": email,
                        "password": password_hash,
                        "role": role,
                        "created_at": datetime.now(timezone.utc),
                    }
                },
                upsert=True,
            )
            if result.upserted_id is not None:
                print(f"Created {role} account: {email}")
            else:
                print(f"Account already exists: {email}")

        print(f"\nSeeding completed for database '{settings.MONGO_DATABASE}'")
    finally:
        client.close()


if __name__ == "__main__":
    seed_database()
