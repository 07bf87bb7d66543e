"""
Create the indexes the services rely on.

The unique index on users.email is what actually guarantees one account per
email address; the lookup in /register is only a fast path for the common case.

Safe to run repeatedly: create_index is a no-op when the index already exists.

Usage:
    python -m petwiki.database.init_db
"""

import logging
from typing import Optional

from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database

from petwiki.database.db_connection import get_db


def ensure_indexes(db: Optional[Database] = None) -> None:
    """
    Create all indexes on the users, adoptioncenters and comments collections.

    Args:
        db (Database, optional): Target database. Defaults to get_db().
    """
    if db is None:
        db = get_db()

    db.users.create_index([("email", ASCENDING)], unique=True, name="email_unique")
    db.comments.create_index(
        [("breedId", ASCENDING), ("createdAt", DESCENDING)], name="breed_newest_first"
    )
    db.adoptioncenters.create_index(
        [("state", ASCENDING), ("city", ASCENDING)], name="state_city"
    )
    logging.info("Database indexes ensured.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")
    ensure_indexes()
