"""
MongoDB connection helper.
Provides get_db() for use by services.
"""

import os
import atexit
import logging
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database
from dotenv import load_dotenv

# Load .env variables from the project root
load_dotenv()

# Get the database URL from environment variable
MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017/petwikiDB")
DEFAULT_DB_NAME = "petwikiDB"

_client: Optional[MongoClient] = None


def get_client() -> MongoClient:
    """
    Return the process-wide MongoClient, creating it on first use.

    pymongo pools connections internally, so one client is shared by
    every request handled by this process. Datetimes are read back as
    UTC-aware values so they serialize with the same offset they were
    written with. The client is closed at interpreter exit.
    """
    global _client
    if _client is None:
        _client = MongoClient(MONGODB_URI, tz_aware=True)
        atexit.register(close_db)
        logging.info("MongoDB client created")
    return _client


def get_db() -> Database:
    """
    Returns the application database.

    The database name comes from the URI path (mongodb://host/<name>),
    falling back to DEFAULT_DB_NAME.

    Usage:
        db = get_db()
        user = db.users.find_one({"email": email})

    Returns:
        pymongo.database.Database: Handle to the petwiki database.
    """
    return get_client().get_default_database(default=DEFAULT_DB_NAME)


def close_db() -> None:
    """Close the shared client, if one was opened."""
    global _client
    if _client is not None:
        _client.close()
        _client = None
