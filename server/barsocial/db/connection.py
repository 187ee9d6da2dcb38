"""MongoDB connection shared by the data access modules"""
import os
import logging
from pymongo import MongoClient
from typing import Optional

logger = logging.getLogger(__name__)

MONGO_URL = os.getenv("MONGO_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("MONGO_DATABASE", "barsocial")
SERVER_SELECTION_TIMEOUT_MS = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))

_client: Optional[MongoClient] = None
_database = None

def get_mongodb_client() -> MongoClient:
    """Get the MongoDB client, connecting on first use"""
    global _client
    if _client is None:
        logger.info(f"Connecting to MongoDB at {MONGO_URL}")
        _client = MongoClient(MONGO_URL, serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS)

        try:
            _client.admin.command('ping')
            logger.info("MongoDB connection successful")
        except Exception as e:
            logger.error(f"MongoDB connection failed: {e}")
            _client = None
            raise

    return _client

def get_database():
    """Get the barsocial database handle"""
    global _database
    if _database is None:
        _database = get_mongodb_client()[DATABASE_NAME]
        logger.info(f"Using database: {DATABASE_NAME}")

    return _database

def set_database(database):
    """Swap the cached database handle, e.g. for an in-memory one in tests"""
    global _database
    _database = database

def close_connection():
    global _client, _database
    if _client:
        _client.close()
        _client = None
        _database = None
        logger.info("MongoDB connection closed")
