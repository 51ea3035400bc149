# infrastructure/database/client.py
import logging
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database

from app.config.settings import settings

logger = logging.getLogger(__name__)

_client: Optional[MongoClient] = None


def get_client() -> MongoClient:
    """Return the process-wide MongoDB client, connecting on first use."""
    global _client
    if _client is None:
        try:
            _client = MongoClient(settings.MONGO_URI, tz_aware=True)
            logger.info("MongoDB client created")
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {str(e)}", exc_info=True)
            raise
    return _client


def get_db() -> Database:
    """Get the application database."""
    db = get_client()[settings.MONGO_DB]
    logger.debug(f"Using MongoDB database: {settings.MONGO_DB}")
    return db


def close_client() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("MongoDB client closed")
