# infrastructure/database/indexes.py
import logging

from pymongo import ASCENDING, DESCENDING, TEXT
from pymongo.database import Database

logger = logging.getLogger(__name__)


def create_indexes(db: Database):
    """Create indexes for MongoDB collections."""
    try:
        # Users collection
        db.users.create_index([("email", ASCENDING)], unique=True, name="unique_user_email_idx")
        db.users.create_index([("createdAt", DESCENDING)])

        # Orders collection
        db.orders.create_index([("userId", ASCENDING), ("createdAt", DESCENDING)])
        db.orders.create_index([("status", ASCENDING)])
        db.orders.create_index([("proposalStatus", ASCENDING)])
        db.orders.create_index([("shipment.phase", ASCENDING)])

        # Inquiries collection
        db.inquiries.create_index([("userId", ASCENDING), ("createdAt", DESCENDING)])
        db.inquiries.create_index([("status", ASCENDING)])

        # Products collection
        db.products.create_index([("slug", ASCENDING)], unique=True, name="unique_product_slug_idx")
        db.products.create_index([("category", ASCENDING)])
        db.products.create_index(
            [("name", TEXT), ("description", TEXT), ("category", TEXT)],
            name="product_text_idx"
        )

        # Categories collection
        db.categories.create_index([("name", ASCENDING)], unique=True, name="unique_category_name_idx")
        db.categories.create_index([("slug", ASCENDING)], unique=True, name="unique_category_slug_idx")

        # Quotes and contact messages
        db.product_quotes.create_index([("status", ASCENDING)])
        db.contact_messages.create_index([("status", ASCENDING)])
        db.contact_messages.create_index([("ip", ASCENDING), ("createdAt", DESCENDING)])

        logger.info("Database indexes created successfully")
    except Exception as e:
        logger.error(f"Failed to create database indexes: {str(e)}", exc_info=True)
        raise
