# seed.py
import logging
from datetime import datetime, timezone

from pymongo.database import Database

from app.config.settings import settings
from core.utils.hash import hash_password
from core.utils.validation import slugify
from infrastructure.database.client import close_client, get_db
from infrastructure.database.indexes import create_indexes

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

CATEGORIES = [
    {"name": "Coffee", "description": "Green and roasted coffee beans", "order": 1},
    {"name": "Grains", "description": "Rice, wheat and other staples", "order": 2},
    {"name": "Spices", "description": "Whole and ground spices", "order": 3},
]

PRODUCTS = [
    {
        "name": "Arabica Coffee",
        "category": "Coffee",
        "description": "Washed Arabica beans, grade 1",
        "priceRange": {"min": 10.5, "max": 14.0, "currency": "EUR"},
        "originCountry": "Ethiopia",
    },
    {
        "name": "Basmati Rice",
        "category": "Grains",
        "description": "Extra long grain aged basmati",
        "priceRange": {"min": 1.5, "max": 2.2, "currency": "EUR"},
        "originCountry": "India",
    },
    {
        "name": "Black Pepper",
        "category": "Spices",
        "description": "Whole black peppercorns, 550 g/l",
        "priceRange": {"min": 6.0, "max": 8.2, "currency": "EUR"},
        "originCountry": "Vietnam",
    },
]


def _insert_if_absent(db: Database, collection: str, key: dict, document: dict) -> bool:
    now = datetime.now(timezone.utc)
    result = db[collection].update_one(
        key,
        {"$setOnInsert": {**document, "createdAt": now, "updatedAt": now}},
        upsert=True
    )
    return result.upserted_id is not None


def seed(db: Database) -> None:
    """Create the admin account and sample catalog data when missing."""
    create_indexes(db)

    if _insert_if_absent(db, "users", {"email": settings.ADMIN_EMAIL.lower()}, {
        "name": "Admin",
        "email": settings.ADMIN_EMAIL.lower(),
        "passwordHash": hash_password(settings.ADMIN_PASSWORD),
        "role": "admin",
    }):
        logger.info(f"Admin account created: {settings.ADMIN_EMAIL}")
    else:
        logger.info(f"Admin account already exists: {settings.ADMIN_EMAIL}")

    for category in CATEGORIES:
        slug = slugify(category["name"])
        if _insert_if_absent(db, "categories", {"slug": slug}, {**category, "slug": slug}):
            logger.info(f"Category '{category['name']}' added")

    for product in PRODUCTS:
        slug = slugify(product["name"])
        document = {"unit": "per kg", "images": [], "certifications": [], **product, "slug": slug}
        if _insert_if_absent(db, "products", {"slug": slug}, document):
            logger.info(f"Product '{product['name']}' added")

    logger.info("Seeding finished")


if __name__ == "__main__":
    try:
        seed(get_db())
    finally:
        close_client()
