# services/products.py
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, OperationFailure

from core.errors import InternalServerError, NotFoundError, ValidationError
from core.utils.validation import slugify, validate_object_id
from domain.entities.order import DEFAULT_CURRENCY, PriceRange
from domain.entities.product import Product
from domain.schemas.order import PriceRangeInput
from domain.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


def _price_range(value: Optional[PriceRangeInput]) -> PriceRange:
    if value is None:
        return PriceRange()
    return PriceRange(min=value.min, max=value.max, currency=value.currency or DEFAULT_CURRENCY)


def create_product(db: Database, data: ProductCreate) -> Product:
    """Create a new catalog product.

    Args:
        db (Database): MongoDB database instance.
        data (ProductCreate): Product fields; the slug is derived from the name when missing.

    Returns:
        Product: The created product.

    Raises:
        ValidationError: If the slug is empty or already taken.
        InternalServerError: For unexpected errors or database failures.
    """
    logger.debug(f"Attempting to create product: {data.name}")
    try:
        slug = slugify(data.slug or data.name)
        if not slug:
            raise ValidationError("Product slug cannot be empty")

        fields = data.model_dump(exclude={"slug", "price_range"})
        product = Product(**fields, slug=slug, price_range=_price_range(data.price_range))
        result = db.products.insert_one(product.to_document())
        product.id = str(result.inserted_id)

        logger.info(f"Product created successfully - ID: {product.id}, slug: {slug}")
        return product
    except DuplicateKeyError:
        logger.warning(f"Duplicate product slug for: {data.name}")
        raise ValidationError("A product with this slug already exists")
    except ValidationError as ve:
        logger.error(f"Validation error in create_product: {ve.detail}")
        raise ve
    except OperationFailure as of:
        logger.error(f"Database operation failed in create_product: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to create product: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in create_product: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to create product: {str(e)}")


def list_products(db: Database, q: Optional[str] = None, category: Optional[str] = None) -> List[Product]:
    """List catalog products, newest first, optionally text-searched and filtered by category."""
    logger.debug(f"Listing products q={q}, category={category}")
    try:
        query = {}
        if q and q.strip():
            query["$text"] = {"$search": q.strip()}
        if category:
            query["category"] = category
        products = [Product.from_document(product)
                    for product in db.products.find(query).sort("createdAt", DESCENDING)]
        logger.info(f"Retrieved {len(products)} products")
        return products
    except OperationFailure as of:
        logger.error(f"Database operation failed in list_products: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to list products: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in list_products: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to list products: {str(e)}")


def get_product_by_slug(db: Database, slug: str) -> Product:
    try:
        product = db.products.find_one({"slug": slug})
        if not product:
            raise NotFoundError(f"Product with slug {slug} not found")
        logger.info(f"Product retrieved: {slug}")
        return Product.from_document(product)
    except NotFoundError as ne:
        logger.error(f"Not found error in get_product_by_slug: {ne.detail}")
        raise ne
    except OperationFailure as of:
        logger.error(f"Database operation failed in get_product_by_slug: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to get product: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in get_product_by_slug: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to get product: {str(e)}")


def update_product(db: Database, product_id: str, data: ProductUpdate) -> Product:
    """Update the supplied fields of a product.

    Raises:
        ValidationError: If product_id is invalid, nothing is supplied, or the slug is taken.
        NotFoundError: If the product does not exist.
        InternalServerError: For unexpected errors or database failures.
    """
    try:
        validate_object_id(product_id, "product_id")
        changes = data.model_dump(by_alias=True, exclude_unset=True, exclude={"price_range"})
        if "price_range" in data.model_fields_set:
            changes["priceRange"] = _price_range(data.price_range).model_dump(by_alias=True)
        if not changes:
            raise ValidationError("No fields provided for update")
        if "slug" in changes:
            changes["slug"] = slugify(changes["slug"] or data.name or "")
            if not changes["slug"]:
                raise ValidationError("Product slug cannot be empty")
        changes["updatedAt"] = datetime.now(timezone.utc)

        updated = db.products.find_one_and_update(
            {"_id": ObjectId(product_id)},
            {"$set": changes},
            return_document=ReturnDocument.AFTER
        )
        if not updated:
            raise NotFoundError(f"Product with ID {product_id} not found")

        logger.info(f"Product updated: {product_id}, fields: {sorted(changes)}")
        return Product.from_document(updated)
    except DuplicateKeyError:
        raise ValidationError("A product with this slug already exists")
    except (ValidationError, NotFoundError) as e:
        logger.error(f"Error in update_product: {e.detail}")
        raise e
    except OperationFailure as of:
        logger.error(f"Database operation failed in update_product: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to update product: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in update_product: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to update product: {str(e)}")


def delete_product(db: Database, product_id: str) -> Dict[str, bool]:
    try:
        validate_object_id(product_id, "product_id")
        result = db.products.delete_one({"_id": ObjectId(product_id)})
        if result.deleted_count == 0:
            raise NotFoundError(f"Product with ID {product_id} not found")
        logger.info(f"Product deleted: {product_id}")
        return {"ok": True}
    except (ValidationError, NotFoundError) as e:
        logger.error(f"Error in delete_product: {e.detail}")
        raise e
    except OperationFailure as of:
        logger.error(f"Database operation failed in delete_product: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to delete product: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in delete_product: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to delete product: {str(e)}")
