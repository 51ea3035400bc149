# services/categories.py
import logging
from datetime import datetime, timezone
from typing import Dict, List

from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, OperationFailure

from core.errors import InternalServerError, NotFoundError, ValidationError
from core.utils.validation import slugify, validate_object_id
from domain.entities.category import Category
from domain.schemas.category import CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)


def create_category(db: Database, data: CategoryCreate) -> Category:
    """Create a new category; the slug is derived from the name when omitted.

    Args:
        db (Database): MongoDB database instance.
        data (CategoryCreate): Name and optional slug, description, image and order.

    Returns:
        Category: The created category.

    Raises:
        ValidationError: If the name or slug is already taken or the slug is empty.
        InternalServerError: For unexpected errors or database failures.
    """
    try:
        slug = slugify(data.slug or data.name)
        if not slug:
            raise ValidationError("Category slug cannot be empty")

        category = Category(
            name=data.name,
            slug=slug,
            description=data.description,
            image=data.image,
            order=data.order,
        )
        result = db.categories.insert_one(category.to_document())
        category.id = str(result.inserted_id)

        logger.info(f"Category created with ID: {category.id}, slug: {slug}")
        return category
    except DuplicateKeyError:
        logger.warning(f"Duplicate category: {data.name}")
        raise ValidationError("Category already exists")
    except ValidationError as ve:
        logger.error(f"Validation error in create_category: {ve.detail}")
        raise ve
    except OperationFailure as of:
        logger.error(f"Database operation failed in create_category: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to create category: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in create_category: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to create category: {str(e)}")


def list_categories(db: Database) -> List[Category]:
    """Retrieve all categories ordered by position, then name."""
    try:
        categories = db.categories.find().sort([("order", ASCENDING), ("name", ASCENDING)])
        result = [Category.from_document(category) for category in categories]
        logger.info(f"Retrieved {len(result)} categories")
        return result
    except OperationFailure as of:
        logger.error(f"Database operation failed in list_categories: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to list categories: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in list_categories: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to list categories: {str(e)}")


def update_category(db: Database, category_id: str, data: CategoryUpdate) -> Category:
    """Update only the supplied fields of a category.

    Raises:
        ValidationError: If category_id is invalid, nothing is supplied, or the name/slug is taken.
        NotFoundError: If the category does not exist.
        InternalServerError: For unexpected errors or database failures.
    """
    try:
        validate_object_id(category_id, "category_id")
        changes = data.model_dump(by_alias=True, exclude_unset=True)
        if not changes:
            raise ValidationError("No fields provided for update")
        if "slug" in changes:
            changes["slug"] = slugify(changes["slug"] or data.name or "")
            if not changes["slug"]:
                raise ValidationError("Category slug cannot be empty")
        changes["updatedAt"] = datetime.now(timezone.utc)

        updated = db.categories.find_one_and_update(
            {"_id": ObjectId(category_id)},
            {"$set": changes},
            return_document=ReturnDocument.AFTER
        )
        if not updated:
            raise NotFoundError(f"Category with ID {category_id} not found")

        logger.info(f"Category updated: {category_id}")
        return Category.from_document(updated)
    except DuplicateKeyError:
        raise ValidationError("Category already exists")
    except (ValidationError, NotFoundError) as e:
        logger.error(f"Error in update_category: {e.detail}")
        raise e
    except OperationFailure as of:
        logger.error(f"Database operation failed in update_category: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to update category: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in update_category: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to update category: {str(e)}")


def delete_category(db: Database, category_id: str) -> Dict[str, bool]:
    try:
        validate_object_id(category_id, "category_id")
        result = db.categories.delete_one({"_id": ObjectId(category_id)})
        if result.deleted_count == 0:
            raise NotFoundError(f"Category with ID {category_id} not found")
        logger.info(f"Category deleted: {category_id}")
        return {"ok": True}
    except (ValidationError, NotFoundError) as e:
        logger.error(f"Error in delete_category: {e.detail}")
        raise e
    except OperationFailure as of:
        logger.error(f"Database operation failed in delete_category: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to delete category: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in delete_category: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to delete category: {str(e)}")
