# routes/v1/categories.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from pymongo.database import Database

from app.middleware.rate_limit import limiter
from core.auth.auth import require_admin
from core.errors import BaseError
from domain.entities.category import Category
from domain.schemas.category import CategoryCreate, CategoryUpdate
from infrastructure.database.client import get_db
from services.categories import create_category, delete_category, list_categories, update_category

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=List[Category], summary="List categories")
@limiter.limit("60/minute")
async def list_categories_route(request: Request, db: Database = Depends(get_db)):
    """List all categories (public access)."""
    try:
        return list_categories(db)
    except BaseError as be:
        logger.error(f"Failed to list categories: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to list categories: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("", response_model=Category, status_code=201, summary="Create category")
@limiter.limit("10/minute")
async def create_category_route(
    request: Request,
    category_data: CategoryCreate,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_admin)
):
    try:
        category = create_category(db, category_data)
        logger.info(f"Category created by admin {current_user['_id']}: {category.id}")
        return category
    except BaseError as be:
        logger.error(f"Failed to create category: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to create category: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/{category_id}", response_model=Category, summary="Update category")
@limiter.limit("10/minute")
async def update_category_route(
    request: Request,
    category_id: str,
    update_data: CategoryUpdate,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_admin)
):
    try:
        return update_category(db, category_id, update_data)
    except BaseError as be:
        logger.error(f"Failed to update category {category_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to update category {category_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{category_id}", response_model=dict, summary="Delete category")
@limiter.limit("10/minute")
async def delete_category_route(
    request: Request,
    category_id: str,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_admin)
):
    try:
        result = delete_category(db, category_id)
        logger.info(f"Category {category_id} deleted by admin {current_user['_id']}")
        return result
    except BaseError as be:
        logger.error(f"Failed to delete category {category_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to delete category {category_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
