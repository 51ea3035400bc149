# routes/v1/products.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pymongo.database import Database

from app.middleware.rate_limit import limiter
from core.auth.auth import require_admin
from core.errors import BaseError
from domain.entities.product import Product
from domain.schemas.product import ProductCreate, ProductUpdate
from infrastructure.database.client import get_db
from services.products import create_product, delete_product, get_product_by_slug, list_products, update_product

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=List[Product], summary="List products")
@limiter.limit("60/minute")
async def list_products_route(
    request: Request,
    q: Optional[str] = Query(None, description="Text search over name, description and category"),
    category: Optional[str] = Query(None, description="Category name"),
    db: Database = Depends(get_db)
):
    """List catalog products (public access)."""
    try:
        return list_products(db, q=q, category=category)
    except BaseError as be:
        logger.error(f"Failed to list products: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to list products: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{slug}", response_model=Product, summary="Get product by slug")
@limiter.limit("60/minute")
async def get_product_route(request: Request, slug: str, db: Database = Depends(get_db)):
    try:
        return get_product_by_slug(db, slug)
    except BaseError as be:
        logger.error(f"Failed to get product {slug}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to retrieve product {slug}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("", response_model=Product, status_code=201, summary="Create a new product")
@limiter.limit("10/minute")
async def create_product_route(
    request: Request,
    product_data: ProductCreate,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_admin)
):
    """Create a new product (admin only)."""
    try:
        product = create_product(db, product_data)
        logger.info(f"Product created by admin {current_user['_id']}: {product.id}")
        return product
    except BaseError as be:
        logger.error(f"Failed to create product: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to create product: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/{product_id}", response_model=Product, summary="Update product")
@limiter.limit("10/minute")
async def update_product_route(
    request: Request,
    product_id: str,
    update_data: ProductUpdate,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_admin)
):
    """Update a product (admin only)."""
    try:
        product = update_product(db, product_id, update_data)
        logger.info(f"Product updated: {product_id} by admin: {current_user['_id']}")
        return product
    except BaseError as be:
        logger.error(f"Failed to update product {product_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to update product {product_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{product_id}", response_model=dict, summary="Delete product")
@limiter.limit("10/minute")
async def delete_product_route(
    request: Request,
    product_id: str,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_admin)
):
    try:
        result = delete_product(db, product_id)
        logger.info(f"Product deleted: {product_id} by admin: {current_user['_id']}")
        return result
    except BaseError as be:
        logger.error(f"Failed to delete product {product_id}: {be.detail}")
        raise
    except Exception as e:
        logger.error(f"Failed to delete product {product_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
