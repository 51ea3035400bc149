# app/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pymongo.errors import NetworkTimeout, OperationFailure, ServerSelectionTimeoutError

from app.config.settings import settings
from app.middleware.rate_limit import setup_rate_limit
from core.logging.setup import LoggingMiddleware, setup_logging
from infrastructure.database.client import close_client, get_db
from infrastructure.database.indexes import create_indexes
from routes.v1 import auth, categories, contact, inquiries, orders, products, quotes, upload, users

setup_logging()
logger = logging.getLogger(__name__)

SERVICE_NAME = "b2b-backend"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create indexes on startup and release the MongoDB client on shutdown."""
    try:
        create_indexes(get_db())
        logger.info("Database indexes created successfully")
    except OperationFailure as of:
        logger.error(f"Failed to create database indexes: {str(of)}", exc_info=True)
        raise RuntimeError(f"Database index creation failed: {str(of)}")
    except (NetworkTimeout, ServerSelectionTimeoutError) as nt:
        logger.error(f"Network timeout creating indexes: {str(nt)}", exc_info=True)
        raise RuntimeError(f"Database connection timeout: {str(nt)}")
    yield
    close_client()


app = FastAPI(
    title="B2B Trade Marketplace API",
    description="Catalog, inquiries and negotiated orders between buyers and the marketplace team",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

setup_rate_limit(app)
app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")


@app.get("/", summary="Root endpoint", description="Returns a welcome message")
async def root():
    return {"message": "Welcome to the B2B Trade Marketplace API"}


@app.get("/v1/health", summary="Health check")
async def health():
    return {"ok": True, "service": SERVICE_NAME}


app.include_router(auth.router, prefix="/v1/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/v1/users", tags=["Users"])
app.include_router(categories.router, prefix="/v1/categories", tags=["Categories"])
app.include_router(products.router, prefix="/v1/products", tags=["Products"])
app.include_router(quotes.router, prefix="/v1/quotes", tags=["Quotes"])
app.include_router(inquiries.router, prefix="/v1/inquiries", tags=["Inquiries"])
app.include_router(orders.router, prefix="/v1/orders", tags=["Orders"])
app.include_router(contact.router, prefix="/v1/contact", tags=["Contact"])
app.include_router(upload.router, prefix="/v1/upload", tags=["Upload"])

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
