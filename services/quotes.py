# services/quotes.py
import logging
from datetime import datetime, timezone
from typing import List

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import OperationFailure

from core.errors import InternalServerError, NotFoundError, ValidationError
from core.utils.validation import validate_object_id
from domain.entities.quote import ProductQuote, QuoteStatus
from domain.schemas.quote import ProductSummary, QuoteCreate, QuoteResponse

logger = logging.getLogger(__name__)


def create_quote(db: Database, data: QuoteCreate) -> ProductQuote:
    """Record a public quote request for an existing product.

    Raises:
        ValidationError: If the product ID is malformed.
        NotFoundError: If the product does not exist.
        InternalServerError: For unexpected errors or database failures.
    """
    logger.debug(f"Creating quote request for product {data.product_id} from {data.email}")
    try:
        validate_object_id(data.product_id, "product_id")
        if not db.products.find_one({"_id": ObjectId(data.product_id)}, {"_id": 1}):
            raise NotFoundError("Product not found")

        quote = ProductQuote(**data.model_dump(), status=QuoteStatus.NEW)
        result = db.product_quotes.insert_one(quote.to_document())
        quote.id = str(result.inserted_id)

        logger.info(f"Quote request created - ID: {quote.id}, product: {data.product_id}")
        return quote
    except (ValidationError, NotFoundError) as e:
        logger.error(f"Error in create_quote: {e.detail}")
        raise e
    except OperationFailure as of:
        logger.error(f"Database operation failed in create_quote: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to create quote: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in create_quote: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to create quote: {str(e)}")


def list_quotes(db: Database) -> List[QuoteResponse]:
    """List quote requests, newest first, with their product resolved."""
    try:
        quotes = [ProductQuote.from_document(quote)
                  for quote in db.product_quotes.find().sort("createdAt", DESCENDING)]
        product_ids = list({ObjectId(quote.product_id) for quote in quotes if ObjectId.is_valid(quote.product_id)})
        products = {}
        if product_ids:
            for product in db.products.find({"_id": {"$in": product_ids}}, {"name": 1, "slug": 1}):
                products[str(product["_id"])] = ProductSummary(
                    id=str(product["_id"]), name=product.get("name"), slug=product.get("slug")
                )

        logger.info(f"Retrieved {len(quotes)} quote requests")
        return [
            QuoteResponse.model_validate({**quote.model_dump(by_alias=True), "product": products.get(quote.product_id)})
            for quote in quotes
        ]
    except OperationFailure as of:
        logger.error(f"Database operation failed in list_quotes: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to list quotes: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in list_quotes: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to list quotes: {str(e)}")


def update_quote_status(db: Database, quote_id: str, status: QuoteStatus) -> ProductQuote:
    try:
        validate_object_id(quote_id, "quote_id")
        updated = db.product_quotes.find_one_and_update(
            {"_id": ObjectId(quote_id)},
            {"$set": {"status": QuoteStatus(status).value, "updatedAt": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER
        )
        if not updated:
            raise NotFoundError(f"Quote with ID {quote_id} not found")
        logger.info(f"Quote {quote_id} status set to {QuoteStatus(status).value}")
        return ProductQuote.from_document(updated)
    except (ValidationError, NotFoundError) as e:
        logger.error(f"Error in update_quote_status: {e.detail}")
        raise e
    except OperationFailure as of:
        logger.error(f"Database operation failed in update_quote_status: {str(of)}", exc_info=True)
        raise InternalServerError(f"Failed to update quote: {str(of)}")
    except Exception as e:
        logger.error(f"Unexpected error in update_quote_status: {str(e)}", exc_info=True)
        raise InternalServerError(f"Failed to update quote: {str(e)}")
