# app/middleware/rate_limit.py
import logging

from fastapi import FastAPI
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.config.settings import settings

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


def setup_rate_limit(app: FastAPI) -> None:
    """Attach the shared limiter so route decorators can find it.

    Args:
        app: The FastAPI application instance.
    """
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    logger.info(f"Rate limiting initialized (enabled={settings.RATE_LIMIT_ENABLED}, applied via route decorators)")
