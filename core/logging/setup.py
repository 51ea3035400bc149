# core/logging/setup.py
import logging
import logging.config
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.config.settings import settings

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log incoming requests and outgoing responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        # headers are left out so bearer tokens never reach the log
        client = request.client.host if request.client else "unknown"
        logger.info(f"Request: {request.method} {request.url.path} from {client}")
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(e)}", exc_info=True)
            raise
        logger.info(f"Response: {request.method} {request.url.path} status={response.status_code}")
        return response


def build_logging_config(level: str, log_file: Optional[str] = None) -> dict:
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "default",
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "filename": log_file,
            "level": level,
            "formatter": "default",
        }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
        },
        "handlers": handlers,
        "root": {
            "level": level,
            "handlers": list(handlers),
        },
    }


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Set up logging configuration for the application."""
    level = (level or settings.LOG_LEVEL).upper()
    log_file = log_file if log_file is not None else settings.LOG_FILE
    try:
        logging.config.dictConfig(build_logging_config(level, log_file))
        logger.info(f"Logging setup completed (level={level}, file={log_file or '-'})")
    except (ValueError, OSError) as e:
        # console-only fallback
        logging.basicConfig(level=logging.INFO)
        logger.error(f"Invalid logging configuration, using defaults: {str(e)}", exc_info=True)
