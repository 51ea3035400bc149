# app/config/env.py
import logging
import os
from typing import Dict

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()


def require_env(*names: str) -> Dict[str, str]:
    """Read variables that have no default, reporting every missing name at once.

    Raises:
        RuntimeError: If any of the variables is unset or empty.
    """
    values = {name: os.getenv(name, "") for name in names}
    missing = [name for name, value in values.items() if not value.strip()]
    if missing:
        logger.error(f"Missing required environment variables: {', '.join(missing)}")
        raise RuntimeError(f"Required environment variables not set: {', '.join(missing)}")
    logger.debug(f"Required environment variables present: {', '.join(names)}")
    return values
