"""FastAPI dependencies."""

from typing import Annotated

import structlog
from fastapi import Depends, Header
from pymongo.asynchronous.database import AsyncDatabase

from app.config import settings
from app.core.exceptions import UnauthorizedException
from app.core.security import verify_api_key_value
from app.database import get_db

logger = structlog.get_logger()


async def verify_api_key(
    x_api_key: Annotated[str | None, Header(alias="x-api-key")] = None,
) -> None:
    """
    Reject requests without the configured shared secret.

    Args:
        x_api_key: Value of the ``x-api-key`` header

    Raises:
        UnauthorizedException: If a key is configured and the header does not match
    """
    if verify_api_key_value(x_api_key):
        return

    logger.warning(
        "api_key_rejected",
        provided_length=len(x_api_key or ""),
        expected_length=len((settings.api_key or "").strip()),
    )
    raise UnauthorizedException("Unauthorized")


# Type aliases for dependency injection
Database = Annotated[AsyncDatabase, Depends(get_db)]
