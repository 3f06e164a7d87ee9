"""Health check endpoints."""

import time

from fastapi import APIRouter, status
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    ok: bool
    ts: int


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Liveness check",
)
async def health_check() -> HealthResponse:
    """
    Liveness check. Never touches the database and needs no API key.

    Returns:
        ``ok`` and the server time in epoch milliseconds
    """
    return HealthResponse(ok=True, ts=int(time.time() * 1000))
