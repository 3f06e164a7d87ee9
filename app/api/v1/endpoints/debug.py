"""Diagnostic endpoints."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, status

from app.dependencies import Database

router = APIRouter(prefix="/_debug", tags=["Debug"])


@router.get(
    "/db-ping",
    status_code=status.HTTP_200_OK,
    summary="Database round-trip",
)
async def db_ping(db: Database) -> dict[str, Any]:
    """
    Ping the database and list its collections.

    Returns:
        Database name, ping reply and sorted collection names
    """
    ping = await db.command("ping")
    collections = await db.list_collection_names()
    return {
        "ok": True,
        "db": db.name,
        "ping": ping,
        "collections": sorted(collections),
        "ts": datetime.now(UTC).isoformat(),
    }
