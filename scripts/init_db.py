"""Script to initialize the database."""

import asyncio

from app.core.roles import ensure_roles_seed
from app.database import close_database, ensure_indexes, get_database


async def init_db() -> None:
    """Create the base indexes and seed the role catalog."""
    db = get_database()
    try:
        await ensure_indexes(db)
        seeded = await ensure_roles_seed(db)

        print(f"✓ Indexes ensured on {db.name}")
        print("✓ Role catalog seeded" if seeded else "✓ Role catalog already present")
    finally:
        await close_database()


if __name__ == "__main__":
    asyncio.run(init_db())
