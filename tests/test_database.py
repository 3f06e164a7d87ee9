"""Tests for index provisioning and bootstrap."""

import pytest
from pymongo.errors import OperationFailure

from app.config import settings
from app.core.roles import ROLES_COLLECTION
from app.database import BASE_INDEXES, create_index_safe, init_database
from tests.fakes import FakeDatabase


class RefusingCollection:
    """Collection whose index builds always fail with a given code name."""

    name = "refusing"

    def __init__(self, code_name: str, message: str = "refused"):
        self.code_name = code_name
        self.message = message

    async def create_index(self, keys, **options):
        raise OperationFailure(self.message, code=1, details={"codeName": self.code_name})


@pytest.mark.asyncio
async def test_init_creates_indexes_and_seeds(monkeypatch) -> None:
    monkeypatch.setattr(settings, "skip_index_seed", False)
    db = FakeDatabase()

    await init_database(db)

    names = {name for collection in ("roles", "users") for name in db[collection].indexes}
    assert {"uq_roles_name", "uq_users_email", "ix_users_role_id"} <= names
    total = sum(len(db[name].indexes) for name in {entry[0] for entry in BASE_INDEXES})
    assert total == len(BASE_INDEXES)
    assert await db[ROLES_COLLECTION].count_documents({}) == 4

    # Second boot is harmless
    await init_database(db)
    assert await db[ROLES_COLLECTION].count_documents({}) == 4


@pytest.mark.asyncio
async def test_init_can_be_skipped(monkeypatch) -> None:
    monkeypatch.setattr(settings, "skip_index_seed", True)
    db = FakeDatabase()

    await init_database(db)

    assert await db[ROLES_COLLECTION].count_documents({}) == 0
    assert db[ROLES_COLLECTION].indexes == {}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("code_name", "message"),
    [
        ("IndexOptionsConflict", "refused"),
        ("IndexKeySpecsConflict", "refused"),
        (None, "Index with name: uq_roles_name already exists"),
    ],
)
async def test_create_index_safe_tolerates_existing(code_name, message) -> None:
    collection = RefusingCollection(code_name, message)
    assert await create_index_safe(collection, [("name", 1)], name="uq_roles_name") is None


@pytest.mark.asyncio
async def test_create_index_safe_propagates_other_failures() -> None:
    with pytest.raises(OperationFailure):
        await create_index_safe(RefusingCollection("Unauthorized"), [("name", 1)], name="x")


@pytest.mark.asyncio
async def test_conflicting_index_on_fake_is_tolerated() -> None:
    db = FakeDatabase()
    await db["roles"].create_index([("name", 1)], name="uq_roles_name")

    assert await create_index_safe(db["roles"], [("name", 1)], name="uq_roles_name", unique=True) is None
