"""Tests for the role catalog and role reconciliation."""

import pytest
from bson import ObjectId

from app.core.roles import ROLE_NAMES, ROLES_COLLECTION, RoleName, ensure_roles_seed, resolve_role


@pytest.mark.asyncio
async def test_seed_inserts_every_role_once(db) -> None:
    """Seeding fills an empty catalog and is a no-op afterwards."""
    assert await ensure_roles_seed(db) is True
    assert await db[ROLES_COLLECTION].count_documents({}) == len(RoleName)

    assert await ensure_roles_seed(db) is False
    assert await db[ROLES_COLLECTION].count_documents({}) == len(RoleName)

    dentist = await db[ROLES_COLLECTION].find_one({"name": "Dentist"})
    assert dentist["description"] == "Clinical care"
    assert dentist["permissions"] == []


@pytest.mark.asyncio
async def test_seed_skips_partial_catalog(db) -> None:
    """A catalog with any role is never extended."""
    await db[ROLES_COLLECTION].insert_one({"name": "Administrator", "permissions": []})
    assert await ensure_roles_seed(db) is False
    assert await db[ROLES_COLLECTION].count_documents({}) == 1


@pytest.mark.asyncio
async def test_resolve_without_role_fields_is_passthrough(db, roles) -> None:
    record = {"names": "Eva"}
    assert await resolve_role(db, record) == record


@pytest.mark.asyncio
async def test_resolve_by_id_fills_name(db, roles) -> None:
    """Only an identifier: the catalog supplies the name."""
    out = await resolve_role(db, {"role_id": str(roles["Assistant"])})
    assert out["role_name"] == "Assistant"
    assert out["role_id"] == roles["Assistant"]


@pytest.mark.asyncio
async def test_resolve_by_unknown_id_leaves_name_unset(db, roles) -> None:
    out = await resolve_role(db, {"role_id": str(ObjectId())})
    assert "role_name" not in out


@pytest.mark.asyncio
async def test_resolve_by_name_fills_id(db, roles) -> None:
    out = await resolve_role(db, {"role_name": RoleName.DENTIST})
    assert out["role_name"] == "Dentist"
    assert out["role_id"] == roles["Dentist"]


@pytest.mark.asyncio
async def test_resolve_ignores_names_outside_catalog(db, roles) -> None:
    """Unknown names pass through for schema validation to reject."""
    out = await resolve_role(db, {"role_name": "Owner"})
    assert out == {"role_name": "Owner"}


@pytest.mark.asyncio
async def test_identifier_wins_over_stale_name(db, roles) -> None:
    """Both present and the id resolves: the catalog name overwrites the sent one."""
    out = await resolve_role(db, {"role_name": "Dentist", "role_id": str(roles["LabTechnician"])})
    assert out["role_name"] == "LabTechnician"
    assert out["role_id"] == roles["LabTechnician"]


@pytest.mark.asyncio
async def test_unresolved_id_falls_back_to_name(db, roles) -> None:
    out = await resolve_role(db, {"role_name": "Assistant", "role_id": str(ObjectId())})
    assert out["role_id"] == roles["Assistant"]


@pytest.mark.asyncio
async def test_unresolved_id_and_name_keep_sent_id(db) -> None:
    """Empty catalog: nothing resolves and the sent id stays as given."""
    sent = str(ObjectId())
    out = await resolve_role(db, {"role_name": "Assistant", "role_id": sent})
    assert out == {"role_name": "Assistant", "role_id": sent}


def test_role_names_follow_enumeration() -> None:
    assert ROLE_NAMES == ["Administrator", "Dentist", "Assistant", "LabTechnician"]
