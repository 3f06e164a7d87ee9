import os
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient

# Load environment variables from .env file
load_dotenv()

# Never provision indexes against a real server from the test process
os.environ.setdefault("SKIP_INDEX_SEED", "true")

from app.core.roles import ROLES_COLLECTION, ensure_roles_seed  # noqa: E402
from app.database import ensure_indexes, get_db  # noqa: E402
from app.main import app  # noqa: E402
from tests.fakes import FakeDatabase  # noqa: E402


@pytest_asyncio.fixture
async def db() -> FakeDatabase:
    """Empty in-memory database with the production indexes declared."""
    database = FakeDatabase()
    await ensure_indexes(database)
    return database


@pytest_asyncio.fixture
async def roles(db: FakeDatabase) -> dict[str, object]:
    """Seeded role catalog as ``{name: ObjectId}``."""
    await ensure_roles_seed(db)
    docs = await db[ROLES_COLLECTION].find({}).to_list(None)
    return {doc["name"]: doc["_id"] for doc in docs}


@pytest_asyncio.fixture
async def client(db: FakeDatabase) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client bound to the in-memory database."""

    async def override_get_db() -> AsyncGenerator[FakeDatabase, None]:
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_patient_data() -> dict:
    """Patient body using the legacy intake field names."""
    return {
        "_id": "0102030405",
        "nombres": "  ana   maría ",
        "apellidos": "pérez  lópez",
        "edad": 34,
        "genero": "femenino",
        "telefono": " 0991234567 ",
        "correo": "Ana.Perez@Correo.ec",
        "tipo_sangre": "o positivo",
    }


@pytest.fixture
def sample_user_data() -> dict:
    """Dentist user body."""
    return {
        "names": "Carlos",
        "surnames": "Mena",
        "email": "Carlos.Mena@DentalFlow.ec",
        "role_name": "Dentist",
        "specialty": "Orthodontics",
    }


@pytest.fixture
def tomorrow() -> str:
    """ISO timestamp one day ahead."""
    return (datetime.now(UTC) + timedelta(days=1)).replace(microsecond=0).isoformat()
