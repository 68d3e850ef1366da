import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pakproperty.config import settings
from pakproperty.db import create_tables, get_session
from pakproperty.main import app
from pakproperty.models import Property, User
from pakproperty.security import create_access_token, hash_password

DESCRIPTION = "A bright and airy family home with a lawn, two car porch and a quiet street."

@pytest.fixture(autouse=True)
def media_root(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "MEDIA_ROOT", str(tmp_path / "media"))
    monkeypatch.setattr(settings, "SUPABASE_URL", None)
    monkeypatch.setattr(settings, "REDIS_URL", None)
    return tmp_path / "media"

@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(engine)
    factory = async_sessionmaker(engine, expire_on_commit=False)

    async def override_get_session():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    yield factory
    app.dependency_overrides.clear()
    await engine.dispose()

@pytest_asyncio.fixture
async def client(session_factory):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

@pytest_asyncio.fixture
async def make_user(session_factory):
    counter = {"n": 0}

    async def _make_user(role="owner", **fields):
        counter["n"] += 1
        async with session_factory() as session:
            user = User(
                first_name=fields.pop("first_name", "Test"),
                last_name=fields.pop("last_name", role.title()),
                email=fields.pop("email", f"{role}{counter['n']}@example.com"),
                password_hash=hash_password(fields.pop("password", "Password123")),
                role=role,
                **fields,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
        return user

    return _make_user

def auth(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}

def property_fields(**overrides) -> dict:
    """Model-level field values for a listing inserted straight into the store."""
    location = {"address": "House 12, Street 4", "city": "Karachi", "area": "DHA Phase 5"}
    location.update(overrides.pop("location", {}))
    specifications = {"bedrooms": 3, "bathrooms": 2}
    specifications.update(overrides.pop("specifications", {}))
    fields = {
        "title": "Spacious family house in DHA",
        "description": DESCRIPTION,
        "property_type": "house",
        "category": "residential",
        "rent": 80000,
        "location": location,
        "specifications": specifications,
        "area": {"size": 10, "unit": "marla"},
        "features": {"furnishing": "unfurnished", "condition": "good"},
        "status": "available",
    }
    fields.update(overrides)
    return fields

@pytest_asyncio.fixture
async def make_property(session_factory):
    async def _make_property(owner, **overrides):
        async with session_factory() as session:
            prop = Property(owner_id=owner.id, **property_fields(**overrides))
            session.add(prop)
            await session.commit()
            await session.refresh(prop)
        return prop

    return _make_property

async def stored_status(session_factory, property_id) -> str:
    async with session_factory() as session:
        prop = await session.get(Property, property_id)
        return prop.status
