"""
Test configuration and fixtures for the PropertyHub API.
Provides a per-test SQLite database, dependency overrides, and test data factories.
"""

import os
import tempfile

# Settings and the application engine are created at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "testing"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["CACHE_BACKEND"] = "memory"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="propertyhub-uploads-")

import io
import uuid
from decimal import Decimal
from typing import AsyncGenerator, Dict, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import propertyhub.models  # noqa: F401  registers every table on Base.metadata
from propertyhub.database import Base, get_db, get_session_factory
from propertyhub.main import app
from propertyhub.models.developer import Developer
from propertyhub.models.property import Property, PropertyStatus
from propertyhub.models.user import User, UserRole
from propertyhub.repositories.developer import DeveloperRepository
from propertyhub.repositories.property import PropertyRepository
from propertyhub.repositories.user import UserRepository
from propertyhub.services.storage import LocalObjectStorage, get_object_storage
from propertyhub.utils.auth import create_access_token, hash_password
from propertyhub.utils.cache import InMemoryCacheBackend, get_cache_backend
from propertyhub.utils.rate_limit import InMemoryRateLimiter, get_rate_limiter


class FakeClock:
    """Manually advanced clock for TTL and rate-limit windows."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
async def test_engine(tmp_path):
    """File-backed SQLite database, so concurrent read sessions see committed rows."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session used by tests to seed and inspect data."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_backend(clock) -> InMemoryCacheBackend:
    return InMemoryCacheBackend(max_entries=100, clock=clock)


@pytest.fixture
def rate_limiter(clock) -> InMemoryRateLimiter:
    return InMemoryRateLimiter(clock=clock)


@pytest.fixture
def storage(tmp_path) -> LocalObjectStorage:
    return LocalObjectStorage(root=tmp_path / "uploads", base_url="http://test/uploads")


@pytest.fixture
async def async_client(
    session_factory,
    cache_backend,
    rate_limiter,
    storage
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client with database, cache, rate limiter and storage overridden."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_cache_backend] = lambda: cache_backend
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    app.dependency_overrides[get_object_storage] = lambda: storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    async def create_user(
        db: AsyncSession,
        email: Optional[str] = None,
        password: str = "testpassword123",
        name: str = "Test User",
        role: UserRole = UserRole.USER,
        is_active: bool = True
    ) -> User:
        return await UserRepository(db).create({
            "name": name,
            "email": email or f"user{uuid.uuid4().hex[:8]}@example.com",
            "hashed_password": hash_password(password),
            "role": role,
            "is_active": is_active,
        })


class DeveloperFactory:
    """Factory for creating test developers."""

    @staticmethod
    async def create_developer(
        db: AsyncSession,
        name: str = "Skyline Developments",
        slug: Optional[str] = None,
        is_active: bool = True,
        **overrides
    ) -> Developer:
        data = {
            "name": name,
            "slug": slug or f"{name.lower().replace(' ', '-')}-{uuid.uuid4().hex[:6]}",
            "is_active": is_active,
            "featured": False,
        }
        data.update(overrides)
        return await DeveloperRepository(db).create(data)


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(**overrides) -> dict:
        data = {
            "title": "Marina View Apartment",
            "description": "Bright apartment with a view of the marina",
            "price": Decimal("500000"),
            "property_type": "apartment",
            "status": PropertyStatus.FOR_SALE,
            "is_offplan": False,
            "location": "Dubai Marina",
            "bedrooms": 2,
            "bathrooms": 2,
            "area": 1200,
            "images": [],
            "features": ["Pool", "Gym"],
            "main_image": "https://images.example.com/default.jpg",
            "featured": False,
        }
        data.update(overrides)
        return data

    @staticmethod
    async def create_property(db: AsyncSession, **overrides) -> Property:
        return await PropertyRepository(db).create(PropertyFactory.create_property_data(**overrides))


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token(user_id=user.id, email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


def make_image(image_format: str = "PNG") -> bytes:
    """A tiny valid image in the given format."""
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color=(200, 30, 30)).save(buffer, format=image_format)
    return buffer.getvalue()


# Common test fixtures
@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(
        db_session, email="admin@example.com", name="Site Admin", role=UserRole.ADMIN
    )


@pytest.fixture
async def agent_user(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(
        db_session, email="agent@example.com", name="Amira Haddad", role=UserRole.AGENT
    )


@pytest.fixture
def admin_headers(admin_user: User) -> Dict[str, str]:
    return auth_headers(admin_user)
