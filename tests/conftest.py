"""Shared test fixtures and configuration."""
import pytest
import os
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ADMIN_PASSWORD", "testpass123")
os.environ.setdefault("STORE_NAME", "Test Tea House")
os.environ.setdefault("TAX_RATE", "0.08")

from teapos.main import app
from teapos.db.database import Base, get_db
from teapos.core.dependencies import get_session_registry
from teapos.services.catalog.defaults import load_default_catalog
from teapos.services.catalog.repository import CatalogRepository
from teapos.services.catalog.sql_catalog import SqlCatalogProvider
from teapos.services.session.manager import SessionRegistry


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "testpass123"

TAX_RATE = Decimal("0.08")


def _test_engine():
    return create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
async def test_db_engine():
    """Create test database engine."""
    engine = _test_engine()

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_db(test_db_engine):
    """Create test database session."""
    async_session = async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def default_catalog():
    """The packaged fallback catalog."""
    return load_default_catalog()


@pytest.fixture
def catalog_repository(test_db, default_catalog):
    """Catalog repository backed by the test database."""
    return CatalogRepository(SqlCatalogProvider(test_db), default_catalog)


@pytest.fixture
def session_registry(tmp_path):
    """Session registry writing cart snapshots under tmp_path."""
    return SessionRegistry(tmp_path / "carts", TAX_RATE, checkout_timeout_seconds=5.0)


@pytest.fixture
def override_get_db():
    """Override get_db with a private in-memory database.

    Tables are created on first use so that every await happens on the
    TestClient's event loop.
    """
    engine = _test_engine()
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    created = []

    async def _override_get_db():
        if not created:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            created.append(True)
        async with async_session() as session:
            yield session

    return _override_get_db


@pytest.fixture
def test_client(override_get_db, session_registry):
    """Create FastAPI test client with overrides."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_registry] = lambda: session_registry

    with TestClient(app) as client:
        yield client

    # Clear overrides
    app.dependency_overrides.clear()


@pytest.fixture
def authenticated_client(test_client, clean_auth_sessions):
    """Create test client with valid session cookie."""
    response = test_client.post("/api/auth/login", json={"password": TEST_PASSWORD})
    assert response.status_code == 200

    # Session cookie is automatically stored in test_client
    return test_client


@pytest.fixture
def clean_auth_sessions():
    """Clean up authentication sessions before and after tests."""
    from teapos.api import auth
    auth._sessions.clear()
    yield
    auth._sessions.clear()
