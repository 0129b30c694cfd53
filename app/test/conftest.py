"""
Pytest configuration and fixtures.
"""
import logging
import uuid
from typing import Optional

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.config import ConfigFile, get_config
from app.create_app import get_app
from app.database import Base
from app.database.base import get_db_url, get_engine_kw
from app.database.session_manager.db_session import Database
from app.pydantic_models.reference_tables import EngineSettings, ReferenceTables

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


@pytest.fixture(scope="session")
def test_config():
    """
    Get test configuration.

    Returns configuration with the sqlite test database settings.
    """
    return get_config(ConfigFile.TEST)


@pytest_asyncio.fixture(scope="function", autouse=True)
async def initialize_db_session(test_config):
    """
    Initialize the Database singleton on a clean schema.

    Drops and recreates every table before each test and drops them again
    afterwards.
    """
    async_db_url = get_db_url(test_config)
    Database.init(async_db_url, engine_kw=get_engine_kw(async_db_url))

    async with Database.engine().begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with Database.engine().begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await Database.close()


@pytest.fixture(scope="session")
def reference_tables(test_config):
    return ReferenceTables.from_config(test_config)


@pytest.fixture(scope="session")
def engine_settings(test_config):
    return EngineSettings.from_config(test_config)


@pytest_asyncio.fixture(scope="function")
async def test_app(test_config):
    """
    Create FastAPI application with test configuration.
    """
    app = get_app(ConfigFile.TEST)
    app.state.config = test_config

    yield app


@pytest_asyncio.fixture(scope="function")
async def test_async_client(test_app):
    """
    Create async HTTP client for API testing.

    Uses httpx AsyncClient with ASGITransport for testing FastAPI endpoints.
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(
        transport=transport, base_url="http://localhost:8000", follow_redirects=True
    ) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def test_db_session():
    """
    Provide database session for tests.

    Creates async session using Database context manager.
    """
    async with Database() as session:
        yield session


@pytest.fixture
def auth_headers(test_config):
    """
    Build a bearer header for a user.

    Usage:
        headers = auth_headers(user_id, organization_id)
    """
    auth_config = test_config.section("auth")

    def _headers(user_id: uuid.UUID, organization_id: Optional[uuid.UUID] = None, **claims):
        payload = {"sub": str(user_id), **claims}
        if organization_id is not None:
            payload["organization_id"] = str(organization_id)
        token = jwt.encode(
            payload, auth_config["jwt_secret"], algorithm=auth_config["jwt_algorithm"]
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
