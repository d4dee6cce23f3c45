"""
Test Suite Configuration
"""
import os

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from backoffice.config import Settings
from backoffice.database.models import Base
from backoffice.gateway import InMemoryGateway, InMemoryObjectStorage, SQLAlchemyGateway
from backoffice.files import UploadedFile
from backoffice.services.registry import ServiceRegistry

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        APP_ENV="testing",
        DEBUG=True,
    )


@pytest.fixture
def gateway() -> InMemoryGateway:
    """Empty in-memory gateway"""
    return InMemoryGateway()


@pytest.fixture
def storage() -> InMemoryObjectStorage:
    """In-memory object storage"""
    return InMemoryObjectStorage(public_base_url="https://cdn.example.test")


@pytest.fixture
def registry(gateway, storage) -> ServiceRegistry:
    """All services over the in-memory gateway"""
    return ServiceRegistry(gateway, storage)


@pytest.fixture
def png_file() -> UploadedFile:
    return UploadedFile(filename="photo.png", content=PNG_BYTES, content_type="image/png")


@pytest.fixture
async def test_engine():
    """Create test database engine"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def sql_gateway(test_engine) -> SQLAlchemyGateway:
    """Gateway over the SQLite test engine"""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return SQLAlchemyGateway(session_factory)
