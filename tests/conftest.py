"""Pytest configuration and fixtures."""

import random
from datetime import datetime

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from db.database import init_db
from models.url import UrlMapping
from services.code_generator import CodeGenerator
from services.settings import ShortenerSettings
from services.store import SQLAlchemyMappingStore

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
NOW = datetime(2024, 6, 1, 12, 0, 0)


class SequenceRandom(random.Random):
    """Random source whose 64-bit draws come from a fixed list, cycled."""

    def __init__(self, values):
        super().__init__(0)
        self.values = list(values)
        self.calls = 0

    def getrandbits(self, k):
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(session):
    return SQLAlchemyMappingStore(session)


@pytest.fixture
def settings():
    return ShortenerSettings(base_url="https://sho.rt", short_code_length=6, default_expiry_days=7)


@pytest.fixture
def generator():
    return CodeGenerator(length=6, rng=random.Random(1234))


@pytest.fixture
def make_mapping():
    def _make(short_code, original_url="https://example.com/page", label="sho.rt",
              created_at=NOW, expires_at=None, click_count=0):
        return UrlMapping(
            short_code=short_code,
            original_url=original_url,
            label=label,
            created_at=created_at,
            expires_at=expires_at,
            click_count=click_count,
        )

    return _make
