"""Shared test fixtures for the incident intake tests."""

from __future__ import annotations

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from incident_intake.config import Settings
from incident_intake.database import Base
from incident_intake.models import incident  # noqa: F401
from incident_intake.store import StoreGateway


class RecordingEngineFactory:
    """Stands in for create_async_engine, pointing every pool at a SQLite file.

    Pool sizing and timeouts are taken from the call, so tests exercise the
    limits the settings produce. Only the schema mapping is dropped, since
    SQLite has no schemas.
    """

    def __init__(self, url: str) -> None:
        self.url = url
        self.calls: list[tuple[object, dict]] = []
        self.engines: list[AsyncEngine] = []

    def __call__(self, url, **kwargs) -> AsyncEngine:
        self.calls.append((url, kwargs))
        options = {key: value for key, value in kwargs.items() if key != "execution_options"}
        engine = create_async_engine(self.url, **options)
        self.engines.append(engine)
        return engine

    async def dispose_all(self) -> None:
        for engine in self.engines:
            await engine.dispose()


def make_settings(**overrides) -> Settings:
    values = {
        "DB_SERVER": "sql.example.test",
        "DB_NAME": "incidents",
        "DB_USER": "intake",
        "DB_PASSWORD": "s3cret",
        "DB_SCHEMA": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest_asyncio.fixture
async def sqlite_url(tmp_path):
    """A fresh SQLite database file holding an empty Incidents table."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'incidents.db'}"
    engine = create_async_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    return url


@pytest_asyncio.fixture
async def engine_factory(sqlite_url):
    factory = RecordingEngineFactory(sqlite_url)
    yield factory
    await factory.dispose_all()


@pytest.fixture
def gateway(settings: Settings, engine_factory: RecordingEngineFactory) -> StoreGateway:
    return StoreGateway(settings, engine_factory=engine_factory)
