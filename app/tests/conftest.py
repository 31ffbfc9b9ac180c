import os
import tempfile
from pathlib import Path

_DATABASE_DIR = tempfile.mkdtemp(prefix="stockroom-tests-")

os.environ["ENVIRONMENT"] = "local"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{Path(_DATABASE_DIR) / 'stockroom.db'}"
os.environ["TRANSACTION_MAX_ATTEMPTS"] = "5"
os.environ["TRANSACTION_TIMEOUT_SECONDS"] = "10"

import httpx  # noqa: E402
import pytest  # noqa: E402
from stockroom.core.database.session import SessionLocal, engine  # noqa: E402
from stockroom.core.database.utils import create_db_and_tables, drop_db_and_tables  # noqa: E402
from stockroom.libs.live_query import LiveQueryService, MemoryLiveQueryConfiguration, teardown_live_query  # noqa: E402
from stockroom.libs.live_query.providers.memory import MemoryLiveQueryProvider  # noqa: E402


@pytest.fixture(autouse=True)
async def database():
    """Give every test an empty schema on a fresh connection pool."""
    await create_db_and_tables(engine)
    try:
        yield engine
    finally:
        await teardown_live_query()
        await drop_db_and_tables(engine)
        await engine.dispose()


@pytest.fixture
async def session():
    async with SessionLocal() as db_session:
        yield db_session


@pytest.fixture
async def other_session():
    """A second, independent session, used to play a concurrent client."""
    async with SessionLocal() as db_session:
        yield db_session


@pytest.fixture
async def live_query():
    provider = MemoryLiveQueryProvider(MemoryLiveQueryConfiguration())
    service = LiveQueryService(provider=provider, session_factory=SessionLocal)
    try:
        yield service
    finally:
        await service.close()


@pytest.fixture
async def client():
    from stockroom.main import app

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client
