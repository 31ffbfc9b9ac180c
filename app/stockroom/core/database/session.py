import json
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.ext.asyncio.session import async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from stockroom.core.config import settings
from stockroom.core.logging import get_logger

logger = get_logger(__name__)

# make sure all SQLModel models are imported (stockroom.domain.models) before creating tables
# otherwise, SQLModel metadata will be missing them

DATABASE_URL = str(settings.SQLALCHEMY_DATABASE_URI)


def _engine_options(url: str) -> dict[str, Any]:
    options: dict[str, Any] = {
        "echo": settings.DATABASE_ECHO,
        "pool_pre_ping": True,
        "json_serializer": lambda obj: json.dumps(obj),
    }

    if url.startswith("sqlite"):
        options["connect_args"] = {"timeout": settings.TRANSACTION_TIMEOUT_SECONDS}
    else:
        options.update(pool_recycle=3600, pool_size=20, max_overflow=0)

    return options


engine = create_async_engine(url=DATABASE_URL, **_engine_options(DATABASE_URL))

SessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session."""
    session = SessionLocal()
    try:
        yield session
    finally:
        try:
            await session.close()
        except Exception as e:
            logger.warning("Session unexpectedly closed", exc_info=e)

