from sqlalchemy.ext.asyncio.engine import AsyncEngine
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from stockroom.core.logging import get_logger

logger = get_logger(__name__)


async def init_db(db_engine: AsyncEngine) -> None:
    """Initialize database connection"""
    async with AsyncSession(db_engine) as session:
        (await session.exec(select(1))).all()


async def check_db_health(db_engine: AsyncEngine) -> dict[str, str]:
    """Check database health"""
    try:
        async with AsyncSession(db_engine) as session:
            await session.exec(select(1))
            return {"status": "ok"}
    except Exception as e:
        logger.warning(f"stockroom.core.database.utils.check_db_health:: database is unreachable: {e}")
        return {"status": "error", "details": str(e)}


async def create_db_and_tables(db_engine: AsyncEngine) -> None:
    """
    Create every table registered on the SQLModel metadata.

    Models must be imported beforehand so they are part of the metadata.
    """
    import stockroom.domain.models  # noqa: F401

    async with db_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    logger.info("stockroom.core.database.utils.create_db_and_tables:: tables are ready")


async def drop_db_and_tables(db_engine: AsyncEngine) -> None:
    """Drop every table registered on the SQLModel metadata."""
    import stockroom.domain.models  # noqa: F401

    async with db_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
