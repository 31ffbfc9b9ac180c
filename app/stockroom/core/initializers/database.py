import logging

from sqlalchemy.ext.asyncio.engine import AsyncEngine
from stockroom.core.database.session import engine
from stockroom.core.database.utils import init_db
from tenacity import after_log, before_log, retry, stop_after_attempt, wait_fixed

max_tries = 60 * 5
wait_seconds = 1

logger = logging.getLogger(__name__)


@retry(
    stop=stop_after_attempt(max_tries),
    wait=wait_fixed(wait_seconds),
    before=before_log(logger, logging.INFO),
    after=after_log(logger, logging.WARN),
)
async def init_db_with_retry(db_engine: AsyncEngine) -> None:
    """Wait until the database accepts connections."""
    await init_db(db_engine)


async def main() -> None:
    await init_db_with_retry(engine)


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
