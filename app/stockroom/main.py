import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi_problem.handler import add_exception_handler
from stockroom.core.config import settings
from stockroom.core.database.session import engine
from stockroom.core.database.utils import create_db_and_tables
from stockroom.core.exceptions.handler import eh
from stockroom.core.initializers.database import init_db_with_retry
from stockroom.core.logging import get_logger, get_logging_config, setup_exception_logging, setup_logging
from stockroom.domain.routers import health_router, inventory_router, supply_request_router
from stockroom.libs.live_query import setup_live_query, teardown_live_query

if settings.ENVIRONMENT in ["staging", "production"]:
    setup_logging(config_override=get_logging_config())
    setup_exception_logging()


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    """
    Application lifespan manager with enhanced logging.
    """
    try:
        logger.info("Application startup initiated", extra={"event_type": "app_startup_start"})

        await init_db_with_retry(engine)
        await create_db_and_tables(engine)
        await setup_live_query()

        logger.info(
            "Application startup completed successfully",
            extra={
                "event_type": "app_startup_complete",
                "environment": settings.ENVIRONMENT,
                "app_version": settings.APP_VERSION,
            },
        )

        yield

    except Exception as exc:
        logger.error(
            "Application startup failed",
            exc_info=True,
            extra={
                "event_type": "app_startup_failed",
                "exception_type": type(exc).__name__,
                "exception_message": str(exc),
            },
        )
        raise
    finally:
        try:
            logger.info(
                "Application shutdown initiated",
                extra={"event_type": "app_shutdown_start"},
            )

            await teardown_live_query()

            await engine.dispose()
            logger.info("Database engine disposed", extra={"event_type": "db_engine_disposed"})

            logger.info(
                "Application shutdown completed",
                extra={"event_type": "app_shutdown_complete"},
            )

        except TimeoutError:
            logger.warning(
                "Database shutdown timeout - ungraceful shutdown",
                extra={"event_type": "db_shutdown_timeout"},
            )
        except asyncio.CancelledError:
            logger.info(
                "Application shutdown cancelled - graceful shutdown",
                extra={"event_type": "app_shutdown_cancelled"},
            )
        except Exception as exc:
            logger.error(
                "Error during application shutdown",
                exc_info=True,
                extra={
                    "event_type": "app_shutdown_error",
                    "exception_type": type(exc).__name__,
                    "exception_message": str(exc),
                },
            )


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

add_exception_handler(app, eh)


# Middlewares
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).strip("/") for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


app.add_middleware(GZipMiddleware, compresslevel=5)


# Routers (V1)
app.include_router(inventory_router, prefix=f"{settings.API_V1_STR}/inventory", tags=["Inventory"])
app.include_router(
    supply_request_router,
    prefix=f"{settings.API_V1_STR}/supply-requests",
    tags=["Supply Requests"],
)
app.include_router(health_router, prefix="/health", include_in_schema=False)
