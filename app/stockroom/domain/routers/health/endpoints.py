from fastapi import APIRouter
from fastapi.responses import JSONResponse
from stockroom.core.database.session import engine
from stockroom.core.database.utils import check_db_health

router = APIRouter()


@router.get("/", include_in_schema=False)
async def health_check() -> JSONResponse:
    """
    Basic health check endpoint to verify the stock room and its database are reachable.
    """
    database = await check_db_health(engine)
    healthy = database["status"] == "ok"

    return JSONResponse(
        status_code=200 if healthy else 503,
        content={"status": "healthy" if healthy else "unhealthy", "database": database},
    )
