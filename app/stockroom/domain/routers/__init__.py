from .health.endpoints import router as health_router  # noqa: F401
from .inventory.endpoints import router as inventory_router  # noqa: F401
from .supply_request.endpoints import router as supply_request_router  # noqa: F401
