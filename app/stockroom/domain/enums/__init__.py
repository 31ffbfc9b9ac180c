from .inventory import MovementType, StockSortOrder  # noqa: F401
from .supply_request import SupplyRequestStatus  # noqa: F401
