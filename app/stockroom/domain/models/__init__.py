from .inventory_item import InventoryItem  # noqa: F401
from .stock_movement import StockMovement  # noqa: F401
from .supply_request import SupplyRequest  # noqa: F401
