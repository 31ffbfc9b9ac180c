from .inventory_item_repository import InventoryItemRepository  # noqa: F401
from .stock_movement_repository import StockMovementRepository  # noqa: F401
from .supply_request_repository import SupplyRequestRepository  # noqa: F401
