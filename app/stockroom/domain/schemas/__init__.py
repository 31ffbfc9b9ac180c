from .inventory import (  # noqa: F401
    CategoryGroup,
    InventoryItemBase,
    InventoryItemCreate,
    InventoryItemResponse,
    StockChangeRequest,
    StockMovementResponse,
)
from .supply_request import (  # noqa: F401
    ById,
    ByName,
    ItemReference,
    SupplyRequestCreate,
    SupplyRequestLine,
    SupplyRequestLineInput,
    SupplyRequestResponse,
)
