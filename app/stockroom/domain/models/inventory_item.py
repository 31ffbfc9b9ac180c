import math

from sqlalchemy import CheckConstraint, Column, String
from sqlmodel import Field
from stockroom.core.constants import CRITICAL_STOCK_RATIO, DEFAULT_CATEGORY, DEFAULT_UNIT
from stockroom.core.database.mixins import TimestampMixin, UUIDMixin, VersionedMixin


class InventoryItem(UUIDMixin, VersionedMixin, TimestampMixin, table=True):
    """
    Represents a stock record in the stock room.

    Attributes:
        id (UUID): The unique identifier for the item.
        name (str): Display name, unique case-insensitively.
        name_key (str): Lower-cased name used for lookups and the uniqueness constraint.
        unit (str): Unit of measure, e.g. "pcs", "can".
        category (str): Grouping label.
        qty (int): Quantity physically on hand.
        reserved_qty (int): Quantity promised to approved, not yet dispatched requests.
        min_qty (int): Reorder threshold.
        max_qty (int): Target stocking level, 0 when unset.
        version (int): Optimistic lock counter.
        created_datetime (datetime): The timestamp when the item was created.
        updated_datetime (datetime | None): The timestamp when the item was last updated.
    """

    __table_args__ = (
        CheckConstraint("qty >= 0", name="chk_inventory_item_qty_positive"),
        CheckConstraint("reserved_qty >= 0", name="chk_inventory_item_reserved_positive"),
        CheckConstraint("reserved_qty <= qty", name="chk_inventory_item_reserved_not_exceed_qty"),
        CheckConstraint("min_qty >= 0", name="chk_inventory_item_min_positive"),
        CheckConstraint("max_qty >= 0", name="chk_inventory_item_max_positive"),
    )

    name: str = Field(sa_column=Column(String(255), nullable=False))
    name_key: str = Field(sa_column=Column(String(255), nullable=False, unique=True, index=True))
    unit: str = Field(default=DEFAULT_UNIT, max_length=32, nullable=False)
    category: str = Field(default=DEFAULT_CATEGORY, max_length=100, nullable=False, index=True)
    qty: int = Field(default=0, nullable=False)
    reserved_qty: int = Field(default=0, nullable=False)
    min_qty: int = Field(default=0, nullable=False)
    max_qty: int = Field(default=0, nullable=False)

    @property
    def available_qty(self) -> int:
        """Calculate available stock as qty - reserved_qty."""
        return self.qty - self.reserved_qty

    @property
    def is_low(self) -> bool:
        return self.qty <= self.min_qty

    @property
    def is_critical(self) -> bool:
        return self.min_qty > 0 and self.qty <= math.floor(self.min_qty * CRITICAL_STOCK_RATIO)

    @property
    def is_overstocked(self) -> bool:
        return self.max_qty > 0 and self.qty > self.max_qty

    @property
    def reorder_qty(self) -> int:
        """
        Quantity to order so that available stock gets back to the minimum.

        Reserved stock is already spoken for, so it does not count towards the minimum.
        """
        if self.min_qty <= 0:
            return 0

        return max(0, self.min_qty - self.available_qty)

    def can_reserve(self, quantity: int) -> bool:
        """
        Check if the requested quantity can be reserved from available stock.

        Args:
            quantity: Quantity to reserve

        Returns:
            True if quantity can be reserved, False otherwise
        """
        return self.available_qty >= quantity
