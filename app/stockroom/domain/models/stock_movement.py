from uuid import UUID

from sqlalchemy import TEXT, CheckConstraint, Column, String
from sqlmodel import Field
from stockroom.core.database.mixins import CreatedDateTimeMixin, UUIDMixin
from stockroom.domain.enums import MovementType


class StockMovement(UUIDMixin, CreatedDateTimeMixin, table=True):
    """
    Represents an append-only audit record of a stock change.

    Movements are never updated or deleted once written.

    Attributes:
        id (UUID): The unique identifier for the movement.
        item_id (UUID): ID of the inventory item.
        movement_type (MovementType): Direction of the change.
        qty (int): Amount moved, always positive.
        reason (str | None): Free-text reason, e.g. "initial stock" or "dispatch:<track>".
        actor_id (str | None): Who performed the change.
        created_datetime (datetime): When the movement occurred.
    """

    __table_args__ = (CheckConstraint("qty > 0", name="chk_stock_movement_qty_positive"),)

    item_id: UUID = Field(foreign_key="inventory_items.id", nullable=False, index=True)
    movement_type: MovementType = Field(sa_column=Column(String(16), nullable=False))
    qty: int = Field(nullable=False)
    reason: str | None = Field(default=None, sa_column=Column(TEXT(), nullable=True))
    actor_id: str | None = Field(default=None, max_length=255, nullable=True)

    @property
    def delta(self) -> int:
        """Signed change applied to the on-hand quantity."""
        return self.qty if self.movement_type == MovementType.RECEIVE else -self.qty
