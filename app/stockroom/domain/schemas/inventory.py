from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from stockroom.core.constants import DEFAULT_CATEGORY, DEFAULT_UNIT
from stockroom.domain.enums import MovementType


class InventoryItemBase(BaseModel):
    """Base inventory item schema with common fields."""

    name: str = Field(..., description="Display name of the item")
    unit: str = Field(default=DEFAULT_UNIT, description="Unit of measure, e.g. pcs or can")
    category: str = Field(default=DEFAULT_CATEGORY, description="Grouping label")
    min_qty: int = Field(default=0, description="Reorder threshold")
    max_qty: int = Field(default=0, description="Target stocking level, 0 when unset")


class InventoryItemCreate(InventoryItemBase):
    """Schema for creating a new inventory item."""

    initial_qty: int = Field(default=0, description="Stock on hand when the item is registered")


class StockChangeRequest(BaseModel):
    """Schema for receiving or issuing stock."""

    qty: int = Field(..., description="Amount to add or remove, must be positive")
    reason: str | None = Field(default=None, description="Why the stock changed")


class InventoryItemResponse(InventoryItemBase):
    """Schema for inventory item response data."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    qty: int
    reserved_qty: int
    available_qty: int
    reorder_qty: int
    is_low: bool
    is_critical: bool
    is_overstocked: bool
    version: int
    created_datetime: datetime
    updated_datetime: datetime | None = None


class StockMovementResponse(BaseModel):
    """Schema for stock movement response data."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    item_id: UUID
    movement_type: MovementType
    qty: int
    delta: int
    reason: str | None = None
    actor_id: str | None = None
    created_datetime: datetime


class CategoryGroup(BaseModel):
    """A category label with the items filed under it."""

    category: str
    items: list[InventoryItemResponse]
