from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from stockroom.domain.enums import SupplyRequestStatus


class ById(BaseModel):
    """Reference a catalog item by its identifier."""

    kind: Literal["id"] = "id"
    item_id: UUID


class ByName(BaseModel):
    """Reference a catalog item by name, matched case-insensitively."""

    kind: Literal["name"] = "name"
    name: str


ItemReference = Annotated[ById | ByName, Field(discriminator="kind")]


class SupplyRequestLineInput(BaseModel):
    """A line as submitted by the requester, before resolution against the catalog."""

    item: ItemReference
    qty: int = Field(..., description="Requested quantity, lines with a non-positive quantity are dropped")


class SupplyRequestLine(BaseModel):
    """
    A resolved request line.

    `name` and `unit` are copied from the catalog when the line is resolved, so the
    line keeps displaying correctly if the catalog entry is renamed later.
    """

    item_id: UUID
    name: str
    unit: str = ""
    qty: int = Field(..., gt=0)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class SupplyRequestCreate(BaseModel):
    """Schema for raising a supply request."""

    track_id: str = Field(..., description="The requesting location")
    items: list[SupplyRequestLineInput] = Field(..., description="Requested lines")
    note: str | None = Field(default=None, description="Free-text note for the stock room")
    photo_url: str | None = Field(default=None, description="Reference to an attached photo")


class SupplyRequestResponse(BaseModel):
    """Schema for supply request response data."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    track_id: str
    status: SupplyRequestStatus
    items: list[SupplyRequestLine]
    reserved_items: list[SupplyRequestLine]
    note: str | None = None
    photo_url: str | None = None
    requested_by: str | None = None
    approved_at: datetime | None = None
    approved_by: str | None = None
    dispatched_at: datetime | None = None
    dispatched_by: str | None = None
    cancelled_at: datetime | None = None
    cancelled_by: str | None = None
    version: int
    created_datetime: datetime
    updated_datetime: datetime | None = None
