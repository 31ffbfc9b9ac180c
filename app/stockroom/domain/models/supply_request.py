from datetime import datetime
from typing import Any

from sqlalchemy import JSON, TEXT, TIMESTAMP, Column, String
from sqlmodel import Field
from stockroom.core.database.mixins import TimestampMixin, UUIDMixin, VersionedMixin
from stockroom.domain.enums import SupplyRequestStatus


class SupplyRequest(UUIDMixin, VersionedMixin, TimestampMixin, table=True):
    """
    Represents a request for stock raised by a location (track).

    Item lines are stored as JSON documents of the form
    `{"item_id": "<uuid>", "name": str, "unit": str, "qty": int}`.

    Attributes:
        id (UUID): The unique identifier for the request.
        track_id (str): The requesting location.
        status (SupplyRequestStatus): Workflow state.
        items (list[dict]): Requested lines, in submission order.
        reserved_items (list[dict]): Lines captured at approval, empty unless approved or dispatched.
        note (str | None): Free-text note from the requester.
        photo_url (str | None): Opaque reference to an attached photo.
        requested_by (str | None): Who raised the request.
        approved_at (datetime | None): When the request was approved.
        approved_by (str | None): Who approved the request.
        dispatched_at (datetime | None): When the stock was handed out.
        dispatched_by (str | None): Who dispatched the request.
        cancelled_at (datetime | None): When the request was cancelled.
        cancelled_by (str | None): Who cancelled the request.
        version (int): Optimistic lock counter.
    """

    track_id: str = Field(max_length=100, nullable=False, index=True)
    status: SupplyRequestStatus = Field(
        default=SupplyRequestStatus.PENDING,
        sa_column=Column(String(16), nullable=False, index=True),
    )
    items: list[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    reserved_items: list[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    note: str | None = Field(default=None, sa_column=Column(TEXT(), nullable=True))
    photo_url: str | None = Field(default=None, sa_column=Column(TEXT(), nullable=True))
    requested_by: str | None = Field(default=None, max_length=255, nullable=True)

    approved_at: datetime | None = Field(default=None, sa_column=Column(TIMESTAMP(timezone=True), nullable=True))
    approved_by: str | None = Field(default=None, max_length=255, nullable=True)
    dispatched_at: datetime | None = Field(default=None, sa_column=Column(TIMESTAMP(timezone=True), nullable=True))
    dispatched_by: str | None = Field(default=None, max_length=255, nullable=True)
    cancelled_at: datetime | None = Field(default=None, sa_column=Column(TIMESTAMP(timezone=True), nullable=True))
    cancelled_by: str | None = Field(default=None, max_length=255, nullable=True)

    def is_pending(self) -> bool:
        return self.status == SupplyRequestStatus.PENDING
