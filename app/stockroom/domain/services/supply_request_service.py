from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from sqlmodel.ext.asyncio.session import AsyncSession
from stockroom.core.database.decorators import optimistic, transactional
from stockroom.core.exceptions import errors
from stockroom.core.logging import get_logger
from stockroom.domain.enums import SupplyRequestStatus
from stockroom.domain.models.supply_request import SupplyRequest
from stockroom.domain.repositories.inventory_item_repository import InventoryItemRepository
from stockroom.domain.repositories.supply_request_repository import SupplyRequestRepository
from stockroom.domain.schemas import SupplyRequestLine, SupplyRequestLineInput
from stockroom.domain.services.catalog_index import CatalogIndex
from stockroom.domain.services.reservation_service import ReservationService
from stockroom.libs.live_query import LiveQueryService, get_live_query_service

logger = get_logger(__name__)


class SupplyRequestService:
    """
    Service for the supply request workflow.

    States move pending -> approved -> dispatched, approved -> pending on release
    and pending -> cancelled. Transitions that touch stock are delegated to the
    `ReservationService`.
    """

    def __init__(self, session: AsyncSession, live_query: LiveQueryService | None = None):
        self.session = session
        self.item_repository = InventoryItemRepository(session)
        self.request_repository = SupplyRequestRepository(session)
        self.live_query = live_query or get_live_query_service()
        self.reservation_service = ReservationService(session, live_query=self.live_query)

    async def create_supply_request(
        self,
        track_id: str,
        items: list[SupplyRequestLineInput | dict[str, Any]],
        note: str | None = None,
        requested_by: str | None = None,
        photo_url: str | None = None,
    ) -> SupplyRequest:
        """
        Raise a pending supply request.

        Malformed lines, lines with a non-positive quantity and lines whose reference
        matches no catalog item are dropped. Lines pointing at the same item are merged
        in the position of the first one.

        Raises:
            ValidationError: no track, no lines, or no line left after cleaning
        """
        if not items:
            raise errors.ValidationError(detail="No items in request.")

        clean_track_id = (track_id or "").strip()
        if not clean_track_id:
            raise errors.ValidationError(detail="A requesting track is required.", field="track_id")

        lines = []
        for line in items:
            try:
                lines.append(SupplyRequestLineInput.model_validate(line))
            except PydanticValidationError as e:
                logger.warning(
                    f"stockroom.domain.services.supply_request_service.create_supply_request:: dropping malformed line {line!r}: {e.error_count()} error(s)"
                )

        if not lines:
            raise errors.ValidationError(detail="No items in request.")

        return await self._create_supply_request(
            track_id=clean_track_id,
            lines=lines,
            note=(note or "").strip() or None,
            requested_by=requested_by,
            photo_url=photo_url or None,
        )

    @transactional
    async def _create_supply_request(
        self,
        track_id: str,
        lines: list[SupplyRequestLineInput],
        note: str | None,
        requested_by: str | None,
        photo_url: str | None,
    ) -> SupplyRequest:
        catalog = await CatalogIndex.build(self.item_repository)

        merged: dict[UUID, SupplyRequestLine] = {}
        for line in lines:
            if line.qty <= 0:
                continue

            item = catalog.resolve(line.item)
            if item is None:
                logger.warning(
                    f"stockroom.domain.services.supply_request_service.create_supply_request:: dropping unknown item {line.item!r}"
                )
                continue

            if item.id in merged:
                existing = merged[item.id]
                merged[item.id] = existing.model_copy(update={"qty": existing.qty + line.qty})
            else:
                merged[item.id] = SupplyRequestLine(item_id=item.id, name=item.name, unit=item.unit, qty=line.qty)

        if not merged:
            raise errors.ValidationError(detail="No items in request.")

        request = await self.request_repository.add(
            SupplyRequest(
                track_id=track_id,
                status=SupplyRequestStatus.PENDING,
                items=[line.to_document() for line in merged.values()],
                reserved_items=[],
                note=note,
                photo_url=photo_url,
                requested_by=requested_by,
            )
        )

        logger.info(
            f"stockroom.domain.services.supply_request_service.create_supply_request:: request {request.id} "
            f"raised for {track_id} with {len(merged)} line(s)"
        )

        await self.live_query.notify_changed(SupplyRequest)
        return request

    async def approve(self, request_id: UUID, actor: str | None = None) -> SupplyRequest:
        return await self.reservation_service.approve(request_id, actor)

    async def unapprove(self, request_id: UUID, actor: str | None = None) -> SupplyRequest:
        return await self.reservation_service.unapprove(request_id, actor)

    async def dispatch(self, request_id: UUID, actor: str | None = None) -> SupplyRequest:
        return await self.reservation_service.dispatch(request_id, actor)

    @optimistic
    async def cancel(self, request_id: UUID, actor: str | None = None) -> SupplyRequest:
        """
        Withdraw a pending request. Nothing was reserved, so no stock changes.

        Raises:
            NotFoundError: the request does not exist
            StateError: the request is not pending
        """
        request = await self.request_repository.get_or_404(request_id, fresh=True)

        if not request.is_pending():
            raise errors.StateError(
                detail=f"Request is already {request.status}.",
                current_status=str(request.status),
            )

        await self.request_repository.update(
            request,
            {
                "status": SupplyRequestStatus.CANCELLED,
                "cancelled_at": datetime.now(UTC),
                "cancelled_by": actor,
            },
        )

        logger.info(f"stockroom.domain.services.supply_request_service.cancel:: request {request_id} cancelled")

        await self.live_query.notify_changed(SupplyRequest)
        return request

    async def get_request(self, request_id: UUID) -> SupplyRequest:
        """
        Raises:
            NotFoundError: the request does not exist
        """
        return await self.request_repository.get_or_404(request_id, fresh=True)

    async def list_requests(
        self,
        status: SupplyRequestStatus | None = None,
        track_id: str | None = None,
    ) -> list[SupplyRequest]:
        """List requests newest first."""
        return await self.request_repository.list_requests(status=status, track_id=track_id)
