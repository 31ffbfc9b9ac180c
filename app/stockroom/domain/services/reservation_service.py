from __future__ import annotations

from collections import defaultdict
from datetime import UTC, datetime
from uuid import UUID

from sqlmodel.ext.asyncio.session import AsyncSession
from stockroom.core.constants import DISPATCH_REASON_PREFIX
from stockroom.core.database.decorators import optimistic
from stockroom.core.exceptions import errors
from stockroom.core.logging import add_to_log_context, get_logger
from stockroom.domain.enums import MovementType, SupplyRequestStatus
from stockroom.domain.models.inventory_item import InventoryItem
from stockroom.domain.models.stock_movement import StockMovement
from stockroom.domain.models.supply_request import SupplyRequest
from stockroom.domain.repositories.inventory_item_repository import InventoryItemRepository
from stockroom.domain.repositories.stock_movement_repository import StockMovementRepository
from stockroom.domain.repositories.supply_request_repository import SupplyRequestRepository
from stockroom.domain.schemas import SupplyRequestLine
from stockroom.domain.services.catalog_index import CatalogIndex
from stockroom.libs.live_query import LiveQueryService, get_live_query_service

logger = get_logger(__name__)


class ReservationService:
    """
    Reservation transaction engine.

    Approve, dispatch and unapprove each run as one optimistic transaction: every
    row the decision depends on is read inside the transaction, and the versioned
    writes make the commit fail if any of them changed in the meantime, in which
    case the whole protocol runs again on fresh data. Business-rule failures abort
    the transaction and are never retried.
    """

    def __init__(self, session: AsyncSession, live_query: LiveQueryService | None = None):
        self.session = session
        self.item_repository = InventoryItemRepository(session)
        self.movement_repository = StockMovementRepository(session)
        self.request_repository = SupplyRequestRepository(session)
        self.live_query = live_query or get_live_query_service()

    async def _load_request(self, request_id: UUID, expected: SupplyRequestStatus) -> SupplyRequest:
        request = await self.request_repository.get_or_404(request_id, fresh=True)

        if request.status != expected:
            message = (
                f"Request is already {request.status}."
                if expected == SupplyRequestStatus.PENDING
                else f"Request is {request.status}."
            )
            raise errors.StateError(
                detail=message,
                current_status=str(request.status),
            )

        return request

    @staticmethod
    def _lines(documents: list[dict]) -> list[SupplyRequestLine]:
        return [SupplyRequestLine.model_validate(document) for document in documents]

    @optimistic
    async def approve(self, request_id: UUID, actor: str | None = None) -> SupplyRequest:
        """
        Reserve stock for every line of a pending request.

        Demand from earlier lines of the same request counts against later lines on the same item.

        Raises:
            NotFoundError: the request does not exist
            StateError: the request is not pending
            ResolutionError: a line matches no catalog item by id or name
            InsufficientStockError: available stock is short for a line
        """
        with add_to_log_context(supply_request_id=str(request_id), actor_id=actor):
            request = await self._load_request(request_id, SupplyRequestStatus.PENDING)
            catalog = await CatalogIndex.build(self.item_repository)

            resolved: list[tuple[InventoryItem, SupplyRequestLine]] = []
            for line in self._lines(request.items):
                item = catalog.resolve_line(line)
                if item is None:
                    raise errors.ResolutionError(
                        detail=f'Cannot resolve inventory item for "{line.name}".',
                        reference=str(line.item_id),
                    )

                resolved.append(
                    (item, SupplyRequestLine(item_id=item.id, name=item.name, unit=item.unit, qty=line.qty))
                )

            claimed: dict[UUID, int] = defaultdict(int)
            for item, line in resolved:
                available = item.available_qty - claimed[item.id]
                if line.qty > available:
                    logger.info(
                        f"stockroom.domain.services.reservation_service.approve:: request {request_id} short on "
                        f"{item.name}: need {line.qty}, available {available}"
                    )
                    raise errors.InsufficientStockError(item.name, line.qty, available, unit=item.unit)

                claimed[item.id] += line.qty

            for item, line in resolved:
                await self.item_repository.update(item, {"reserved_qty": item.reserved_qty + line.qty})

            await self.request_repository.update(
                request,
                {
                    "status": SupplyRequestStatus.APPROVED,
                    "approved_at": datetime.now(UTC),
                    "approved_by": actor,
                    "reserved_items": [line.to_document() for _, line in resolved],
                },
            )

            logger.info(
                f"stockroom.domain.services.reservation_service.approve:: request {request_id} approved, "
                f"{len(resolved)} line(s) reserved"
            )

            await self.live_query.notify_changed(InventoryItem, SupplyRequest)
            return request

    @optimistic
    async def dispatch(self, request_id: UUID, actor: str | None = None) -> SupplyRequest:
        """
        Hand out the reserved stock of an approved request.

        On-hand and reserved quantities both drop by each line's quantity and an `issue`
        movement is logged per line.

        Raises:
            NotFoundError: the request does not exist
            StateError: the request is not approved
            ResolutionError: a reserved item no longer exists
            StockUnderflowError: the stored quantities cannot cover the reservation
        """
        with add_to_log_context(supply_request_id=str(request_id), actor_id=actor):
            request = await self._load_request(request_id, SupplyRequestStatus.APPROVED)
            lines = self._lines(request.reserved_items or request.items)
            items = await self.item_repository.get_many([line.item_id for line in lines])
            reason = f"{DISPATCH_REASON_PREFIX}:{request.track_id}"

            for line in lines:
                item = items.get(line.item_id)
                if item is None:
                    raise errors.ResolutionError(
                        detail=f'Cannot resolve inventory item for "{line.name}".',
                        reference=str(line.item_id),
                    )

                new_qty = item.qty - line.qty
                new_reserved = item.reserved_qty - line.qty
                if new_qty < 0 or new_reserved < 0:
                    logger.error(
                        f"stockroom.domain.services.reservation_service.dispatch:: underflow on {item.name} "
                        f"(qty={item.qty}, reserved={item.reserved_qty}, dispatching {line.qty})"
                    )
                    raise errors.StockUnderflowError(
                        detail=f"{item.name}: not enough stock to dispatch."
                        if new_qty < 0
                        else f"{item.name}: reservation underflow.",
                        item_name=item.name,
                    )

                await self.item_repository.update(item, {"qty": new_qty, "reserved_qty": new_reserved})
                await self.movement_repository.record(
                    item_id=item.id,
                    movement_type=MovementType.ISSUE,
                    qty=line.qty,
                    reason=reason,
                    actor_id=actor,
                )

            await self.request_repository.update(
                request,
                {
                    "status": SupplyRequestStatus.DISPATCHED,
                    "dispatched_at": datetime.now(UTC),
                    "dispatched_by": actor,
                },
            )

            logger.info(f"stockroom.domain.services.reservation_service.dispatch:: request {request_id} dispatched")

            await self.live_query.notify_changed(InventoryItem, StockMovement, SupplyRequest)
            return request

    @optimistic
    async def unapprove(self, request_id: UUID, actor: str | None = None) -> SupplyRequest:
        """
        Release the reservation of an approved request and return it to pending.

        Raises:
            NotFoundError: the request does not exist
            StateError: the request is not approved
            ResolutionError: a reserved item no longer exists
            StockUnderflowError: less is reserved than the request holds
        """
        with add_to_log_context(supply_request_id=str(request_id), actor_id=actor):
            request = await self._load_request(request_id, SupplyRequestStatus.APPROVED)
            lines = self._lines(request.reserved_items or request.items)
            items = await self.item_repository.get_many([line.item_id for line in lines])

            for line in lines:
                item = items.get(line.item_id)
                if item is None:
                    raise errors.ResolutionError(
                        detail=f'Cannot resolve inventory item for "{line.name}".',
                        reference=str(line.item_id),
                    )

                new_reserved = item.reserved_qty - line.qty
                if new_reserved < 0:
                    logger.error(
                        f"stockroom.domain.services.reservation_service.unapprove:: underflow on {item.name} "
                        f"(reserved={item.reserved_qty}, releasing {line.qty})"
                    )
                    raise errors.StockUnderflowError(
                        detail=f"{item.name}: reservation underflow on release.",
                        item_name=item.name,
                    )

                await self.item_repository.update(item, {"reserved_qty": new_reserved})

            await self.request_repository.update(
                request,
                {
                    "status": SupplyRequestStatus.PENDING,
                    "approved_at": None,
                    "approved_by": None,
                    "reserved_items": [],
                },
            )

            logger.info(
                f"stockroom.domain.services.reservation_service.unapprove:: request {request_id} released back to pending"
            )

            await self.live_query.notify_changed(InventoryItem, SupplyRequest)
            return request
