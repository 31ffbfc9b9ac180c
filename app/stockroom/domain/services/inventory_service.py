from __future__ import annotations

from uuid import UUID

from sqlmodel.ext.asyncio.session import AsyncSession
from stockroom.core.constants import DEFAULT_CATEGORY, DEFAULT_UNIT, INITIAL_STOCK_REASON, ISSUE_REASON, RECEIVE_REASON
from stockroom.core.database.decorators import optimistic, transactional
from stockroom.core.exceptions import errors
from stockroom.core.helpers.misc import normalize_name
from stockroom.core.logging import get_logger
from stockroom.domain.enums import MovementType
from stockroom.domain.models.inventory_item import InventoryItem
from stockroom.domain.models.stock_movement import StockMovement
from stockroom.domain.repositories.inventory_item_repository import InventoryItemRepository
from stockroom.domain.repositories.stock_movement_repository import StockMovementRepository
from stockroom.libs.live_query import LiveQueryService, get_live_query_service

logger = get_logger(__name__)


class InventoryService:
    """Service for the inventory ledger: item records and the receive/issue mutations."""

    def __init__(self, session: AsyncSession, live_query: LiveQueryService | None = None):
        self.session = session
        self.item_repository = InventoryItemRepository(session)
        self.movement_repository = StockMovementRepository(session)
        self.live_query = live_query or get_live_query_service()

    async def create_item(
        self,
        name: str,
        unit: str | None = DEFAULT_UNIT,
        category: str | None = DEFAULT_CATEGORY,
        min_qty: int = 0,
        max_qty: int = 0,
        initial_qty: int = 0,
        actor: str | None = None,
    ) -> InventoryItem:
        """
        Register a new item in the catalog.

        When `initial_qty` is positive a `receive` movement with reason "initial stock" is
        written in the same transaction.

        Raises:
            ValidationError: blank name, negative quantity or a name already in use
        """
        clean_name = (name or "").strip()
        if not clean_name:
            raise errors.ValidationError(detail="Item name is required.")

        for field, value in (("min_qty", min_qty), ("max_qty", max_qty), ("initial_qty", initial_qty)):
            if value < 0:
                raise errors.ValidationError(detail=f"{field} cannot be negative.", field=field)

        return await self._create_item(
            name=clean_name,
            unit=DEFAULT_UNIT if unit is None else unit.strip(),
            category=(category or "").strip() or DEFAULT_CATEGORY,
            min_qty=min_qty,
            max_qty=max_qty,
            initial_qty=initial_qty,
            actor=actor,
        )

    @transactional
    async def _create_item(
        self,
        name: str,
        unit: str,
        category: str,
        min_qty: int,
        max_qty: int,
        initial_qty: int,
        actor: str | None,
    ) -> InventoryItem:
        name_key = normalize_name(name)
        if await self.item_repository.get_by_name_key(name_key) is not None:
            raise errors.ValidationError(detail=f'An item named "{name}" already exists.', field="name")

        item = await self.item_repository.add(
            InventoryItem(
                name=name,
                name_key=name_key,
                unit=unit,
                category=category,
                qty=initial_qty,
                reserved_qty=0,
                min_qty=min_qty,
                max_qty=max_qty,
            )
        )

        if initial_qty > 0:
            await self.movement_repository.record(
                item_id=item.id,
                movement_type=MovementType.RECEIVE,
                qty=initial_qty,
                reason=INITIAL_STOCK_REASON,
                actor_id=actor,
            )

        logger.info(f"stockroom.domain.services.inventory_service.create_item:: created item {item.id} ({name})")

        await self.live_query.notify_changed(InventoryItem, StockMovement)
        return item

    async def receive_stock(
        self,
        item_id: UUID,
        qty: int,
        reason: str | None = None,
        actor: str | None = None,
    ) -> InventoryItem:
        """
        Add stock to an item with a single atomic increment.

        Raises:
            ValidationError: qty is not positive, raised before touching the store
            NotFoundError: the item does not exist
        """
        if qty <= 0:
            raise errors.ValidationError(detail="Quantity to receive must be greater than zero.", field="qty")

        return await self._receive_stock(item_id, qty, reason or RECEIVE_REASON, actor)

    @transactional
    async def _receive_stock(self, item_id: UUID, qty: int, reason: str, actor: str | None) -> InventoryItem:
        if not await self.item_repository.increment_qty(item_id, qty):
            raise errors.NotFoundError(detail=f"Inventory item {item_id} was not found.", id=str(item_id))

        await self.movement_repository.record(
            item_id=item_id,
            movement_type=MovementType.RECEIVE,
            qty=qty,
            reason=reason,
            actor_id=actor,
        )

        item = await self.item_repository.get_or_404(item_id, fresh=True)
        logger.info(
            f"stockroom.domain.services.inventory_service.receive_stock:: received {qty} of {item.name}, on hand {item.qty}"
        )

        await self.live_query.notify_changed(InventoryItem, StockMovement)
        return item

    async def issue_stock(
        self,
        item_id: UUID,
        qty: int,
        reason: str | None = None,
        actor: str | None = None,
    ) -> InventoryItem:
        """
        Remove stock from an item outside of the request workflow.

        Only available stock can be issued, reserved units stay with their requests.

        Raises:
            ValidationError: qty is not positive, raised before touching the store
            NotFoundError: the item does not exist
            InsufficientStockError: qty exceeds the available stock
        """
        if qty <= 0:
            raise errors.ValidationError(detail="Quantity to issue must be greater than zero.", field="qty")

        return await self._issue_stock(item_id, qty, reason or ISSUE_REASON, actor)

    @optimistic
    async def _issue_stock(self, item_id: UUID, qty: int, reason: str, actor: str | None) -> InventoryItem:
        item = await self.item_repository.get_or_404(item_id, fresh=True)

        if not item.can_reserve(qty):
            raise errors.InsufficientStockError(item.name, qty, item.available_qty, unit=item.unit)

        await self.item_repository.update(item, {"qty": item.qty - qty})
        await self.movement_repository.record(
            item_id=item.id,
            movement_type=MovementType.ISSUE,
            qty=qty,
            reason=reason,
            actor_id=actor,
        )

        logger.info(
            f"stockroom.domain.services.inventory_service.issue_stock:: issued {qty} of {item.name}, on hand {item.qty}"
        )

        await self.live_query.notify_changed(InventoryItem, StockMovement)
        return item

    async def get_item(self, item_id: UUID) -> InventoryItem:
        """
        Get the stored state of an item.

        Raises:
            NotFoundError: the item does not exist
        """
        return await self.item_repository.get_or_404(item_id, fresh=True)

    async def list_items(self, category: str | None = None) -> list[InventoryItem]:
        """List the catalog ordered by name."""
        return await self.item_repository.list_items(category=category, fresh=True)

    async def list_movements(self, item_id: UUID) -> list[StockMovement]:
        """
        List an item's movements, newest first.

        Raises:
            NotFoundError: the item does not exist
        """
        await self.item_repository.get_or_404(item_id)
        return await self.movement_repository.list_for_item(item_id)
