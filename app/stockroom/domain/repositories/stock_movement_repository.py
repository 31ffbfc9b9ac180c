from uuid import UUID

from sqlmodel import col
from sqlmodel.ext.asyncio.session import AsyncSession
from stockroom.domain.enums import MovementType
from stockroom.domain.models.stock_movement import StockMovement
from stockroom.domain.repositories.base_repository import BaseRepository


class StockMovementRepository(BaseRepository[StockMovement]):
    """
    Repository for the append-only stock movement log.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(StockMovement, session)

    async def record(
        self,
        item_id: UUID,
        movement_type: MovementType,
        qty: int,
        reason: str | None,
        actor_id: str | None,
    ) -> StockMovement:
        """Append a movement for an item."""
        return await self.add(
            StockMovement(
                item_id=item_id,
                movement_type=movement_type,
                qty=qty,
                reason=reason,
                actor_id=actor_id,
            )
        )

    async def list_for_item(self, item_id: UUID) -> list[StockMovement]:
        """List an item's movements, newest first."""
        return await self.find_all_by(
            order_by=[col(StockMovement.created_datetime).desc()],
            item_id=item_id,
        )
