from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, func, select, update
from sqlmodel.ext.asyncio.session import AsyncSession
from stockroom.core.exceptions import errors
from stockroom.core.logging import get_logger
from stockroom.domain.models.inventory_item import InventoryItem
from stockroom.domain.repositories.base_repository import BaseRepository

logger = get_logger(__name__)


class InventoryItemRepository(BaseRepository[InventoryItem]):
    """
    Repository for managing inventory items in the system.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(InventoryItem, session)

    async def get_by_name_key(self, name_key: str) -> InventoryItem | None:
        """Get an item by its normalized name."""
        try:
            query = select(InventoryItem).where(col(InventoryItem.name_key) == name_key)
            return (await self.session.exec(query)).one_or_none()
        except SQLAlchemyError as e:
            logger.exception(
                f"stockroom.domain.repositories.inventory_item_repository.get_by_name_key:: error while getting item {name_key!r}: {e}"
            )
            raise errors.DatabaseError(detail="An error occurred while retrieving the item.") from e

    async def list_items(self, category: str | None = None, *, fresh: bool = False) -> list[InventoryItem]:
        """List items ordered by name, optionally restricted to one category."""
        return await self.find_all_by(
            order_by=[func.lower(col(InventoryItem.name))],
            fresh=fresh,
            category=category,
        )

    async def get_many(self, item_ids: list[UUID]) -> dict[UUID, InventoryItem]:
        """
        Load the live rows for the given ids, keyed by id.

        Rows already held by the session are overwritten with the stored values,
        so decisions are never made on a stale copy.
        """
        if not item_ids:
            return {}

        try:
            query = (
                select(InventoryItem)
                .where(col(InventoryItem.id).in_(item_ids))
                .execution_options(populate_existing=True)
            )
            items = (await self.session.exec(query)).all()
            return {item.id: item for item in items}
        except SQLAlchemyError as e:
            logger.exception(
                f"stockroom.domain.repositories.inventory_item_repository.get_many:: error while loading items {item_ids}: {e}"
            )
            raise errors.DatabaseError(detail="An error occurred while retrieving inventory items.") from e

    async def increment_qty(self, item_id: UUID, delta: int) -> bool:
        """
        Atomically add `delta` to the on-hand quantity without reading the row first.

        The version counter is bumped as well, so any transaction that read the
        row before this write fails its version check and re-runs.

        Returns:
            bool: False when no row matched the id
        """
        try:
            stmt = (
                update(InventoryItem)
                .where(col(InventoryItem.id) == item_id)
                .values(
                    qty=col(InventoryItem.qty) + delta,
                    version=col(InventoryItem.version) + 1,
                )
                .execution_options(synchronize_session=False)
            )
            result = await self.session.exec(stmt)  # type: ignore
            await self._save_changes()
            return result.rowcount > 0
        except errors.DatabaseError:
            raise
        except SQLAlchemyError as e:
            logger.exception(
                f"stockroom.domain.repositories.inventory_item_repository.increment_qty:: error while incrementing item {item_id} by {delta}: {e}"
            )
            raise errors.DatabaseError(detail="An error occurred while updating stock levels.") from e
