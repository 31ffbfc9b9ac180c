from collections.abc import Sequence
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from sqlmodel import SQLModel, col, select
from sqlmodel.ext.asyncio.session import AsyncSession
from stockroom.core.database.transaction import in_transaction
from stockroom.core.exceptions import errors
from stockroom.core.logging import get_logger

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """
    Base repository providing CRUD operations for SQLModel models.\n

    Automatically detects if operations are running within a transaction context
    and adjusts commit behavior accordingly.

    Version conflicts (`StaleDataError`) are propagated untouched so the optimistic
    retry loop can see them, every other SQLAlchemy failure becomes a `DatabaseError`.
    """

    def __init__(self, model: type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def _save_changes(self, refresh_obj=None):
        """
        Save changes to the database, respecting transaction context.

        If running within a transaction, just flush changes.
        If not in a transaction, commit changes.

        Args:
            refresh_obj: Object to refresh after saving changes
        """
        try:
            if in_transaction():
                await self.session.flush()
            else:
                await self.session.commit()

            if refresh_obj is not None:
                await self.session.refresh(refresh_obj)
        except StaleDataError:
            raise
        except SQLAlchemyError as e:
            if not in_transaction():
                await self.session.rollback()

            logger.exception(
                f"stockroom.domain.repositories.base_repository._save_changes:: error while saving {self.model.__name__}: {e}"
            )
            raise errors.DatabaseError(
                detail=f"Failed to save {self.model.__name__}.",
            ) from e

    async def find_one_by(self, id: UUID, *, fresh: bool = False) -> ModelType | None:
        """
        Get a single record by ID.

        Args:
            id (UUID): The id of the record to retrieve
            fresh (bool): Overwrite any copy already held by the session with the stored row

        Returns:
            ModelType | None: The found record or None
        """
        query = select(self.model).where(col(self.model.id) == id)  # type: ignore
        if fresh:
            query = query.execution_options(populate_existing=True)

        try:
            return (await self.session.exec(query)).one_or_none()
        except SQLAlchemyError as e:
            logger.exception(
                f"stockroom.domain.repositories.base_repository.find_one_by:: error while getting {self.model.__name__} {id}: {e}"
            )
            raise errors.DatabaseError(detail=f"Failed to retrieve {self.model.__name__}.") from e

    async def get_or_404(self, id: UUID, *, fresh: bool = False) -> ModelType:
        """
        Get a record by ID or raise a 404 error.

        Raises:
            NotFoundError: If the record is not found
        """
        obj = await self.find_one_by(id, fresh=fresh)
        if obj is None:
            raise errors.NotFoundError(
                detail=f"{self.model.__name__} {id} was not found.",
                id=str(id),
            )
        return obj

    async def find_all_by(
        self,
        *,
        order_by: Sequence[Any] | None = None,
        fresh: bool = False,
        **filters: Any,
    ) -> list[ModelType]:
        """
        Find records whose fields equal the given values (AND condition).

        Filters whose value is None are ignored, unknown fields are ignored.

        Args:
            order_by: Columns or column expressions to order by
            fresh: Overwrite copies already held by the session with the stored rows
            **filters: Field names and values to filter by

        Returns:
            list[ModelType]: The matching records
        """
        query = select(self.model)
        for field, value in filters.items():
            if value is not None and hasattr(self.model, field):
                query = query.where(col(getattr(self.model, field)) == value)

        if order_by:
            query = query.order_by(*order_by)

        if fresh:
            query = query.execution_options(populate_existing=True)

        try:
            return list((await self.session.exec(query)).all())
        except SQLAlchemyError as e:
            logger.exception(
                f"stockroom.domain.repositories.base_repository.find_all_by:: error while listing {self.model.__name__}: {e}"
            )
            raise errors.DatabaseError(detail=f"Failed to list {self.model.__name__} records.") from e

    async def add(self, db_obj: ModelType) -> ModelType:
        """
        Persist a new model instance.

        Args:
            db_obj: The instance to insert

        Returns:
            The inserted instance
        """
        self.session.add(db_obj)
        await self._save_changes()
        return db_obj

    async def update(self, db_obj: ModelType, changes: dict[str, Any]) -> ModelType:
        """
        Apply a partial update to a loaded record.

        Versioned models get their version checked and bumped by the flush.

        Args:
            db_obj: The record to update
            changes: Field names and their new values

        Returns:
            The updated record
        """
        if not changes:
            return db_obj

        db_obj.sqlmodel_update(changes)

        self.session.add(db_obj)
        await self._save_changes()
        return db_obj
