import inspect
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Optional
from weakref import WeakKeyDictionary

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, col, select
from sqlmodel.ext.asyncio.session import AsyncSession
from stockroom.core.database.transaction import Transaction, current_transaction
from stockroom.core.logging import get_logger
from stockroom.libs.live_query.exceptions import LiveQuerySubscriptionError
from stockroom.libs.live_query.factory import LiveQueryFactory
from stockroom.libs.live_query.interface import LiveQueryProvider
from stockroom.libs.live_query.schemas import SnapshotCallback, Subscription

logger = get_logger(__name__)

SessionFactory = Callable[[], AsyncSession]
Unsubscribe = Callable[[], Awaitable[bool]]


class LiveQueryService:
    """
    Push filtered snapshots of a table to in-process subscribers.

    A subscriber receives the current snapshot when it subscribes and a fresh one
    after every committed transaction that reported a change to the table. Changes
    reported inside a `Transaction` are held back until it commits and dropped
    if it rolls back.
    """

    def __init__(
        self,
        provider: Optional[LiveQueryProvider] = None,
        session_factory: Optional[SessionFactory] = None,
    ) -> None:
        """
        Initialize live query service.

        Args:
            provider: Live query provider instance. If None, will use factory to create one.
            session_factory: Callable returning a new session used to load snapshots.
        """
        self._provider = provider or LiveQueryFactory.get_configured_provider()
        self._session_factory = session_factory
        self._pending: WeakKeyDictionary[Transaction, set[type[SQLModel]]] = WeakKeyDictionary()

    @property
    def provider(self) -> LiveQueryProvider:
        """Get the live query provider."""
        return self._provider

    def _new_session(self) -> AsyncSession:
        if self._session_factory is None:
            from stockroom.core.database.session import SessionLocal

            self._session_factory = SessionLocal

        return self._session_factory()

    async def subscribe(
        self,
        model: type[SQLModel],
        filters: dict[str, Any] | None,
        callback: SnapshotCallback,
    ) -> Unsubscribe:
        """
        Subscribe to the rows of `model` whose fields equal `filters`.

        Args:
            model: A table model
            filters: Field names and values to match, None or empty for every row
            callback: Called (or awaited) with the list of matching rows

        Returns:
            An async function that cancels the subscription

        Raises:
            LiveQuerySubscriptionError: If the model is not a table or a filter names an unknown field
        """
        if not hasattr(model, "__table__"):
            raise LiveQuerySubscriptionError(f"{model.__name__} is not a table model")

        table = model.__table__.name  # type: ignore

        filters = dict(filters or {})
        unknown = [name for name in filters if name not in model.model_fields]
        if unknown:
            raise LiveQuerySubscriptionError(f"Unknown filter fields for {model.__name__}: {', '.join(sorted(unknown))}")

        subscription = Subscription(table=table, model=model, filters=filters, callback=callback)
        await self._provider.add(subscription)

        logger.debug(f"stockroom.libs.live_query.service.subscribe:: subscription {subscription.id} on {table} {filters}")

        await self._deliver(subscription)

        async def unsubscribe() -> bool:
            return await self._provider.remove(subscription.id)

        return unsubscribe

    async def notify_changed(self, *models: type[SQLModel]) -> None:
        """
        Report that rows of the given models changed.

        Inside a transaction the notification is deferred until it commits, otherwise
        subscribers are served right away.
        """
        tx = current_transaction()
        if tx is None:
            await self.publish(*models)
            return

        pending = self._pending.get(tx)
        if pending is None:
            pending = set()
            self._pending[tx] = pending
            tx.on_commit(lambda: self._publish_pending(tx))

        pending.update(models)

    async def _publish_pending(self, tx: Transaction) -> None:
        models = self._pending.pop(tx, set())
        await self.publish(*models)

    async def publish(self, *models: type[SQLModel]) -> None:
        """Send a fresh snapshot to every subscriber of the given models."""
        tables = {model.__table__.name for model in models}  # type: ignore

        for table in sorted(tables):
            for subscription in await self._provider.subscriptions_for(table):
                await self._deliver(subscription)

    async def _load_snapshot(self, subscription: Subscription) -> Sequence[Any]:
        model = subscription.model
        query = select(model)
        for field, value in subscription.filters.items():
            query = query.where(col(getattr(model, field)) == value)

        if hasattr(model, "created_datetime"):
            query = query.order_by(col(model.created_datetime))  # type: ignore

        async with self._new_session() as session:
            return list((await session.exec(query)).all())

    async def _deliver(self, subscription: Subscription) -> None:
        # NOTE: A broken subscriber must never fail the caller that committed the change
        try:
            snapshot = await self._load_snapshot(subscription)
        except SQLAlchemyError as e:
            logger.error(
                f"stockroom.libs.live_query.service._deliver:: failed to load snapshot for subscription {subscription.id}: {e}"
            )
            return

        try:
            result = subscription.callback(snapshot)
            if inspect.isawaitable(result):
                await result
            subscription.deliveries += 1
        except Exception as e:
            logger.exception(
                f"stockroom.libs.live_query.service._deliver:: subscriber {subscription.id} on {subscription.table} failed: {e}"
            )

    async def close(self) -> None:
        """Drop every subscription and release provider resources."""
        await self._provider.clear()
        await self._provider.close()


_live_query_service: Optional[LiveQueryService] = None


def get_live_query_service() -> LiveQueryService:
    """Get or create global live query service instance."""
    global _live_query_service
    if _live_query_service is None:
        _live_query_service = LiveQueryService()
    return _live_query_service


async def setup_live_query() -> LiveQueryService:
    """Setup and return live query service."""
    live_query_service = get_live_query_service()
    logger.info(f"Live query service initialized with {type(live_query_service.provider).__name__}")
    return live_query_service


async def teardown_live_query() -> None:
    """Teardown live query service."""
    global _live_query_service
    if _live_query_service:
        await _live_query_service.close()
        _live_query_service = None
