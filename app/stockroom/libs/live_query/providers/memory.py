from threading import RLock

from stockroom.libs.live_query.exceptions import LiveQuerySubscriptionError
from stockroom.libs.live_query.interface import LiveQueryProvider
from stockroom.libs.live_query.schemas import MemoryLiveQueryConfiguration, Subscription


class MemoryLiveQueryProvider(LiveQueryProvider):
    """
    In-process live query provider keeping subscriptions in a dictionary.
    Thread-safe, subscriptions do not survive a restart.
    """

    def __init__(self, config: MemoryLiveQueryConfiguration) -> None:
        super().__init__(config)
        self.config: MemoryLiveQueryConfiguration = config
        self._subscriptions: dict[str, Subscription] = {}
        self._lock = RLock()

    async def add(self, subscription: Subscription) -> None:
        with self._lock:
            if len(self._subscriptions) >= self.config.max_subscriptions:
                raise LiveQuerySubscriptionError(
                    f"Cannot register more than {self.config.max_subscriptions} live query subscriptions"
                )
            self._subscriptions[subscription.id] = subscription

    async def remove(self, subscription_id: str) -> bool:
        with self._lock:
            return self._subscriptions.pop(subscription_id, None) is not None

    async def subscriptions_for(self, table: str) -> list[Subscription]:
        with self._lock:
            return [sub for sub in self._subscriptions.values() if sub.table == table]

    async def count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    async def clear(self) -> None:
        with self._lock:
            self._subscriptions.clear()

    async def get_stats(self) -> dict:
        return {
            "provider_type": "memory",
            "subscriptions": await self.count(),
            "max_subscriptions": self.config.max_subscriptions,
        }
