from abc import ABC, abstractmethod
from typing import Any

from stockroom.libs.live_query.schemas import Subscription


class LiveQueryProvider(ABC):
    """
    Base abstract class for all live query providers.

    A provider only stores subscriptions, snapshot loading and delivery belong to the service.
    """

    def __init__(self, config: Any) -> None:
        """Initialize live query provider with configuration."""
        self.config = config

    @abstractmethod
    async def add(self, subscription: Subscription) -> None:
        """
        Register a subscription.

        Raises:
            LiveQuerySubscriptionError: If the provider cannot accept more subscriptions
        """
        pass

    @abstractmethod
    async def remove(self, subscription_id: str) -> bool:
        """
        Remove a subscription.

        Returns:
            bool: True if the subscription existed
        """
        pass

    @abstractmethod
    async def subscriptions_for(self, table: str) -> list[Subscription]:
        """
        List the subscriptions watching a table, in registration order.
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Drop every subscription."""
        pass

    async def close(self) -> None:
        """
        Close connections and clean up resources.
        """
        pass

    async def get_stats(self) -> dict:
        """
        Get live query provider statistics.
        """
        return {
            "provider_type": "unknown",
            "subscriptions": await self.count(),
        }
