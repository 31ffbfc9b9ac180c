from typing import Any

from stockroom.core.config import settings
from stockroom.core.logging import get_logger
from stockroom.libs.live_query.exceptions import LiveQueryConfigurationError
from stockroom.libs.live_query.interface import LiveQueryProvider
from stockroom.libs.live_query.providers.memory import MemoryLiveQueryProvider
from stockroom.libs.live_query.schemas import MemoryLiveQueryConfiguration

logger = get_logger(__name__)


class LiveQueryFactory:
    """
    Factory for creating live query providers based on configuration.
    """

    _providers: dict[str, type[LiveQueryProvider]] = {
        "memory": MemoryLiveQueryProvider,
    }

    @classmethod
    def register_provider(cls, name: str, provider_class: type[LiveQueryProvider]) -> None:
        """
        Register a custom live query provider.

        Args:
            name: Provider name
            provider_class: Provider class
        """
        cls._providers[name] = provider_class

    @classmethod
    def create_provider(cls, provider_type: str, config: Any) -> LiveQueryProvider:
        """
        Create a provider instance.

        Raises:
            LiveQueryConfigurationError: If the provider type is not supported
        """
        if provider_type not in cls._providers:
            raise LiveQueryConfigurationError(f"Unsupported live query provider type: {provider_type}")

        provider_class = cls._providers[provider_type]
        return provider_class(config)  # type: ignore

    @classmethod
    def get_configured_provider(cls) -> LiveQueryProvider:
        """
        Get the provider selected by `LIVE_QUERY_PROVIDER`.
        """
        provider_type = settings.LIVE_QUERY_PROVIDER

        logger.info(f"Creating live query provider: {provider_type} for environment: {settings.ENVIRONMENT}")

        if provider_type == "memory":
            return cls.create_provider("memory", MemoryLiveQueryConfiguration())

        raise LiveQueryConfigurationError(f"Unsupported live query provider: {provider_type}")
