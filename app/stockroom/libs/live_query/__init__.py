from .exceptions import LiveQueryConfigurationError, LiveQueryError, LiveQuerySubscriptionError
from .factory import LiveQueryFactory
from .interface import LiveQueryProvider
from .schemas import LiveQueryConfiguration, MemoryLiveQueryConfiguration, Subscription
from .service import LiveQueryService, get_live_query_service, setup_live_query, teardown_live_query

__all__ = [
    # Core classes
    "LiveQueryFactory",
    "LiveQueryProvider",
    "LiveQueryService",
    # Utilities
    "get_live_query_service",
    "setup_live_query",
    "teardown_live_query",
    # Schemas
    "LiveQueryConfiguration",
    "MemoryLiveQueryConfiguration",
    "Subscription",
    # Exceptions
    "LiveQueryError",
    "LiveQueryConfigurationError",
    "LiveQuerySubscriptionError",
]
