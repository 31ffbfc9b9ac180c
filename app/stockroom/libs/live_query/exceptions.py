class LiveQueryError(Exception):
    """Base exception for live query operations."""

    def __init__(self, message: str = "Live query operation failed") -> None:
        super().__init__(message)
        self.message = message


class LiveQuerySubscriptionError(LiveQueryError):
    """Raised when a subscription cannot be registered."""

    def __init__(self, message: str = "Invalid live query subscription") -> None:
        super().__init__(message)


class LiveQueryConfigurationError(LiveQueryError):
    """Raised when live query configuration is invalid."""

    def __init__(self, message: str = "Invalid live query configuration") -> None:
        super().__init__(message)
