from fastapi import status

from .base import ServiceError


class DatabaseError(ServiceError):
    """
    An base error indicating that a database operation failed.
    """

    type_ = "database_error"
    title = "Database error"
    status = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "An error occurred while interacting with the database."


class TransactionConflictError(DatabaseError):
    """
    Raised when a transaction kept losing optimistic version checks to concurrent writers
    and ran out of attempts.
    """

    type_ = "transaction_conflict_error"
    title = "Transaction conflict"
    status = status.HTTP_409_CONFLICT
    detail = "The records changed while the operation was running. Please try again."


class TransactionTimeoutError(DatabaseError):
    """
    Raised when a single transaction attempt exceeded the configured timeout.
    The attempt is rolled back, so nothing it wrote is visible.
    """

    type_ = "transaction_timeout_error"
    title = "Transaction timeout"
    status = status.HTTP_504_GATEWAY_TIMEOUT
    detail = "The operation took too long and was cancelled."
