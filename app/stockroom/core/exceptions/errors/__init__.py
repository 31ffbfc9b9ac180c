from .base import InternalServerError, NotFoundError, ServiceError, ValidationError  # noqa: F401
from .database import DatabaseError, TransactionConflictError, TransactionTimeoutError  # noqa: F401
from .stock import InsufficientStockError, ResolutionError, StateError, StockUnderflowError  # noqa: F401

__all__ = [
    "InternalServerError",
    "NotFoundError",
    "ServiceError",
    "ValidationError",
    "DatabaseError",
    "TransactionConflictError",
    "TransactionTimeoutError",
    "InsufficientStockError",
    "ResolutionError",
    "StateError",
    "StockUnderflowError",
]
