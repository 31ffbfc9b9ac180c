import asyncio
import functools
import inspect
import logging
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError
from stockroom.core.config import settings
from stockroom.core.database.transaction import Transaction, in_transaction
from stockroom.core.exceptions import errors
from stockroom.core.logging import get_logger
from tenacity import AsyncRetrying, RetryError, before_sleep_log, retry_if_exception_type, stop_after_attempt

logger = get_logger(__name__)

T = TypeVar("T")


def _resolve_session(func: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]) -> AsyncSession:
    session = None

    if args and hasattr(args[0], "session"):
        session = args[0].session
    elif "session" in kwargs:
        session = kwargs["session"]
    else:
        sig = inspect.signature(func)
        param_names = list(sig.parameters.keys())
        try:
            session_idx = param_names.index("session")
            if len(args) > session_idx:
                session = args[session_idx]
            else:
                raise ValueError("Session argument is required but not provided")
        except ValueError:
            raise ValueError("Could not find session parameter in function or method")

    if not isinstance(session, AsyncSession):
        raise TypeError("Session must be an instance of AsyncSession")

    return session


def transactional(
    func: Callable[..., T],
) -> Callable[..., T | Coroutine[Any, Any, T]]:
    """
    Decorator for executing a function within a transaction.

    If the function execution succeeds, the transaction is committed (if outermost).
    If an exception is raised, the transaction is rolled back (if outermost).

    The function being decorated must have a session parameter or be a method
    of a class with a self.session attribute.

    Usage:
        @transactional
        async def my_function(session: AsyncSession, ...):
            # Function code here

        OR

        class MyService:
            def __init__(self, session: AsyncSession):
                self.session = session

            @transactional
            async def my_method(self, ...):
                # Method code here
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        session = _resolve_session(func, args, kwargs)

        # NOTE: If we're already in a transaction, just call the function
        if in_transaction():
            result = func(*args, **kwargs)
            return await result if inspect.iscoroutine(result) else result

        # Otherwise, start a new transaction
        async with Transaction(session):
            result = func(*args, **kwargs)
            return await result if inspect.iscoroutine(result) else result

    return wrapper


def optimistic(
    func: Callable[..., T],
) -> Callable[..., T | Coroutine[Any, Any, T]]:
    """
    Decorator for read-check-write operations guarded by row versions.

    Each attempt runs the function inside its own `Transaction`, bounded by
    `TRANSACTION_TIMEOUT_SECONDS`. When a versioned UPDATE finds that a concurrent
    writer got there first (`StaleDataError`), the attempt is rolled back and the whole
    function runs again against fresh state, up to `TRANSACTION_MAX_ATTEMPTS` times.

    Raises:
        TransactionConflictError: every attempt lost a version check
        TransactionTimeoutError: an attempt exceeded the timeout

    Business errors raised by the function abort immediately, without a retry.
    Nested calls join the enclosing transaction and leave retries to it.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        session = _resolve_session(func, args, kwargs)

        if in_transaction():
            result = func(*args, **kwargs)
            return await result if inspect.iscoroutine(result) else result

        max_attempts = settings.TRANSACTION_MAX_ATTEMPTS
        timeout = settings.TRANSACTION_TIMEOUT_SECONDS

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(max_attempts),
                retry=retry_if_exception_type(StaleDataError),
                before_sleep=before_sleep_log(logger, logging.WARNING),
            ):
                with attempt:
                    async with asyncio.timeout(timeout):
                        async with Transaction(session):
                            result = func(*args, **kwargs)
                            return await result if inspect.iscoroutine(result) else result
        except RetryError as e:
            logger.error(
                f"stockroom.core.database.decorators.optimistic:: {func.__qualname__} gave up after {max_attempts} conflicting attempts"
            )
            raise errors.TransactionConflictError(attempts=max_attempts) from e
        except TimeoutError as e:
            logger.error(f"stockroom.core.database.decorators.optimistic:: {func.__qualname__} timed out after {timeout}s")
            raise errors.TransactionTimeoutError(
                detail=f"The operation did not finish within {timeout:g} seconds and was rolled back.",
                timeout_seconds=timeout,
            ) from e

    return wrapper
