import inspect
from collections.abc import Awaitable, Callable
from contextvars import ContextVar
from typing import Any

from sqlmodel.ext.asyncio.session import AsyncSession
from stockroom.core.logging import log_exception_with_context

CommitCallback = Callable[[], Awaitable[Any] | Any]

_current_transaction: ContextVar["Transaction | None"] = ContextVar("current_transaction", default=None)


class Transaction:
    """
    Async context manager that runs a unit of work on a session.

    Commits on a clean exit and rolls back when the body raises. While the block is
    active, `in_transaction()` is true so repositories only flush, leaving the
    commit to the outermost transaction. Callbacks registered with `on_commit`
    run once the commit succeeded and are discarded on rollback.

    Usage:
        async with Transaction(session) as tx:
            ...
            tx.on_commit(notify_subscribers)
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self._callbacks: list[CommitCallback] = []
        self._token = None

    async def __aenter__(self) -> "Transaction":
        self._token = _current_transaction.set(self)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc_type is None:
                try:
                    await self.session.commit()
                except Exception:
                    await self.session.rollback()
                    raise
            else:
                await self.session.rollback()
        finally:
            if self._token is not None:
                _current_transaction.reset(self._token)
                self._token = None

        if exc_type is None:
            await self._run_commit_callbacks()
        else:
            self._callbacks.clear()

        return False

    def on_commit(self, callback: CommitCallback) -> None:
        """Register a callback to run after this transaction commits."""
        self._callbacks.append(callback)

    async def _run_commit_callbacks(self) -> None:
        callbacks, self._callbacks = self._callbacks, []

        for callback in callbacks:
            try:
                result = callback()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                log_exception_with_context(
                    e,
                    message="stockroom.core.database.transaction._run_commit_callbacks:: commit callback failed",
                    extra_context={"callback": repr(callback)},
                )


def current_transaction() -> Transaction | None:
    """Return the innermost active transaction for the current context, if any."""
    return _current_transaction.get()


def in_transaction() -> bool:
    """Check whether the current context runs inside a `Transaction`."""
    return _current_transaction.get() is not None
