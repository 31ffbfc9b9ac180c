from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

SnapshotCallback = Callable[[Sequence[Any]], Awaitable[None] | None]


@dataclass
class LiveQueryConfiguration:
    """Base live query configuration."""

    max_subscriptions: int = 1000


@dataclass
class MemoryLiveQueryConfiguration(LiveQueryConfiguration):
    """In-process live query configuration."""


@dataclass
class Subscription:
    """A registered interest in a filtered view of one table."""

    table: str
    model: type[Any]
    filters: dict[str, Any]
    callback: SnapshotCallback
    id: str = field(default_factory=lambda: uuid4().hex)
    deliveries: int = 0
