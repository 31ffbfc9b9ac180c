from .memory import MemoryLiveQueryProvider

__all__ = ["MemoryLiveQueryProvider"]
