"""Rule cache port - key/value store with TTL (aiocache compatible)."""

from typing import Any, Protocol


class RuleCache(Protocol):
    """Async cache holding raw rule lists keyed by user."""

    async def get(self, key: str, default: Any = None) -> Any: ...

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool: ...

    async def delete(self, key: str) -> int: ...

    async def close(self) -> None: ...
