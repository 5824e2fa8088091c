from __future__ import annotations
import json
from typing import Protocol
from redis import Redis
from app.config import settings
from app.schemas.participation import PendingAction


class PendingActionStore(Protocol):
    def set(self, key: str, action: PendingAction) -> None: ...

    def get(self, key: str) -> PendingAction | None: ...

    def clear(self, key: str) -> None: ...


class RedisPendingActionStore:
    """Resume-after-login markers in redis. No expiry: the client clears them once resumed."""

    def __init__(self, client: Redis, prefix: str = "pending:"):
        self._redis = client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def set(self, key: str, action: PendingAction) -> None:
        self._redis.set(self._key(key), action.model_dump_json())

    def get(self, key: str) -> PendingAction | None:
        raw = self._redis.get(self._key(key))
        if raw is None:
            return None
        return PendingAction.model_validate(json.loads(raw))

    def clear(self, key: str) -> None:
        self._redis.delete(self._key(key))


class MemoryPendingActionStore:
    def __init__(self):
        self._items: dict[str, str] = {}

    def set(self, key: str, action: PendingAction) -> None:
        self._items[key] = action.model_dump_json()

    def get(self, key: str) -> PendingAction | None:
        raw = self._items.get(key)
        return PendingAction.model_validate_json(raw) if raw is not None else None

    def clear(self, key: str) -> None:
        self._items.pop(key, None)


_store: PendingActionStore | None = None


def get_pending_store() -> PendingActionStore:
    global _store
    if _store is None:
        if settings.pending_store == "memory":
            _store = MemoryPendingActionStore()
        else:
            _store = RedisPendingActionStore(Redis.from_url(settings.redis_url), prefix=settings.pending_key_prefix)
    return _store
