import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from fastapi import Request


class ResponseCache:
    """
    Small TTL cache for read-heavy responses (profiles, video details).

    Entries are stored as key -> (value, stored_at). A ttl of 0 disables the
    cache entirely: ``get`` always misses and ``set`` stores nothing.
    Mutating operations call ``invalidate`` / ``clear`` explicitly.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[Any, float]] = {}

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, stored_at = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: Hashable, value: Any) -> None:
        if not self.enabled:
            return
        self._entries[key] = (value, self._clock())

    def invalidate(self, *keys: Hashable) -> None:
        for key in keys:
            self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def get_profile_cache(request: Request) -> ResponseCache:
    return request.app.state.profile_cache


def get_video_cache(request: Request) -> ResponseCache:
    return request.app.state.video_cache
