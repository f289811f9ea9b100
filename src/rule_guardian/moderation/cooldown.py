"""Per-user, per-channel warning cooldowns."""

from __future__ import annotations

import time

from cachetools import LRUCache  # type: ignore[import-untyped]

CooldownKey = tuple[int, int]


class CooldownTracker:
    """Decide whether a warning to a user in a channel should be suppressed."""

    def __init__(self, cooldown_seconds: float = 0.0, max_entries: int = 10000) -> None:
        """Initialize the tracker.

        Args:
            cooldown_seconds: Minimum time between warnings. ``0`` disables
                suppression, though timestamps are still recorded.
            max_entries: Cap on tracked (user, channel) keys; the least
                recently warned keys are evicted first.
        """
        self._cooldown_seconds = cooldown_seconds
        self._last_warning: LRUCache[CooldownKey, float] = LRUCache(maxsize=max_entries)

    @property
    def cooldown_seconds(self) -> float:
        return self._cooldown_seconds

    def should_suppress(self, user_id: int, channel_id: int, now: float | None = None) -> bool:
        """Return True if a warning was issued for this key within the window.

        A non-suppressed call records *now* as the key's last warning time,
        whether or not the warning is later delivered.
        """
        if now is None:
            now = time.time()
        key = (user_id, channel_id)
        last = self._last_warning.get(key)
        if last is not None and now - last < self._cooldown_seconds:
            return True
        self._last_warning[key] = now
        return False

    def last_warning_at(self, user_id: int, channel_id: int) -> float | None:
        return self._last_warning.get((user_id, channel_id))

    def sweep(self, now: float | None = None) -> int:
        """Drop entries whose window has elapsed. Returns the number removed."""
        if now is None:
            now = time.time()
        snapshot = [(key, self._last_warning[key]) for key in list(self._last_warning)]
        stale = [key for key, last in snapshot if now - last >= self._cooldown_seconds]
        for key in stale:
            del self._last_warning[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self._last_warning)
