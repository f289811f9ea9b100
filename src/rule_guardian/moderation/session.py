"""Long-lived moderation state for one served community."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cachetools import TTLCache  # type: ignore[import-untyped]

from rule_guardian.moderation.cooldown import CooldownTracker
from rule_guardian.moderation.metrics import DailyMetrics

if TYPE_CHECKING:
    from rule_guardian.config import Settings

_LOG_CHANNEL_CACHE_SIZE = 1024


class ModerationSession:
    """Owns cooldowns, daily metrics and the mod-log channel cache.

    Sessions are independent; construct one per served community (or per
    test) and hand it to the pipeline.
    """

    def __init__(
        self,
        *,
        cooldown_seconds: float = 0.0,
        cooldown_max_entries: int = 10000,
        log_channel_cache_ttl: float = 3600,
    ) -> None:
        self.cooldowns = CooldownTracker(
            cooldown_seconds=cooldown_seconds, max_entries=cooldown_max_entries
        )
        self.metrics = DailyMetrics()
        # guild_id -> resolved mod-log channel_id
        self.log_channel_ids: TTLCache[int, int] = TTLCache(
            maxsize=_LOG_CHANNEL_CACHE_SIZE, ttl=log_channel_cache_ttl
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> ModerationSession:
        return cls(
            cooldown_seconds=settings.warning_cooldown_seconds,
            cooldown_max_entries=settings.cooldown_max_entries,
            log_channel_cache_ttl=settings.log_channel_cache_ttl_seconds,
        )
