"""Day-bucketed trigger counters.

Counters live in memory and reset when the first trigger of a new UTC
day is recorded.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, date, datetime

from rule_guardian.moderation.models import Verdict


def utc_day(now: datetime | None = None) -> date:
    """Return the UTC calendar date of *now* (default: the current time)."""
    if now is None:
        return datetime.now(UTC).date()
    if now.tzinfo is None:
        return now.date()
    return now.astimezone(UTC).date()


def term_rule_key(term: str) -> str:
    return f"term:{term.lower()}"


def price_rule_key(signal: str) -> str:
    return f"price:{signal.lower()}"


@dataclass
class DailyMetrics:
    """Trigger counts for the current UTC day, by channel and by rule."""

    day: date = field(default_factory=utc_day)
    triggers_today: int = 0
    by_channel: Counter[int] = field(default_factory=Counter)
    by_rule: Counter[str] = field(default_factory=Counter)

    def roll_over(self, today: date) -> bool:
        """Reset every counter if *today* differs from the stored day."""
        if today == self.day:
            return False
        self.day = today
        self.triggers_today = 0
        self.by_channel.clear()
        self.by_rule.clear()
        return True

    def record(self, verdict: Verdict, channel_id: int, now: datetime | None = None) -> None:
        """Count one triggered message."""
        self.roll_over(utc_day(now))
        self.triggers_today += 1
        self.by_channel[channel_id] += 1
        for term in verdict.matched_terms:
            self.by_rule[term_rule_key(term)] += 1
        for signal in verdict.matched_price_signals:
            self.by_rule[price_rule_key(signal)] += 1

    def top_channels(self, n: int = 3) -> list[tuple[int, int]]:
        """The *n* busiest channels; ties keep first-seen order."""
        return self.by_channel.most_common(n)

    def top_rules(self, n: int = 3) -> list[tuple[str, int]]:
        """The *n* most triggered rule keys; ties keep first-seen order."""
        return self.by_rule.most_common(n)
