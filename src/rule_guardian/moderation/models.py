"""Data models for the moderation pipeline."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class TriggerType(StrEnum):
    """Why a message was classified as rule-violating."""

    WORD_MATCH = "word match"
    PRICE_PATTERN = "price pattern"


class WarningStatus(StrEnum):
    """Outcome of the user-facing warning for a triggered message."""

    SENT = "sent"
    COOLDOWN_SUPPRESSED = "cooldown_suppressed"
    FAILED = "failed"


@dataclass(frozen=True)
class RuleSet:
    """Raw rule configuration, before compilation."""

    restricted_terms: tuple[str, ...] = ()
    price_keywords: tuple[str, ...] = ()
    exception_patterns: tuple[str, ...] = ()
    enable_price_pattern: bool = True


@dataclass(frozen=True)
class CompiledMatcher:
    """A configured string paired with its case-insensitive regex."""

    value: str
    regex: re.Pattern[str]

    def matches(self, content: str) -> bool:
        return self.regex.search(content) is not None


@dataclass(frozen=True)
class CompiledRules:
    """Matchers built once from a :class:`RuleSet`."""

    terms: tuple[CompiledMatcher, ...] = ()
    exceptions: tuple[CompiledMatcher, ...] = ()
    price_keywords: tuple[CompiledMatcher, ...] = ()
    enable_price_pattern: bool = True


@dataclass(frozen=True)
class Verdict:
    """The classification result for one message.

    Matched values are lower-cased and kept in first-seen order, so they
    double as metric keys and render deterministically in the mod log.
    """

    triggered: bool = False
    matched_terms: tuple[str, ...] = ()
    matched_price_signals: tuple[str, ...] = ()
    trigger_types: frozenset[TriggerType] = frozenset()

    @property
    def has_word_match(self) -> bool:
        return TriggerType.WORD_MATCH in self.trigger_types

    @property
    def has_price_match(self) -> bool:
        return TriggerType.PRICE_PATTERN in self.trigger_types

    def describe_trigger_types(self) -> str:
        """Render trigger types in a stable order (word match first)."""
        return ", ".join(t.value for t in TriggerType if t in self.trigger_types)


NOT_TRIGGERED = Verdict()


@dataclass
class MessageEvent:
    """Platform-neutral view of an inbound chat message.

    ``source`` carries the platform object (e.g. a ``discord.Message``) so
    the transport can reply to it; the pipeline itself never inspects it.
    """

    message_id: int
    author_id: int
    author_tag: str
    author_is_bot: bool
    guild_id: int | None
    channel_id: int
    channel_name: str | None
    channel_is_text: bool
    content: str | None
    created_at: datetime
    jump_url: str
    author_role_ids: frozenset[int] = field(default_factory=frozenset)
    source: object | None = None

    @property
    def in_guild(self) -> bool:
        return self.guild_id is not None
