"""Per-message moderation pipeline.

scope check -> classify -> metrics -> cooldown -> warning reply -> mod log

The warning can be suppressed by cooldown or fail to send; the mod log is
attempted regardless. Nothing raised by the transport escapes
:meth:`ModerationPipeline.handle`.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol

from rule_guardian.logging import get_logger, message_context
from rule_guardian.moderation.classifier import classify
from rule_guardian.moderation.messages import (
    build_mod_log_message,
    build_warning_message,
    format_error,
)
from rule_guardian.moderation.models import CompiledRules, MessageEvent, Verdict, WarningStatus
from rule_guardian.moderation.session import ModerationSession

if TYPE_CHECKING:
    from rule_guardian.config import Settings

log = get_logger("rule_guardian.moderation.pipeline")


class LogChannel(Protocol):
    """Anything the transport can post a mod-log entry to."""

    id: int


class ModerationTransport(Protocol):
    """Outward calls the pipeline makes to the chat platform.

    Channel lookups return ``None`` for anything that is not a standard
    text channel.
    """

    async def send_warning(self, event: MessageEvent, content: str) -> None: ...

    def get_cached_channel(self, guild_id: int, channel_id: int) -> LogChannel | None: ...

    async def fetch_channel(self, guild_id: int, channel_id: int) -> LogChannel | None: ...

    async def find_channel_by_name(self, guild_id: int, name: str) -> LogChannel | None: ...

    async def send_log(self, channel: Any, content: str) -> None: ...


def _utc_now() -> datetime:
    return datetime.now(UTC)


class ModerationPipeline:
    """Run the detection-and-decision pipeline for each inbound message."""

    def __init__(
        self,
        *,
        settings: Settings,
        rules: CompiledRules,
        session: ModerationSession,
        transport: ModerationTransport,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._settings = settings
        self._rules = rules
        self._session = session
        self._transport = transport
        self._clock = clock

    @property
    def session(self) -> ModerationSession:
        return self._session

    def is_in_scope(self, event: MessageEvent) -> bool:
        """Return True if *event* is a human message in a moderated channel."""
        settings = self._settings
        if not event.in_guild or not event.channel_is_text:
            return False
        if settings.guild_id is not None and event.guild_id != settings.guild_id:
            return False
        if event.author_is_bot:
            return False
        if settings.exempt_role_ids & event.author_role_ids:
            return False

        # Explicit IDs win over names
        if settings.rule_channel_ids:
            return event.channel_id in settings.rule_channel_ids
        return (event.channel_name or "").lower() in settings.rule_channel_names

    async def handle(self, event: MessageEvent) -> Verdict | None:
        """Process one message event.

        Returns the verdict for in-scope messages, ``None`` otherwise.
        """
        if not self.is_in_scope(event):
            return None

        verdict = classify(event.content, self._rules)
        if not verdict.triggered:
            return verdict

        with message_context(event):
            now = self._clock()
            self._session.metrics.record(verdict, event.channel_id, now)
            await self._handle_triggered(event, verdict, now)
        return verdict

    async def _handle_triggered(
        self, event: MessageEvent, verdict: Verdict, now: datetime
    ) -> None:
        suppressed = self._session.cooldowns.should_suppress(
            event.author_id, event.channel_id, now.timestamp()
        )
        status = WarningStatus.COOLDOWN_SUPPRESSED if suppressed else WarningStatus.SENT
        warning_error = ""

        if not suppressed:
            try:
                await self._transport.send_warning(
                    event, build_warning_message(event, verdict, self._settings.rules_url)
                )
            except Exception as e:
                status = WarningStatus.FAILED
                warning_error = format_error(e)
                log.warning("warning_send_failed", error=warning_error)

        log.info(
            "message_triggered",
            trigger_types=verdict.describe_trigger_types(),
            warning_status=status.value,
            triggers_today=self._session.metrics.triggers_today,
        )
        await self._send_mod_log(event, verdict, status, warning_error)

    async def resolve_log_channel(self, guild_id: int) -> LogChannel | None:
        """Find the mod-log channel: cache, then configured ID, then name."""
        cache = self._session.log_channel_ids
        cached_id = cache.get(guild_id)
        if cached_id is not None:
            channel = self._transport.get_cached_channel(guild_id, cached_id)
            if channel is not None:
                return channel

        configured_id = self._settings.mod_log_channel_id
        if configured_id is not None:
            try:
                channel = await self._transport.fetch_channel(guild_id, configured_id)
            except Exception as e:
                log.debug("mod_log_channel_fetch_failed", error=format_error(e))
                channel = None
            if channel is not None:
                cache[guild_id] = channel.id
                return channel

        channel = await self._transport.find_channel_by_name(
            guild_id, self._settings.mod_log_channel_name
        )
        if channel is not None:
            cache[guild_id] = channel.id
        return channel

    async def _send_mod_log(
        self,
        event: MessageEvent,
        verdict: Verdict,
        status: WarningStatus,
        warning_error: str,
    ) -> None:
        if event.guild_id is None:
            return
        try:
            channel = await self.resolve_log_channel(event.guild_id)
            if channel is None:
                log.error(
                    "mod_log_channel_not_found",
                    hint="Configure RG_MOD_LOG_CHANNEL_ID or RG_MOD_LOG_CHANNEL_NAME",
                )
                return

            content = build_mod_log_message(
                event,
                verdict,
                self._session.metrics,
                status,
                warning_error,
                log_matched_terms=self._settings.log_matched_terms,
            )
            await self._transport.send_log(channel, content)
        except Exception as e:
            log.error("mod_log_send_failed", error=format_error(e))
