"""Discord client wiring for Rule Guardian."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Any

import discord

from rule_guardian.config import Settings
from rule_guardian.logging import get_logger
from rule_guardian.moderation.dispatcher import MessageDispatcher
from rule_guardian.moderation.models import MessageEvent
from rule_guardian.moderation.pipeline import ModerationPipeline
from rule_guardian.moderation.rules import compile_rules
from rule_guardian.moderation.session import ModerationSession

log = get_logger("rule_guardian.discord.bot")

COOLDOWN_SWEEP_INTERVAL_SECONDS = 600


def _is_standard_text_channel(channel: Any) -> bool:
    return isinstance(channel, discord.TextChannel) and channel.type == discord.ChannelType.text


def message_to_event(message: discord.Message) -> MessageEvent:
    """Build a platform-neutral :class:`MessageEvent` from a Discord message."""
    channel = message.channel
    roles = getattr(message.author, "roles", None) or []
    return MessageEvent(
        message_id=message.id,
        author_id=message.author.id,
        author_tag=str(message.author),
        author_is_bot=message.author.bot,
        guild_id=message.guild.id if message.guild is not None else None,
        channel_id=channel.id,
        channel_name=getattr(channel, "name", None),
        channel_is_text=_is_standard_text_channel(channel),
        content=message.content,
        created_at=message.created_at,
        jump_url=message.jump_url,
        author_role_ids=frozenset(role.id for role in roles),
        source=message,
    )


class DiscordTransport:
    """Send warnings and mod-log entries through a Discord client."""

    def __init__(self, client: discord.Client) -> None:
        self._client = client

    async def send_warning(self, event: MessageEvent, content: str) -> None:
        message = event.source
        if not isinstance(message, discord.Message):
            raise TypeError("event has no Discord message to reply to")
        await message.reply(
            content,
            mention_author=True,
            allowed_mentions=discord.AllowedMentions(
                everyone=False, users=False, roles=False, replied_user=True
            ),
        )

    def get_cached_channel(self, guild_id: int, channel_id: int) -> discord.TextChannel | None:
        guild = self._client.get_guild(guild_id)
        if guild is None:
            return None
        channel = guild.get_channel(channel_id)
        return channel if _is_standard_text_channel(channel) else None  # type: ignore[return-value]

    async def fetch_channel(self, guild_id: int, channel_id: int) -> discord.TextChannel | None:
        guild = self._client.get_guild(guild_id)
        if guild is None:
            return None
        channel = await guild.fetch_channel(channel_id)
        return channel if _is_standard_text_channel(channel) else None  # type: ignore[return-value]

    async def find_channel_by_name(self, guild_id: int, name: str) -> discord.TextChannel | None:
        guild = self._client.get_guild(guild_id)
        if guild is None:
            return None
        for channel in await guild.fetch_channels():
            if _is_standard_text_channel(channel) and channel.name.lower() == name:
                return channel  # type: ignore[return-value]
        return None

    async def send_log(self, channel: Any, content: str) -> None:
        await channel.send(content, allowed_mentions=discord.AllowedMentions.none())


class RuleGuardianBot(discord.Client):
    """Discord client that feeds guild messages into the moderation pipeline."""

    def __init__(
        self,
        settings: Settings,
        session: ModerationSession | None = None,
    ) -> None:
        """Initialize the bot.

        Args:
            settings: Loaded application settings.
            session: Optional pre-built session (defaults to one built from settings).
        """
        intents = discord.Intents.default()
        intents.guilds = True
        intents.guild_messages = True
        # Must also be enabled in the Developer Portal
        intents.message_content = True

        super().__init__(intents=intents)

        self._settings = settings
        self._session = session or ModerationSession.from_settings(settings)
        self._pipeline = ModerationPipeline(
            settings=settings,
            rules=compile_rules(settings.rule_set()),
            session=self._session,
            transport=DiscordTransport(self),
        )
        self._dispatcher = MessageDispatcher(self._pipeline, maxsize=settings.dispatch_queue_size)
        self._sweep_task: asyncio.Task[None] | None = None

    @property
    def pipeline(self) -> ModerationPipeline:
        return self._pipeline

    @property
    def dispatcher(self) -> MessageDispatcher:
        return self._dispatcher

    async def setup_hook(self) -> None:
        """Start background workers once the event loop is running."""
        self._dispatcher.start()
        if self._settings.warning_cooldown_seconds > 0:
            self._sweep_task = asyncio.create_task(self._cooldown_sweep_loop())

    async def _cooldown_sweep_loop(self) -> None:
        """Periodically drop cooldown entries whose window has elapsed."""
        while True:
            await asyncio.sleep(COOLDOWN_SWEEP_INTERVAL_SECONDS)
            removed = self._session.cooldowns.sweep()
            if removed:
                log.debug("cooldowns_swept", removed=removed)

    async def close(self) -> None:
        """Stop background workers, then disconnect."""
        task = self._sweep_task
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._sweep_task = None

        await self._dispatcher.stop()
        await super().close()

    async def on_ready(self) -> None:
        """Called when the bot is fully ready."""
        if self.user is None:
            return
        log.info(
            "rule_guardian_ready",
            user=str(self.user),
            channel_ids=sorted(self._settings.rule_channel_ids),
            channel_names=sorted(self._settings.rule_channel_names),
            guild_id=self._settings.guild_id or "(not set)",
        )

    async def on_message(self, message: discord.Message) -> None:
        """Queue every guild message for moderation."""
        if message.guild is None or message.author.bot:
            return
        await self._dispatcher.submit(message_to_event(message))

    async def on_error(self, event_method: str, /, *args: Any, **kwargs: Any) -> None:
        log.exception("client_error", event=event_method)
