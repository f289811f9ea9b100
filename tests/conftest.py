"""Pytest fixtures for Rule Guardian tests."""

import os
from datetime import UTC, datetime
from typing import Any

import pytest

from rule_guardian.moderation.models import MessageEvent

GUILD_ID = 111
CHANNEL_ID = 222
LOG_CHANNEL_ID = 999
USER_ID = 333


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set minimal environment variables and reset the settings cache."""
    os.environ.setdefault("DISCORD_TOKEN", "test-discord-token-placeholder")

    from rule_guardian.config import get_settings

    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


def create_test_settings(**kwargs: Any):
    """Helper to create Settings instance without loading .env file."""
    from rule_guardian.config import Settings

    return Settings(_env_file=None, **kwargs)


@pytest.fixture
def settings():
    """Default settings (rules from the built-in defaults)."""
    return create_test_settings(discord_token="test-discord-token")


def make_event(content: str | None = "hello", **overrides: Any) -> MessageEvent:
    """Build a message event in the default moderated channel."""
    fields: dict[str, Any] = {
        "message_id": 555,
        "author_id": USER_ID,
        "author_tag": "someone",
        "author_is_bot": False,
        "guild_id": GUILD_ID,
        "channel_id": CHANNEL_ID,
        "channel_name": "chatter",
        "channel_is_text": True,
        "content": content,
        "created_at": datetime(2026, 5, 1, 12, 0, tzinfo=UTC),
        "jump_url": f"https://discord.com/channels/{GUILD_ID}/{CHANNEL_ID}/555",
    }
    fields.update(overrides)
    return MessageEvent(**fields)


class FakeChannel:
    """Minimal stand-in for a mod-log text channel."""

    def __init__(self, channel_id: int, name: str = "mod-log") -> None:
        self.id = channel_id
        self.name = name


class FakeTransport:
    """Records outward calls made by the pipeline."""

    def __init__(self) -> None:
        self.warnings: list[tuple[MessageEvent, str]] = []
        self.logs: list[tuple[Any, str]] = []
        self.cached: dict[int, FakeChannel] = {}
        self.by_id: dict[int, FakeChannel] = {}
        self.by_name: dict[str, FakeChannel] = {"mod-log": FakeChannel(LOG_CHANNEL_ID)}
        self.warning_error: Exception | None = None
        self.log_error: Exception | None = None
        self.fetch_error: Exception | None = None
        self.fetch_calls = 0
        self.name_lookups = 0

    def add_channel(self, channel_id: int, name: str = "mod-log") -> FakeChannel:
        channel = FakeChannel(channel_id, name)
        self.by_id[channel_id] = channel
        return channel

    async def send_warning(self, event: MessageEvent, content: str) -> None:
        if self.warning_error is not None:
            raise self.warning_error
        self.warnings.append((event, content))

    def get_cached_channel(self, guild_id: int, channel_id: int) -> FakeChannel | None:
        return self.cached.get(channel_id)

    async def fetch_channel(self, guild_id: int, channel_id: int) -> FakeChannel | None:
        self.fetch_calls += 1
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.by_id.get(channel_id)

    async def find_channel_by_name(self, guild_id: int, name: str) -> FakeChannel | None:
        self.name_lookups += 1
        return self.by_name.get(name)

    async def send_log(self, channel: Any, content: str) -> None:
        if self.log_error is not None:
            raise self.log_error
        self.logs.append((channel, content))


@pytest.fixture
def transport():
    """Fake platform transport."""
    return FakeTransport()


@pytest.fixture
def event_factory():
    """Factory for message events (see :func:`make_event`)."""
    return make_event


@pytest.fixture
def settings_factory():
    """Factory for settings without .env loading."""
    return create_test_settings
