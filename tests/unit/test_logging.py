"""Tests for logging configuration."""

import logging

import pytest
import structlog

from rule_guardian.logging import message_context, setup_logging


@pytest.fixture
def restore_logging():
    """Undo root handler and structlog changes made by setup_logging."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestMessageContext:
    """Tests for message_context."""

    def test_binds_event_ids_inside_block(self, event_factory):
        with message_context(event_factory(message_id=7)):
            bound = structlog.contextvars.get_contextvars()

        assert bound == {
            "message_id": 7,
            "user_id": 333,
            "channel_id": 222,
            "guild_id": 111,
        }
        assert structlog.contextvars.get_contextvars() == {}

    def test_unbinds_on_error(self, event_factory):
        with pytest.raises(RuntimeError), message_context(event_factory()):
            raise RuntimeError("boom")

        assert structlog.contextvars.get_contextvars() == {}


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_console_only(self, settings_factory, restore_logging):
        root = logging.getLogger()
        before = len(root.handlers)

        setup_logging(settings_factory(log_level="debug"))

        assert len(root.handlers) == before + 1
        assert root.level == logging.DEBUG
        assert logging.getLogger("discord").level == logging.WARNING

    def test_file_handler_added(self, settings_factory, restore_logging, tmp_path):
        settings = settings_factory(log_to_file=True, log_directory=str(tmp_path / "logs"))

        setup_logging(settings)

        file_handlers = [
            h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)
        ]
        assert len(file_handlers) == 1
        assert (tmp_path / "logs").is_dir()
