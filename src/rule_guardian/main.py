"""Main entry point for Rule Guardian."""

from __future__ import annotations

import asyncio

import discord

from rule_guardian.config import get_settings
from rule_guardian.discord.bot import RuleGuardianBot
from rule_guardian.logging import get_logger, setup_logging
from rule_guardian.moderation.messages import format_error


async def main() -> int:
    """Start the moderation client. Returns a process exit code."""
    settings = get_settings()
    setup_logging(settings)
    log = get_logger("rule_guardian.main")

    if not settings.enabled:
        log.info("rule_guardian_disabled", hint="Set RG_ENABLED=true to enable it")
        return 0

    if settings.discord_token is None or not settings.discord_token.get_secret_value():
        log.error("discord_token_missing", hint="Set DISCORD_TOKEN")
        return 1

    bot = RuleGuardianBot(settings)
    log.info(
        "starting_rule_guardian",
        environment=settings.environment,
        restricted_terms=len(settings.restricted_terms),
        exception_patterns=len(settings.exception_patterns),
        price_pattern=settings.enable_price_pattern,
        cooldown_seconds=settings.warning_cooldown_seconds,
    )

    try:
        await bot.start(settings.discord_token.get_secret_value())
    except discord.LoginFailure as e:
        log.error("login_failed", error=format_error(e))
        return 1
    except KeyboardInterrupt:
        log.info("shutdown_requested")
    finally:
        await bot.close()
        log.info("rule_guardian_stopped")
    return 0


def run() -> None:
    """Run the application."""
    raise SystemExit(asyncio.run(main()))


if __name__ == "__main__":
    run()
