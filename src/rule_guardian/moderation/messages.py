"""Text composition for user warnings and mod-log entries."""

from __future__ import annotations

from rule_guardian.moderation.metrics import DailyMetrics
from rule_guardian.moderation.models import MessageEvent, Verdict, WarningStatus

MOD_LOG_HEADER = "**Rule Guardian Trigger**"


def format_error(error: object) -> str:
    """Render an exception (or any error value) as a short string."""
    if error is None:
        return "unknown error"
    text = str(error)
    if not text and isinstance(error, BaseException):
        return type(error).__name__
    return text or "unknown error"


def channel_label(event: MessageEvent) -> str:
    if event.channel_name:
        return f"#{event.channel_name}"
    return f"<#{event.channel_id}>"


def build_warning_message(event: MessageEvent, verdict: Verdict, rules_url: str = "") -> str:
    """Build user guidance from the specific triggers that fired."""
    lines: list[str] = []

    if "sell" in verdict.matched_terms:
        lines.append('Please use the word "rehome" instead.')
    elif verdict.has_word_match:
        lines.append(
            "Restricted terms are not allowed here. Please edit your message to remove them."
        )

    if verdict.has_price_match:
        lines.append(
            f"Please refrain from using prices in {channel_label(event)} "
            "and send prices only in DMs."
        )

    if not lines:
        lines.append("Restricted terms/prices are not allowed here.")
        lines.append("Please edit your message to remove them.")

    if rules_url:
        lines.append(f"Rules: {rules_url}")

    return "\n".join(lines)


def _format_top(entries: list[tuple[str, int]]) -> str:
    return ", ".join(f"{key} ({count})" for key, count in entries) or "none"


def build_mod_log_message(
    event: MessageEvent,
    verdict: Verdict,
    metrics: DailyMetrics,
    warning_status: WarningStatus,
    warning_error: str = "",
    *,
    log_matched_terms: bool = True,
) -> str:
    """Build the compact, text-only mod-log entry for a triggered message."""
    top_channels = _format_top(
        [(f"<#{channel_id}>", count) for channel_id, count in metrics.top_channels()]
    )
    top_rules = _format_top(metrics.top_rules())

    lines = [
        MOD_LOG_HEADER,
        f"User: <@{event.author_id}> (`{event.author_tag}`)",
        f"Channel: <#{event.channel_id}>",
        f"Timestamp: <t:{int(event.created_at.timestamp())}:F>",
        f"Trigger type(s): {verdict.describe_trigger_types()}",
        f"Jump link: {event.jump_url}",
        f"Warning status: {warning_status.value}",
        f"Daily trigger count: {metrics.triggers_today}",
        f"Top channels today: {top_channels}",
        f"Top rules today: {top_rules}",
    ]

    if log_matched_terms:
        matched: list[str] = []
        if verdict.matched_terms:
            matched.append(f"terms=[{', '.join(verdict.matched_terms)}]")
        if verdict.matched_price_signals:
            matched.append(f"price_signals=[{', '.join(verdict.matched_price_signals)}]")
        if matched:
            lines.append(f"Matched: {' | '.join(matched)}")

    if warning_error:
        lines.append(f"Warning error: {warning_error}")

    return "\n".join(lines)
