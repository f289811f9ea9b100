"""Message classification against compiled rules.

All checks are synchronous and pure: the same text and rules always give
the same :class:`Verdict`.
"""

from __future__ import annotations

import re

from rule_guardian.moderation.models import NOT_TRIGGERED, CompiledRules, TriggerType, Verdict

# Prices written like "$400", "£ 90", "€20.50" (ASCII digits only)
_SYMBOL_AMOUNT_PATTERN = re.compile(r"[$£€]\s?[0-9]+(?:[.,][0-9]{1,2})?")
# Symbol on its own still counts ("it is 400$")
_SYMBOL_PATTERN = re.compile(r"[$£€]")


def _unique_lower(values: list[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(value.lower() for value in values))


def find_price_signals(content: str, rules: CompiledRules) -> list[str]:
    """Collect symbol+amount, bare symbol and price keyword hits, in that order."""
    signals: list[str] = []
    signals.extend(_SYMBOL_AMOUNT_PATTERN.findall(content))
    signals.extend(_SYMBOL_PATTERN.findall(content))
    signals.extend(m.value for m in rules.price_keywords if m.matches(content))
    return signals


def classify(content: str | None, rules: CompiledRules) -> Verdict:
    """Classify *content* against *rules*.

    Any exception pattern match cancels the trigger, however many terms or
    prices the message also contains. Missing content is treated as empty.
    """
    content = content or ""

    matched_terms = [m.value for m in rules.terms if m.matches(content)]
    price_signals = find_price_signals(content, rules) if rules.enable_price_pattern else []

    if any(m.matches(content) for m in rules.exceptions):
        return NOT_TRIGGERED

    terms = _unique_lower(matched_terms)
    signals = _unique_lower(price_signals)

    trigger_types: set[TriggerType] = set()
    if terms:
        trigger_types.add(TriggerType.WORD_MATCH)
    if signals:
        trigger_types.add(TriggerType.PRICE_PATTERN)

    return Verdict(
        triggered=bool(trigger_types),
        matched_terms=terms,
        matched_price_signals=signals,
        trigger_types=frozenset(trigger_types),
    )
