"""Rule compilation: raw term lists into reusable matchers.

Matchers are built once at startup. Terms and price keywords match whole
words; exception patterns match anywhere so partial phrases work. All
user-supplied text is escaped and matched case-insensitively. Word
boundaries only treat ASCII letters, digits and underscore as word
characters, so a term next to an accented letter still counts as a whole word.
"""

from __future__ import annotations

import re

from rule_guardian.moderation.models import CompiledMatcher, CompiledRules, RuleSet

_BOUNDARY = r"(?a:\b)"


def word_matcher(value: str) -> CompiledMatcher:
    """Whole-word, case-insensitive matcher for *value*."""
    pattern = rf"{_BOUNDARY}{re.escape(value)}{_BOUNDARY}"
    return CompiledMatcher(value=value, regex=re.compile(pattern, re.IGNORECASE))


def substring_matcher(value: str) -> CompiledMatcher:
    """Plain substring, case-insensitive matcher for *value*."""
    return CompiledMatcher(value=value, regex=re.compile(re.escape(value), re.IGNORECASE))


def compile_rules(rule_set: RuleSet) -> CompiledRules:
    """Compile a :class:`RuleSet` into term, exception and price matchers."""
    return CompiledRules(
        terms=tuple(word_matcher(term) for term in rule_set.restricted_terms),
        exceptions=tuple(substring_matcher(p) for p in rule_set.exception_patterns),
        price_keywords=tuple(word_matcher(keyword) for keyword in rule_set.price_keywords),
        enable_price_pattern=rule_set.enable_price_pattern,
    )
