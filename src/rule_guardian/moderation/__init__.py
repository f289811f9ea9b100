"""Moderation package: rule compilation, classification and decisions.

Public API
----------
- :func:`compile_rules` - build matchers from a :class:`RuleSet`
- :func:`classify` - evaluate one message into a :class:`Verdict`
- :class:`ModerationSession` - cooldowns, daily metrics, log-channel cache
- :class:`ModerationPipeline` - per-message orchestration
- :class:`MessageDispatcher` - single-consumer queue feeding the pipeline
"""

from rule_guardian.moderation.classifier import classify
from rule_guardian.moderation.cooldown import CooldownTracker
from rule_guardian.moderation.dispatcher import MessageDispatcher
from rule_guardian.moderation.metrics import DailyMetrics
from rule_guardian.moderation.models import (
    CompiledRules,
    MessageEvent,
    RuleSet,
    TriggerType,
    Verdict,
    WarningStatus,
)
from rule_guardian.moderation.pipeline import ModerationPipeline, ModerationTransport
from rule_guardian.moderation.rules import compile_rules
from rule_guardian.moderation.session import ModerationSession

__all__ = [
    "CompiledRules",
    "CooldownTracker",
    "DailyMetrics",
    "MessageDispatcher",
    "MessageEvent",
    "ModerationPipeline",
    "ModerationSession",
    "ModerationTransport",
    "RuleSet",
    "TriggerType",
    "Verdict",
    "WarningStatus",
    "classify",
    "compile_rules",
]
