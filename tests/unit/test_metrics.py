"""Unit tests for the daily metrics aggregator."""

from datetime import UTC, date, datetime, timedelta, timezone

from rule_guardian.moderation.metrics import DailyMetrics, price_rule_key, term_rule_key, utc_day
from rule_guardian.moderation.models import TriggerType, Verdict

DAY_ONE = datetime(2026, 5, 1, 23, 59, tzinfo=UTC)
DAY_TWO = datetime(2026, 5, 2, 0, 1, tzinfo=UTC)


def _verdict(terms=(), signals=()):
    types = set()
    if terms:
        types.add(TriggerType.WORD_MATCH)
    if signals:
        types.add(TriggerType.PRICE_PATTERN)
    return Verdict(
        triggered=True,
        matched_terms=tuple(terms),
        matched_price_signals=tuple(signals),
        trigger_types=frozenset(types),
    )


class TestUtcDay:
    """Tests for utc_day."""

    def test_converts_aware_datetimes_to_utc(self):
        tz = timezone(timedelta(hours=-5))
        assert utc_day(datetime(2026, 5, 1, 22, 0, tzinfo=tz)) == date(2026, 5, 2)

    def test_naive_datetime_taken_as_utc(self):
        assert utc_day(datetime(2026, 5, 1, 22, 0)) == date(2026, 5, 1)

    def test_rule_keys(self):
        assert term_rule_key("Sell") == "term:sell"
        assert price_rule_key("USD") == "price:usd"


class TestDailyMetrics:
    """Tests for DailyMetrics."""

    def test_record_counts_triggers_channels_and_rules(self):
        metrics = DailyMetrics(day=DAY_ONE.date())
        metrics.record(_verdict(terms=["sell"], signals=["$400", "$"]), 10, DAY_ONE)

        assert metrics.triggers_today == 1
        assert metrics.by_channel == {10: 1}
        assert metrics.by_rule == {"term:sell": 1, "price:$400": 1, "price:$": 1}

    def test_accumulates_within_day(self):
        metrics = DailyMetrics(day=DAY_ONE.date())
        metrics.record(_verdict(terms=["sell"]), 10, DAY_ONE)
        metrics.record(_verdict(terms=["sell"]), 11, DAY_ONE)

        assert metrics.triggers_today == 2
        assert metrics.by_rule["term:sell"] == 2

    def test_new_utc_day_resets_before_recording(self):
        metrics = DailyMetrics(day=DAY_ONE.date())
        metrics.record(_verdict(terms=["sell"]), 10, DAY_ONE)
        metrics.record(_verdict(terms=["sell"]), 10, DAY_ONE)

        metrics.record(_verdict(signals=["usd"]), 20, DAY_TWO)

        assert metrics.day == DAY_TWO.date()
        assert metrics.triggers_today == 1
        assert metrics.by_channel == {20: 1}
        assert metrics.by_rule == {"price:usd": 1}

    def test_roll_over_same_day_is_noop(self):
        metrics = DailyMetrics(day=DAY_ONE.date())
        metrics.record(_verdict(terms=["sell"]), 10, DAY_ONE)

        assert metrics.roll_over(DAY_ONE.date()) is False
        assert metrics.triggers_today == 1

    def test_top_n_orders_by_count_then_first_seen(self):
        metrics = DailyMetrics(day=DAY_ONE.date())
        for channel_id in (1, 2, 3, 4, 4):
            metrics.record(_verdict(terms=["sell"]), channel_id, DAY_ONE)

        assert metrics.top_channels() == [(4, 2), (1, 1), (2, 1)]

    def test_top_rules(self):
        metrics = DailyMetrics(day=DAY_ONE.date())
        metrics.record(_verdict(terms=["sell"], signals=["usd"]), 1, DAY_ONE)
        metrics.record(_verdict(signals=["usd"]), 1, DAY_ONE)

        assert metrics.top_rules(n=1) == [("price:usd", 2)]

    def test_empty_top_lists(self):
        metrics = DailyMetrics()
        assert metrics.top_channels() == []
        assert metrics.top_rules() == []
