"""
CostTracker のテスト
"""

import logging

import pytest

from truecheck_core.detector_config import CostConfig
from truecheck_core.domain.errors import ValidationError
from truecheck_core.governance.cost_tracker import CostTracker

# 2025-10-09 09:00:00 UTC (hour boundary)
START = 1_760_000_400.0


class FakeClock:
    def __init__(self, now: float = START):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tracker(clock):
    return CostTracker(CostConfig(), clock=clock)


class TestUserCostBudget:
    """ユーザー単位の時間あたりコスト制限"""

    def test_fresh_user_allowed(self, tracker):
        result = tracker.check_cost_rate_limit("u1", "FREE", 0.001)
        assert result.allowed is True
        assert result.remaining_cost == pytest.approx(0.01)

    def test_exceeding_plan_limit(self, tracker):
        tracker.record_cost("u1", 0.009)
        result = tracker.check_cost_rate_limit("u1", "FREE", 0.002)
        assert result.allowed is False
        assert result.remaining_cost == pytest.approx(0.001)

    def test_exactly_at_limit_allowed(self, tracker):
        tracker.record_cost("u1", 0.25)
        assert tracker.check_cost_rate_limit("u1", "PRO", 0.25).allowed is True

    def test_check_does_not_reserve(self, tracker):
        """チェックだけではコストは加算されない"""
        for _ in range(5):
            tracker.check_cost_rate_limit("u1", "FREE", 0.009)
        assert tracker.check_cost_rate_limit("u1", "FREE", 0.009).allowed is True

    def test_users_are_independent(self, tracker):
        tracker.record_cost("u1", 0.01)
        assert tracker.check_cost_rate_limit("u2", "FREE", 0.005).allowed is True

    def test_plan_limits(self, tracker):
        tracker.record_cost("u1", 0.40)
        assert tracker.check_cost_rate_limit("u1", "PRO", 0.05).allowed is True
        assert tracker.check_cost_rate_limit("u1", "FREE", 0.0).allowed is False

    def test_window_resets_next_hour(self, tracker, clock):
        tracker.record_cost("u1", 0.01)
        clock.now += 3599
        assert tracker.check_cost_rate_limit("u1", "FREE", 0.001).allowed is False
        clock.now += 1
        assert tracker.check_cost_rate_limit("u1", "FREE", 0.001).allowed is True

    def test_stale_windows_pruned(self, tracker, clock):
        """過去の時間枠のエントリは次の書き込みで破棄される"""
        tracker.record_cost("u1", 0.005)
        tracker.record_cost("u2", 0.005)
        clock.now += 3600
        tracker.record_cost("u3", 0.001)

        assert set(tracker._user_costs) == {"u3"}
        assert tracker.check_cost_rate_limit("u1", "FREE", 0.0).remaining_cost == pytest.approx(0.01)

    def test_unknown_plan(self, tracker):
        with pytest.raises(ValidationError, match="Unknown plan"):
            tracker.check_cost_rate_limit("u1", "GOLD", 0.001)


class TestDailyLedger:
    """日次コストとアラート・緊急停止"""

    def test_below_alert(self, tracker):
        assert tracker.track_daily_cost(10.0) is True
        usage = tracker.daily_usage()
        assert usage["total_cost"] == 10.0
        assert usage["remaining"] == 90.0
        assert usage["date"] == "2025-10-09"
        assert usage["alert_sent"] is False
        assert usage["emergency_stopped"] is False

    def test_alert_logged_once(self, tracker, caplog):
        with caplog.at_level(logging.WARNING, logger="truecheck_core.governance.cost_tracker"):
            assert tracker.track_daily_cost(80.0) is True
            assert tracker.track_daily_cost(1.0) is True
        alerts = [r for r in caplog.records if "cost alert" in r.getMessage()]
        assert len(alerts) == 1
        assert tracker.daily_usage()["alert_sent"] is True

    def test_emergency_stop(self, tracker, caplog):
        with caplog.at_level(logging.ERROR, logger="truecheck_core.governance.cost_tracker"):
            assert tracker.track_daily_cost(94.0) is True
            assert tracker.is_emergency_stopped() is False
            assert tracker.track_daily_cost(1.0) is False
            assert tracker.track_daily_cost(0.1) is False
        assert tracker.is_emergency_stopped() is True
        stops = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(stops) == 1

    def test_rollover_at_utc_midnight(self, tracker, clock):
        tracker.track_daily_cost(96.0)
        assert tracker.is_emergency_stopped() is True

        clock.now += 15 * 3600  # 2025-10-10 00:00 UTC
        assert tracker.is_emergency_stopped() is False
        usage = tracker.daily_usage()
        assert usage["date"] == "2025-10-10"
        assert usage["total_cost"] == 0.0

    def test_reset_daily_usage(self, tracker):
        tracker.track_daily_cost(99.0)
        tracker.reset_daily_usage()
        assert tracker.is_emergency_stopped() is False
        assert tracker.track_daily_cost(1.0) is True

    def test_custom_thresholds(self, clock):
        tracker = CostTracker(
            CostConfig(max_daily_cost=10.0, alert_threshold=5.0, emergency_stop_threshold=8.0),
            clock=clock,
        )
        assert tracker.track_daily_cost(7.5) is True
        assert tracker.track_daily_cost(0.5) is False
