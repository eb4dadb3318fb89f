"""
RequestRateLimiter のテスト
"""

import pytest

from truecheck_core.detector_config import CostConfig
from truecheck_core.domain.errors import ValidationError
from truecheck_core.governance.rate_limiter import RequestRateLimiter

# hour boundary
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
def limiter(clock):
    return RequestRateLimiter(CostConfig(plan_request_limits={"FREE": 3, "PRO": 5}), clock=clock)


class TestRequestRateLimiter:
    """リクエスト数制限のテスト"""

    def test_counts_down(self, limiter):
        results = [limiter.check_user_rate_limit("u1", "FREE") for _ in range(3)]
        assert [r.allowed for r in results] == [True, True, True]
        assert [r.remaining for r in results] == [2, 1, 0]
        assert results[0].limit == 3

    def test_blocks_over_limit(self, limiter):
        for _ in range(3):
            limiter.check_user_rate_limit("u1", "FREE")
        result = limiter.check_user_rate_limit("u1", "FREE")
        assert result.allowed is False
        assert result.remaining == 0

    def test_denied_requests_not_counted(self, limiter):
        """拒否されたリクエストはカウントしない"""
        for _ in range(10):
            limiter.check_user_rate_limit("u1", "FREE")
        assert limiter.status("u1", "PRO").remaining == 2

    def test_reset_at_is_window_end(self, limiter, clock):
        clock.now += 600
        result = limiter.check_user_rate_limit("u1", "FREE")
        assert result.reset_at == START + 3600

    def test_new_window(self, limiter, clock):
        for _ in range(3):
            limiter.check_user_rate_limit("u1", "FREE")
        clock.now += 3600
        assert limiter.check_user_rate_limit("u1", "FREE").allowed is True

    def test_stale_windows_pruned(self, limiter, clock):
        """過去の時間枠のカウンタは次の書き込みで破棄される"""
        limiter.check_user_rate_limit("u1", "FREE")
        limiter.check_user_rate_limit("u2", "FREE")
        clock.now += 3600
        limiter.check_user_rate_limit("u3", "FREE")

        assert set(limiter._counts) == {"u3"}
        assert limiter.status("u1", "FREE").remaining == 3

    def test_users_independent(self, limiter):
        for _ in range(3):
            limiter.check_user_rate_limit("u1", "FREE")
        assert limiter.check_user_rate_limit("u2", "FREE").allowed is True

    def test_status_does_not_count(self, limiter):
        limiter.status("u1", "FREE")
        limiter.status("u1", "FREE")
        assert limiter.check_user_rate_limit("u1", "FREE").remaining == 2

    def test_reset_user(self, limiter):
        for _ in range(3):
            limiter.check_user_rate_limit("u1", "FREE")
        limiter.reset_user("u1")
        assert limiter.check_user_rate_limit("u1", "FREE").allowed is True

    def test_default_plan_limits(self, clock):
        limiter = RequestRateLimiter(clock=clock)
        assert limiter.check_user_rate_limit("u1", "FREE").limit == 10
        assert limiter.check_user_rate_limit("u1", "ENTERPRISE").limit == 1000

    def test_unknown_plan(self, limiter):
        with pytest.raises(ValidationError):
            limiter.check_user_rate_limit("u1", "ENTERPRISE")
