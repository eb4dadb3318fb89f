"""
Governance sub-package

Provides the cost tracker and the request rate limiter.
"""

from truecheck_core.governance.cost_tracker import CostTracker
from truecheck_core.governance.rate_limiter import RequestRateLimiter

__all__ = ["CostTracker", "RequestRateLimiter"]
