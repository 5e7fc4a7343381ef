"""
Rate Limiting

Sliding-window limiter shared by every endpoint of a provider client.
"""

from stockchart.services.rate_limit.limiter import SlidingWindowRateLimiter

__all__ = ["SlidingWindowRateLimiter"]
