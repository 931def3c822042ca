"""
Rate limiter for provider requests.

This module provides rate limiting functionality to prevent
exceeding API rate limits for AI providers.
"""

import asyncio
import logging
import time
from collections import deque
from typing import Dict, Any


logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Token bucket rate limiter.

    Refills ``requests_per_minute`` tokens per minute and additionally caps
    the number of requests started within any one second at ``burst_size``.
    """

    def __init__(self, requests_per_minute: int = 60, burst_size: int = 10):
        """
        Initialize rate limiter.

        Args:
            requests_per_minute: Maximum requests per minute
            burst_size: Maximum requests per second
        """
        self.requests_per_minute = requests_per_minute
        self.burst_size = burst_size

        self.tokens = float(requests_per_minute)
        self.last_refill = time.monotonic()
        self.request_history = deque()

        self.total_requests = 0
        self.delayed_requests = 0
        self._lock = asyncio.Lock()

        logger.info(f"RateLimiter initialized: {requests_per_minute}/min, burst {burst_size}")

    async def wait_if_needed(self):
        """Block until a request can be made without exceeding the limits."""
        async with self._lock:
            now = time.monotonic()
            self._refill(now)

            wait_time = self._calculate_wait_time(now)
            if wait_time > 0:
                self.delayed_requests += 1
                logger.debug(f"Rate limit reached, waiting {wait_time:.2f} seconds")
                await asyncio.sleep(wait_time)
                now = time.monotonic()
                self._refill(now)

            self.tokens = max(0.0, self.tokens - 1)
            self.request_history.append(now)
            self.total_requests += 1

    def _refill(self, now: float):
        elapsed = now - self.last_refill
        self.tokens = min(float(self.requests_per_minute), self.tokens + elapsed * self.requests_per_minute / 60)
        self.last_refill = now
        while self.request_history and now - self.request_history[0] >= 1.0:
            self.request_history.popleft()

    def _calculate_wait_time(self, now: float) -> float:
        wait = 0.0
        if self.tokens < 1:
            wait = (1 - self.tokens) * 60 / self.requests_per_minute
        if len(self.request_history) >= self.burst_size:
            wait = max(wait, 1.0 - (now - self.request_history[0]))
        return wait

    def get_stats(self) -> Dict[str, Any]:
        return {
            "requests_per_minute": self.requests_per_minute,
            "burst_size": self.burst_size,
            "available_tokens": round(self.tokens, 2),
            "total_requests": self.total_requests,
            "delayed_requests": self.delayed_requests,
        }
