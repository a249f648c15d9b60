"""
Rate limiting for endpoints that trigger outbound email
"""
import time
from collections import defaultdict
from fastapi import Request, HTTPException
from typing import Dict, List
import logging

from quizzy.config import settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    In-memory sliding-window rate limiter keyed by client address
    Limits are per process; a multi-worker deployment multiplies them
    """

    def __init__(self, requests_per_minute: int = 5, requests_per_hour: int = 50):
        self.requests_per_minute = requests_per_minute
        self.requests_per_hour = requests_per_hour

        # Storage: {client_id: [timestamp, ...]}
        self.minute_tracker: Dict[str, List[float]] = defaultdict(list)
        self.hour_tracker: Dict[str, List[float]] = defaultdict(list)

    def _get_client_id(self, request: Request) -> str:
        """
        Extract client identifier from request

        Keyed on the connection address only; X-Forwarded-For is not trusted.
        Behind a proxy, run uvicorn with --proxy-headers.
        """
        return request.client.host if request.client else "unknown"

    def _cleanup_old_entries(self, tracker: Dict[str, List[float]], window_seconds: int):
        """Remove entries older than window"""
        cutoff_time = time.time() - window_seconds

        for client_id in list(tracker.keys()):
            tracker[client_id] = [ts for ts in tracker[client_id] if ts > cutoff_time]

            if not tracker[client_id]:
                del tracker[client_id]

    def reset(self) -> None:
        self.minute_tracker.clear()
        self.hour_tracker.clear()

    async def check_rate_limit(self, request: Request) -> None:
        """
        Check if request exceeds rate limits

        Raises:
            HTTPException: 429 if rate limit exceeded
        """
        client_id = self._get_client_id(request)
        current_time = time.time()

        self._cleanup_old_entries(self.minute_tracker, 60)
        self._cleanup_old_entries(self.hour_tracker, 3600)

        if len(self.minute_tracker[client_id]) >= self.requests_per_minute:
            logger.warning(f"Rate limit exceeded (minute): {client_id}")
            raise HTTPException(
                status_code=429,
                detail=f"Too many requests. Limit: {self.requests_per_minute} requests per minute"
            )

        if len(self.hour_tracker[client_id]) >= self.requests_per_hour:
            logger.warning(f"Rate limit exceeded (hour): {client_id}")
            raise HTTPException(
                status_code=429,
                detail=f"Too many requests. Limit: {self.requests_per_hour} requests per hour"
            )

        self.minute_tracker[client_id].append(current_time)
        self.hour_tracker[client_id].append(current_time)

        logger.debug(
            f"Rate limit check passed: {client_id} "
            f"(minute: {len(self.minute_tracker[client_id])}, hour: {len(self.hour_tracker[client_id])})"
        )


# Global instance
email_rate_limiter = RateLimiter(
    requests_per_minute=settings.EMAIL_RATE_LIMIT_PER_MINUTE,
    requests_per_hour=settings.EMAIL_RATE_LIMIT_PER_HOUR
)
