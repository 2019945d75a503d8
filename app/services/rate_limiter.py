"""Simple in-memory rate limiter for the report submission endpoint.

This is a lightweight implementation suitable for single-instance deployments.
For multiple instances, the window table would have to move to a shared store.
"""
import logging
import math
import time
from dataclasses import dataclass
from threading import Lock
from typing import Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class RateLimitWindow:
    window_start: float
    count: int = 0


class RateLimiter:
    """
    Fixed-window rate limiter keyed by client address.

    The first attempt from a client opens a window; attempts inside it are
    counted and admitted up to max_requests. Rejected attempts never move the
    window, so a client is admitted again once the window has elapsed.
    """

    def __init__(self, max_requests: int = 3, window_seconds: float = 120.0):
        """
        Initialize rate limiter.

        Args:
            max_requests: Maximum number of attempts allowed per window
            window_seconds: Window length in seconds (default: 2 minutes)
        """
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._windows: Dict[str, RateLimitWindow] = {}
        self._lock = Lock()

    def _is_expired(self, window: RateLimitWindow, current_time: float) -> bool:
        return current_time - window.window_start >= self.window_seconds

    def admit(self, client_key: str, now: Optional[float] = None) -> bool:
        """
        Count an attempt from client_key and decide whether it is allowed.

        Args:
            client_key: Client address
            now: Monotonic timestamp in seconds (defaults to time.monotonic())

        Returns:
            True if the attempt is within the cap for the current window
        """
        current_time = time.monotonic() if now is None else now

        with self._lock:
            window = self._windows.get(client_key)

            if window is None or self._is_expired(window, current_time):
                self._windows[client_key] = RateLimitWindow(window_start=current_time, count=1)
                return True

            window.count += 1
            if window.count > self.max_requests:
                logger.warning(
                    f"Rate limit exceeded for {client_key}: {window.count} attempts in window"
                )
                return False

            return True

    def retry_after(self, client_key: str, now: Optional[float] = None) -> int:
        """Seconds until the client's current window expires (0 if none)."""
        current_time = time.monotonic() if now is None else now

        with self._lock:
            window = self._windows.get(client_key)
            if window is None or self._is_expired(window, current_time):
                return 0
            remaining = window.window_start + self.window_seconds - current_time
            return max(1, math.ceil(remaining))

    def get_attempt_count(self, client_key: str, now: Optional[float] = None) -> int:
        """Get attempt count in the client's current window."""
        current_time = time.monotonic() if now is None else now

        with self._lock:
            window = self._windows.get(client_key)
            if window is None or self._is_expired(window, current_time):
                return 0
            return window.count

    def sweep(self, now: Optional[float] = None) -> int:
        """Drop expired windows. Returns the number of keys removed."""
        current_time = time.monotonic() if now is None else now

        with self._lock:
            expired = [
                key for key, window in self._windows.items()
                if self._is_expired(window, current_time)
            ]
            for key in expired:
                del self._windows[key]

        if expired:
            logger.debug(f"Swept {len(expired)} expired rate limit windows")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)
