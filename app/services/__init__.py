from .rate_limiter import RateLimiter
from .notifications import NotificationDispatcher, DispatchOutcome, DispatchStatus
from .submission import SubmissionHandler, SubmissionResult

__all__ = [
    "RateLimiter",
    "NotificationDispatcher",
    "DispatchOutcome",
    "DispatchStatus",
    "SubmissionHandler",
    "SubmissionResult",
]
