"""Report submission pipeline.

Received -> Admitted | RateLimited -> Validated | Rejected -> Responded, with
webhook dispatch running as a detached task after the response is decided.
"""
import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from typing import Optional, Set

from ..errors import FormatError, ThrottleError
from ..models.report import ValidatedReport
from ..schemas.report import ResignationReportCreate
from .notifications import DispatchOutcome, NotificationDispatcher
from .rate_limiter import RateLimiter
from .validation import validate_report

logger = logging.getLogger(__name__)

CONFIRMATION_MESSAGE = "Report submitted successfully! Expect a reply in Discord."


@dataclass
class SubmissionResult:
    success: bool
    message: str
    report: Optional[ValidatedReport] = None


class SubmissionHandler:
    def __init__(self, rate_limiter: RateLimiter, dispatcher: NotificationDispatcher):
        self._rate_limiter = rate_limiter
        self._dispatcher = dispatcher
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending_dispatches(self) -> int:
        return len(self._pending)

    async def submit(self, report: ResignationReportCreate, client_key: str) -> SubmissionResult:
        """
        Admit, validate and accept a report from client_key.

        Raises ThrottleError when the client is over its attempt cap and
        FormatError for the first invalid field. The webhook outcome never
        affects the result.
        """
        if not self._rate_limiter.admit(client_key):
            retry_after = self._rate_limiter.retry_after(client_key)
            logger.warning(
                "Rate limit exceeded for report submission",
                extra={
                    "client_ip": client_key,
                    "retry_after": retry_after,
                    "rejection_reason": "RATE_LIMIT_EXCEEDED",
                },
            )
            raise ThrottleError(client_key, retry_after)

        try:
            validated = validate_report(report, client_address=client_key)
        except FormatError as e:
            logger.info(
                f"Report rejected: field={e.field} message={e.message}",
                extra={
                    "client_ip": client_key,
                    "field": e.field,
                    "rejection_reason": "FORMAT_ERROR",
                },
            )
            raise

        logger.info(
            "New resignation report: identity_id=%s, name=%s, rank=%s, department=%s, ip=%s",
            validated.identity_id,
            validated.name_and_code,
            validated.rank,
            validated.department.value,
            validated.client_address,
            extra={
                "identity_id": validated.identity_id,
                "name_and_code": validated.name_and_code,
                "rank": validated.rank,
                "department": validated.department.value,
                "reason": validated.reason,
                "client_ip": validated.client_address,
                "reported_address": validated.reported_address,
                "submitted_at": validated.submitted_at.isoformat(),
            },
        )

        self._schedule_dispatch(validated)

        return SubmissionResult(success=True, message=CONFIRMATION_MESSAGE, report=validated)

    def _schedule_dispatch(self, report: ValidatedReport) -> None:
        task = asyncio.create_task(self._dispatcher.dispatch(report))
        self._pending.add(task)
        task.add_done_callback(partial(self._on_dispatch_done, report))

    def _on_dispatch_done(self, report: ValidatedReport, task: asyncio.Task) -> None:
        self._pending.discard(task)

        if task.cancelled():
            logger.warning(f"Webhook dispatch cancelled: identity_id={report.identity_id}")
            return

        error = task.exception()
        if error is not None:
            logger.error(
                f"Webhook dispatch crashed: identity_id={report.identity_id}",
                exc_info=error,
            )
            return

        outcome: DispatchOutcome = task.result()
        logger.info(
            f"Webhook dispatch finished: identity_id={report.identity_id} status={outcome.status.value}",
            extra={
                "identity_id": report.identity_id,
                "dispatch_status": outcome.status.value,
                "dispatch_reason": outcome.reason,
            },
        )

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for in-flight dispatches; cancel whatever outlives timeout."""
        if not self._pending:
            return

        _, not_done = await asyncio.wait(list(self._pending), timeout=timeout)
        for task in not_done:
            task.cancel()
        if not_done:
            await asyncio.gather(*not_done, return_exceptions=True)
