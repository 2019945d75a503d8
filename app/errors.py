from typing import Optional


class ReportError(Exception):
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class FormatError(ReportError):
    """A field failed its format rule. The user can correct and resubmit."""

    status_code = 400

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class ThrottleError(ReportError):
    status_code = 429

    def __init__(self, client_key: str, retry_after: int, message: Optional[str] = None):
        self.client_key = client_key
        self.retry_after = retry_after
        super().__init__(message or "Too many submission attempts. Please try again later.")


class UpstreamError(ReportError):
    """An external dependency (identity lookup, webhook) failed."""

    def __init__(self, service: str, message: str):
        self.service = service
        super().__init__(message)
