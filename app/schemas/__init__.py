from .report import (
    ResignationReportCreate,
    SubmissionResponse,
    IdentityCheckRequest,
    IdentityCheckResponse,
    ClientAddressResponse,
    HealthResponse,
)

__all__ = [
    "ResignationReportCreate",
    "SubmissionResponse",
    "IdentityCheckRequest",
    "IdentityCheckResponse",
    "ClientAddressResponse",
    "HealthResponse",
]
