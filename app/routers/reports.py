"""Resignation report API endpoints.

Public endpoints used by the form page (no auth required). Only report
submission is rate limited; the identity check is not.
"""
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from ..config import Settings
from ..dependencies import get_app_settings, get_identity_provider, get_submission_handler
from ..errors import FormatError, ThrottleError, UpstreamError
from ..providers.base import IdentityProviderBase
from ..schemas.report import (
    ClientAddressResponse,
    HealthResponse,
    IdentityCheckRequest,
    IdentityCheckResponse,
    ResignationReportCreate,
    SubmissionResponse,
)
from ..services.submission import SubmissionHandler
from ..services.validation import validate_identity_id

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reports"])

IPV4_MAPPED_PREFIX = "::ffff:"


def _strip_mapped_prefix(ip: str) -> str:
    if ip.startswith(IPV4_MAPPED_PREFIX):
        return ip[len(IPV4_MAPPED_PREFIX):]
    return ip


def get_client_ip(request: Request, settings: Settings) -> str:
    """Extract client IP from request.

    X-Forwarded-For is only honoured when the app is configured to sit behind
    a proxy, otherwise any client could pick its own rate limit key.
    """
    peer = _strip_mapped_prefix(request.client.host if request.client else "")

    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded and (settings.trust_forwarded_for or peer in settings.get_trusted_proxies()):
        # Take the first IP in the chain (original client)
        first_hop = _strip_mapped_prefix(forwarded.split(",")[0].strip())
        if first_hop:
            return first_hop

    return peer or "unknown"


@router.get("/client-address", response_model=ClientAddressResponse)
def get_client_address(request: Request, settings: Settings = Depends(get_app_settings)):
    return ClientAddressResponse(address=get_client_ip(request, settings))


@router.get("/health", response_model=HealthResponse)
def health(settings: Settings = Depends(get_app_settings)):
    return HealthResponse(status="ok", webhook_configured=settings.webhook_enabled)


@router.post("/verify-identity", response_model=IdentityCheckResponse)
async def verify_identity(
    body: IdentityCheckRequest,
    provider: IdentityProviderBase = Depends(get_identity_provider),
):
    """
    Check that an identity id is well formed and exists on the platform.
    """
    try:
        identity_id = validate_identity_id(body.identity_id)
    except FormatError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"valid": False, "exists": False, "message": e.message},
        )

    try:
        exists = await provider.verify(identity_id)
    except UpstreamError as e:
        logger.error(f"Identity check failed: service={e.service} identity_id={identity_id} error={e.message}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"valid": False, "exists": False, "message": "Identity service unavailable"},
        )
    except Exception:
        logger.exception(f"Identity check error: identity_id={identity_id}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"valid": False, "exists": False, "message": "Server error"},
        )

    return IdentityCheckResponse(
        valid=True,
        exists=exists,
        message="User exists in Discord" if exists else "User not found in Discord",
    )


@router.post("/submit-report", response_model=SubmissionResponse)
async def submit_report(
    report: ResignationReportCreate,
    request: Request,
    handler: SubmissionHandler = Depends(get_submission_handler),
    settings: Settings = Depends(get_app_settings),
):
    """
    Submit a resignation report.

    Rate limited per client address. The response depends only on admission
    and validation; forwarding to Discord happens afterwards.
    """
    client_ip = get_client_ip(request, settings)

    try:
        result = await handler.submit(report, client_ip)
    except ThrottleError as e:
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"success": False, "message": e.message},
            headers={"Retry-After": str(e.retry_after)},
        )
    except FormatError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": e.message},
        )
    except Exception:
        logger.exception("Report submission error", extra={"client_ip": client_ip})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": "Internal server error"},
        )

    return SubmissionResponse(success=result.success, message=result.message)
