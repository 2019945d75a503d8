from fastapi import Request

from .config import Settings
from .providers.base import IdentityProviderBase
from .services.rate_limiter import RateLimiter
from .services.submission import SubmissionHandler


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_submission_handler(request: Request) -> SubmissionHandler:
    return request.app.state.submission_handler


def get_identity_provider(request: Request) -> IdentityProviderBase:
    return request.app.state.identity_provider
