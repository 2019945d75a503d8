from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from .config import Settings, get_settings
from .providers.base import IdentityProviderBase
from .providers.simulated import SimulatedIdentityProvider
from .routers import reports_router
from .services.notifications import NotificationDispatcher
from .services.rate_limiter import RateLimiter
from .services.submission import SubmissionHandler

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


async def _sweep_rate_limits(rate_limiter: RateLimiter, interval_seconds: float) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        rate_limiter.sweep()


def create_app(
    settings: Optional[Settings] = None,
    identity_provider: Optional[IdentityProviderBase] = None,
    webhook_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    settings = settings or get_settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    app = FastAPI(title=settings.app_name)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def _startup() -> None:
        rate_limiter = RateLimiter(
            max_requests=settings.report_rate_limit_max_attempts,
            window_seconds=settings.report_rate_limit_window_seconds,
        )
        dispatcher = NotificationDispatcher(
            settings,
            client=httpx.AsyncClient(
                timeout=settings.webhook_timeout_seconds,
                transport=webhook_transport,
            ),
        )

        app.state.rate_limiter = rate_limiter
        app.state.dispatcher = dispatcher
        app.state.identity_provider = identity_provider or SimulatedIdentityProvider(
            delay_seconds=settings.identity_check_delay_seconds
        )
        app.state.submission_handler = SubmissionHandler(rate_limiter, dispatcher)
        app.state.sweep_task = asyncio.create_task(
            _sweep_rate_limits(rate_limiter, settings.rate_limit_sweep_interval_seconds)
        )

        if not settings.webhook_enabled:
            logger.warning("DISCORD_WEBHOOK_URL is not set; reports will not be forwarded")
        logger.info(f"🚀 Server started on http://localhost:{settings.port}")

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        app.state.sweep_task.cancel()
        try:
            await app.state.sweep_task
        except asyncio.CancelledError:
            pass

        await app.state.submission_handler.drain(timeout=settings.webhook_timeout_seconds)
        await app.state.dispatcher.aclose()

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info(
            f"Malformed request body: path={request.url.path}",
            extra={"errors": exc.errors()},
        )
        if request.url.path == "/verify-identity":
            content = {"valid": False, "exists": False, "message": "Invalid request body"}
        else:
            content = {"success": False, "message": "Invalid request body"}
        return JSONResponse(status_code=400, content=content)

    app.include_router(reports_router)

    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    @app.get("/", include_in_schema=False)
    def index() -> FileResponse:
        return FileResponse(STATIC_DIR / "index.html")

    return app


app = create_app()
