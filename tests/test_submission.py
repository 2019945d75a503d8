"""
Tests for the report submission pipeline.

These tests cover:
- Throttled and rejected submissions never reach the webhook
- Accepted submissions respond before the webhook call finishes
- Webhook failures never change the submission result
"""
import asyncio
import logging

import httpx
import pytest

from app.errors import FormatError, ThrottleError
from app.schemas.report import ResignationReportCreate
from app.services.notifications import NotificationDispatcher
from app.services.rate_limiter import RateLimiter
from app.services.submission import CONFIRMATION_MESSAGE, SubmissionHandler

WEBHOOK_URL = "https://discord.test/api/webhooks/1/token"


def make_handler(settings, transport_handler, max_requests=3):
    dispatcher = NotificationDispatcher(
        settings,
        client=httpx.AsyncClient(transport=httpx.MockTransport(transport_handler)),
    )
    return SubmissionHandler(RateLimiter(max_requests=max_requests, window_seconds=120), dispatcher), dispatcher


class TestSubmissionHandler:
    def test_accepted_report_dispatched(self, settings_factory, webhook, valid_payload):
        async def scenario():
            handler, dispatcher = make_handler(settings_factory(discord_webhook_url=WEBHOOK_URL), webhook)
            result = await handler.submit(ResignationReportCreate(**valid_payload), "10.0.0.1")
            await handler.drain()
            await dispatcher.aclose()
            return result

        result = asyncio.run(scenario())

        assert result.success is True
        assert result.message == CONFIRMATION_MESSAGE
        assert result.report.client_address == "10.0.0.1"
        assert len(webhook.requests) == 1

    def test_response_does_not_wait_for_dispatch(self, settings_factory, valid_payload):
        async def scenario():
            release = asyncio.Event()

            async def slow_webhook(request):
                await release.wait()
                return httpx.Response(204)

            handler, dispatcher = make_handler(settings_factory(discord_webhook_url=WEBHOOK_URL), slow_webhook)
            result = await handler.submit(ResignationReportCreate(**valid_payload), "10.0.0.1")
            pending_after_submit = handler.pending_dispatches

            release.set()
            await handler.drain()
            await dispatcher.aclose()
            return result, pending_after_submit, handler.pending_dispatches

        result, pending_after_submit, pending_after_drain = asyncio.run(scenario())

        assert result.success is True
        assert pending_after_submit == 1
        assert pending_after_drain == 0

    def test_webhook_failure_keeps_success(self, settings_factory, webhook, valid_payload, caplog):
        webhook.status_code = 500

        async def scenario():
            handler, dispatcher = make_handler(settings_factory(discord_webhook_url=WEBHOOK_URL), webhook)
            result = await handler.submit(ResignationReportCreate(**valid_payload), "10.0.0.1")
            await handler.drain()
            await dispatcher.aclose()
            return result

        with caplog.at_level(logging.INFO):
            result = asyncio.run(scenario())

        assert result.success is True
        assert any("status=FAILED" in r.getMessage() for r in caplog.records)

    def test_dispatch_crash_is_logged_not_raised(self, settings_factory, valid_payload, caplog):
        async def scenario():
            handler, dispatcher = make_handler(settings_factory(discord_webhook_url=WEBHOOK_URL), lambda r: httpx.Response(204))

            async def broken_dispatch(report):
                raise RuntimeError("boom")

            dispatcher.dispatch = broken_dispatch
            result = await handler.submit(ResignationReportCreate(**valid_payload), "10.0.0.1")
            await handler.drain()
            await dispatcher.aclose()
            return result

        with caplog.at_level(logging.ERROR):
            result = asyncio.run(scenario())

        assert result.success is True
        assert any("Webhook dispatch crashed" in r.getMessage() for r in caplog.records)

    def test_no_webhook_still_succeeds(self, settings_factory, webhook, valid_payload):
        async def scenario():
            handler, dispatcher = make_handler(settings_factory(), webhook)
            result = await handler.submit(ResignationReportCreate(**valid_payload), "10.0.0.1")
            await handler.drain()
            await dispatcher.aclose()
            return result

        assert asyncio.run(scenario()).success is True
        assert webhook.requests == []

    def test_invalid_report_rejected_without_dispatch(self, settings_factory, webhook, valid_payload):
        valid_payload["department"] = "XYZ"

        async def scenario():
            handler, dispatcher = make_handler(settings_factory(discord_webhook_url=WEBHOOK_URL), webhook)
            try:
                with pytest.raises(FormatError) as exc:
                    await handler.submit(ResignationReportCreate(**valid_payload), "10.0.0.1")
                return exc.value, handler.pending_dispatches
            finally:
                await dispatcher.aclose()

        error, pending = asyncio.run(scenario())

        assert error.field == "department"
        assert pending == 0
        assert webhook.requests == []

    def test_throttled_after_cap(self, settings_factory, webhook, valid_payload):
        async def scenario():
            handler, dispatcher = make_handler(settings_factory(discord_webhook_url=WEBHOOK_URL), webhook, max_requests=3)
            report = ResignationReportCreate(**valid_payload)
            for _ in range(3):
                await handler.submit(report, "10.0.0.1")
            try:
                with pytest.raises(ThrottleError) as exc:
                    await handler.submit(report, "10.0.0.1")
            finally:
                await handler.drain()
                await dispatcher.aclose()
            return exc.value

        error = asyncio.run(scenario())

        assert error.client_key == "10.0.0.1"
        assert 0 < error.retry_after <= 120
        assert len(webhook.requests) == 3

    def test_rejected_attempts_count_toward_cap(self, settings_factory, webhook, valid_payload):
        bad = dict(valid_payload, rank="five")

        async def scenario():
            handler, dispatcher = make_handler(settings_factory(discord_webhook_url=WEBHOOK_URL), webhook, max_requests=3)
            try:
                for _ in range(3):
                    with pytest.raises(FormatError):
                        await handler.submit(ResignationReportCreate(**bad), "10.0.0.1")
                with pytest.raises(ThrottleError):
                    await handler.submit(ResignationReportCreate(**valid_payload), "10.0.0.1")
            finally:
                await dispatcher.aclose()

        asyncio.run(scenario())
        assert webhook.requests == []

    def test_drain_cancels_stuck_dispatch(self, settings_factory, valid_payload):
        async def scenario():
            async def hanging_webhook(request):
                await asyncio.sleep(60)
                return httpx.Response(204)

            handler, dispatcher = make_handler(settings_factory(discord_webhook_url=WEBHOOK_URL), hanging_webhook)
            await handler.submit(ResignationReportCreate(**valid_payload), "10.0.0.1")
            await handler.drain(timeout=0.05)
            await dispatcher.aclose()
            return handler.pending_dispatches

        assert asyncio.run(scenario()) == 0
