import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import httpx

from ..config import Settings
from ..models.report import ValidatedReport

logger = logging.getLogger(__name__)

# Discord rejects embed field values longer than this
FIELD_VALUE_LIMIT = 1024
NOT_SPECIFIED = "Not specified"


class DispatchStatus(str, Enum):
    DELIVERED = "DELIVERED"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"


@dataclass
class DispatchOutcome:
    status: DispatchStatus
    reason: Optional[str] = None
    status_code: Optional[int] = None


def _field_value(value: Optional[str]) -> str:
    if not value:
        return NOT_SPECIFIED
    if len(value) > FIELD_VALUE_LIMIT:
        return value[: FIELD_VALUE_LIMIT - 3] + "..."
    return value


class NotificationDispatcher:
    """Posts accepted reports to the configured Discord webhook.

    One attempt per report with a fixed timeout. Only 204 No Content counts as
    delivered; everything else is logged and reported as FAILED.
    """

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self._settings = settings
        self._client = client or httpx.AsyncClient(timeout=settings.webhook_timeout_seconds)

    @property
    def enabled(self) -> bool:
        return self._settings.webhook_enabled

    def build_message(self, report: ValidatedReport) -> Dict[str, Any]:
        s = self._settings
        unix_timestamp = int(report.submitted_at.timestamp())

        content = f"Time: <t:{unix_timestamp}:R>"
        if s.webhook_mention_role_id:
            content = f"<@&{s.webhook_mention_role_id}> | {content}"

        return {
            "username": s.webhook_username,
            "avatar_url": s.webhook_avatar_url,
            "content": content,
            "embeds": [
                {
                    "title": s.webhook_embed_title,
                    "color": s.webhook_embed_color,
                    "fields": [
                        {"name": "Discord ID", "value": f"<@{report.identity_id}>", "inline": True},
                        {"name": "Name | Static", "value": _field_value(report.name_and_code), "inline": False},
                        {"name": "Rank", "value": _field_value(report.rank), "inline": False},
                        {"name": "Department", "value": _field_value(report.department.value), "inline": True},
                        {"name": "IP address", "value": f"`{report.client_address}`", "inline": True},
                        {"name": "Tablet screenshot", "value": _field_value(report.tablet_screenshot_url), "inline": False},
                        {"name": "Inventory screenshot", "value": _field_value(report.inventory_screenshot_url), "inline": False},
                        {"name": "Reason", "value": _field_value(report.reason), "inline": False},
                    ],
                    "footer": {"text": s.webhook_footer_text},
                    "timestamp": report.submitted_at.isoformat(),
                }
            ],
        }

    async def dispatch(self, report: ValidatedReport) -> DispatchOutcome:
        if not self.enabled:
            logger.warning(
                f"Webhook not sent (no DISCORD_WEBHOOK_URL): identity_id={report.identity_id}"
            )
            return DispatchOutcome(status=DispatchStatus.SKIPPED, reason="webhook_not_configured")

        message = self.build_message(report)

        try:
            response = await self._client.post(
                self._settings.discord_webhook_url.strip(),
                json=message,
                timeout=self._settings.webhook_timeout_seconds,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            reason = str(e) or type(e).__name__
            logger.error(
                f"Webhook send failed: identity_id={report.identity_id} error={reason}",
                extra={"identity_id": report.identity_id, "client_ip": report.client_address},
            )
            return DispatchOutcome(status=DispatchStatus.FAILED, reason=reason)

        if response.status_code != 204:
            logger.error(
                f"Webhook rejected report: identity_id={report.identity_id} status={response.status_code}",
                extra={"identity_id": report.identity_id, "status_code": response.status_code},
            )
            return DispatchOutcome(
                status=DispatchStatus.FAILED,
                reason=f"unexpected_status:{response.status_code}",
                status_code=response.status_code,
            )

        logger.info(f"Webhook delivered: identity_id={report.identity_id}")
        return DispatchOutcome(status=DispatchStatus.DELIVERED, status_code=response.status_code)

    async def aclose(self) -> None:
        await self._client.aclose()
