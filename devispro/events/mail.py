"""Mail transport subscriber — delivers quote.sent events.

Posts the message and the rendered quote to an HTTP mail API. With no API
URL configured (local development) the message is only logged.

Endpoint: POST {MAIL_API_URL}
Auth: Authorization: Bearer {MAIL_API_KEY}
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from devispro.config import settings
from devispro.events.bus import emit
from devispro.schemas.events import EventType, SystemEvent

logger = logging.getLogger(__name__)


class MailTransport:
    """Thin async wrapper around the mail provider's send endpoint."""

    def __init__(self) -> None:
        self._url = settings.mail.api_url
        self._api_key = settings.mail.api_key
        self._timeout = httpx.Timeout(settings.mail.timeout_seconds, connect=5.0)

    @property
    def _log_only(self) -> bool:
        return not self._url

    def build_payload(self, event: SystemEvent) -> dict[str, Any]:
        data = event.data
        return {
            "from": {"name": data.get("sender_name"), "email": data.get("sender_email")},
            "to": [data["recipient"]],
            "subject": data.get("subject", ""),
            "text": data.get("message", ""),
            "attachments": [
                {
                    "filename": f"{data.get('number', 'devis')}.txt",
                    "content_type": "text/plain",
                    "content": data.get("document", ""),
                },
            ],
        }

    async def on_event(self, event: SystemEvent) -> None:
        """Deliver one quote.sent event."""
        if event.event_type != EventType.QUOTE_SENT:
            return

        payload = self.build_payload(event)
        if self._log_only:
            logger.info(
                "Mail (log only) to %s: %s [%s]",
                payload["to"][0], payload["subject"], event.data.get("number"),
            )
            return

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    self._url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Mail delivery failed for quote %s: %s", event.data.get("number"), exc)
            await emit(SystemEvent(
                event_type=EventType.SYSTEM_ERROR,
                entity_type="quote",
                entity_id=event.entity_id,
                data={"integration": "mail", "error": type(exc).__name__},
                source_module="events.mail",
            ))
            return

        logger.info("Quote %s mailed to %s", event.data.get("number"), payload["to"][0])


# Module-level singleton
mail_transport = MailTransport()
