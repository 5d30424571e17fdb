"""Outbound transactional email transports.

Usage:
    from site_api.services.email import get_email_transport

    result = await get_email_transport().send(message)
    if result.error:
        ...

Transports follow the Resend contract: ``send`` returns an
``EmailSendResult`` with ``data`` on success and ``error`` on an API-level
failure.  Network errors propagate as ``httpx`` exceptions; the notification
dispatcher is responsible for turning them into failures.
"""

import logging
from typing import Protocol

import httpx

from site_api.config import get_settings
from site_api.models.contact import EmailMessage, EmailSendResult
from site_api.services.http_client import get_shared_client, resend_headers

logger = logging.getLogger(__name__)

# Lazy singleton — lives for the process lifetime
_transport: "EmailTransport | None" = None


class EmailTransport(Protocol):
    async def send(self, message: EmailMessage) -> EmailSendResult: ...


class ResendTransport:
    """Send email through the Resend HTTP API."""

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.resend.com/emails",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_url = api_url
        self._client = client

    async def send(self, message: EmailMessage) -> EmailSendResult:
        client = self._client or get_shared_client()
        resp = await client.post(
            self._api_url,
            headers=resend_headers(self._api_key),
            json=message.model_dump(by_alias=True, exclude_none=True),
        )

        if resp.status_code >= 400:
            try:
                detail = resp.json().get("message") or resp.reason_phrase
            except ValueError:
                detail = resp.reason_phrase
            return EmailSendResult(error=f"Resend API error: {detail}")

        data = resp.json()
        if not isinstance(data, dict) or "id" not in data:
            return EmailSendResult(error="Resend API returned an unexpected body")
        return EmailSendResult(data={"id": data["id"]})


class LoggingTransport:
    """Development transport: logs the envelope instead of sending.

    Only the recipient and subject are logged and no message is kept; the
    body carries the submitter's details.
    """

    def __init__(self) -> None:
        self.sent_count = 0

    async def send(self, message: EmailMessage) -> EmailSendResult:
        self.sent_count += 1
        logger.info(
            "Email (not sent, no API key) to=%s subject=%r",
            message.to,
            message.subject,
        )
        return EmailSendResult(data={"id": f"logged-{self.sent_count}"})


def get_email_transport() -> EmailTransport:
    """Return the configured transport, creating it on first call.

    Falls back to ``LoggingTransport`` when no Resend API key is configured.
    """
    global _transport
    if _transport is None:
        settings = get_settings()
        if settings.resend_api_key:
            _transport = ResendTransport(
                api_key=settings.resend_api_key, api_url=settings.resend_api_url
            )
        else:
            logger.warning("RESEND_API_KEY not set; lead emails will only be logged")
            _transport = LoggingTransport()
    return _transport
