"""Tests for lead notification rendering and dispatch failure mapping."""

import asyncio

import httpx

from site_api.models.contact import ContactSubmission, EmailSendResult
from site_api.services.notifications import (
    build_notification,
    dispatch_notification,
    escape_html,
    render_notification_html,
)

SENDER = "Leads <leads@test.example>"
RECIPIENT = "studio@test.example"


def _submission(**overrides) -> ContactSubmission:
    fields = {
        "name": "Jane O'Neil",
        "email": "jane@example.com",
        "project_type": "Wedding",
        "project_budget": "£5k+",
        "vision": "Golden hour portraits & a drone shot.",
    }
    fields.update(overrides)
    return ContactSubmission(**fields)


def test_escape_html_covers_all_special_characters():
    assert escape_html("&<>\"'") == "&amp;&lt;&gt;&quot;&#x27;"


def test_script_in_name_is_escaped():
    body = render_notification_html(_submission(name="<script>alert(1)</script>"))
    assert "&lt;script&gt;" in body
    assert "<script>" not in body


def test_every_user_field_is_escaped():
    body = render_notification_html(
        _submission(
            email='x"onmouseover="alert(1)@evil.example',
            project_type="<b>Wedding</b>",
            project_budget="<i>£5k+</i>",
            vision="<img src=x onerror=alert(1)>",
        )
    )
    assert "<b>" not in body
    assert "<i>" not in body
    assert "<img" not in body
    assert '"onmouseover="' not in body
    assert "&lt;img src=x onerror=alert(1)&gt;" in body


def test_build_notification_routes_replies_to_submitter():
    message = build_notification(_submission(), sender=SENDER, recipient=RECIPIENT)
    payload = message.model_dump(by_alias=True)

    assert payload["from"] == SENDER
    assert payload["to"] == RECIPIENT
    assert payload["reply_to"] == "jane@example.com"
    assert payload["subject"] == "New Southwest Project Inquiry from Jane O'Neil"
    assert "Golden hour portraits &amp; a drone shot." in payload["html"]


def test_subject_collapses_embedded_newlines():
    message = build_notification(
        _submission(name="Jane\r\nBcc: victim"), sender=SENDER, recipient=RECIPIENT
    )
    assert "\n" not in message.subject
    assert "\r" not in message.subject


async def test_dispatch_success(transport):
    result = await dispatch_notification(
        _submission(), transport, sender=SENDER, recipient=RECIPIENT
    )
    assert result.success is True
    assert result.error is None
    assert len(transport.sent) == 1


async def test_dispatch_maps_api_error(transport):
    transport.result = EmailSendResult(error="Resend API error: invalid from")
    result = await dispatch_notification(
        _submission(), transport, sender=SENDER, recipient=RECIPIENT
    )
    assert result.success is False
    assert "invalid from" in result.error


async def test_dispatch_maps_empty_response(transport):
    transport.result = EmailSendResult()
    result = await dispatch_notification(
        _submission(), transport, sender=SENDER, recipient=RECIPIENT
    )
    assert result.success is False
    assert "neither data nor error" in result.error


async def test_dispatch_maps_network_error():
    class FailingTransport:
        async def send(self, message):
            raise httpx.ConnectError("connection refused")

    result = await dispatch_notification(
        _submission(), FailingTransport(), sender=SENDER, recipient=RECIPIENT
    )
    assert result.success is False
    assert "connection refused" in result.error


async def test_dispatch_times_out():
    class SlowTransport:
        async def send(self, message):
            await asyncio.sleep(5)
            return EmailSendResult(data={"id": "late"})

    result = await dispatch_notification(
        _submission(),
        SlowTransport(),
        sender=SENDER,
        recipient=RECIPIENT,
        timeout=0.01,
    )
    assert result.success is False
    assert "timed out" in result.error
