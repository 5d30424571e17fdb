"""Contact form submission pipeline.

Sequences one submission through rate limiting, shape extraction, field
validation, bot heuristics and notification dispatch, stopping at the first
terminal outcome.  ``process_submission`` never raises.
"""

import json
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from site_api.config import Settings
from site_api.models.contact import (
    HONEYPOT_FIELDS,
    Accepted,
    ContactSubmission,
    RejectedBot,
    RejectedDispatchFailed,
    RejectedMalformed,
    RejectedRateLimited,
    RejectedValidation,
    SubmissionOutcome,
)
from site_api.services.bot_detection import detect_bot
from site_api.services.clock import Clock, system_clock
from site_api.services.email import EmailTransport
from site_api.services.notifications import dispatch_notification
from site_api.services.rate_limit import RateLimiter, resolve_bucket
from site_api.services.validation import validate_submission

logger = logging.getLogger(__name__)

MSG_ACCEPTED = (
    "Success! Your brief has been sent. "
    "I will review it and reply within 1 business day."
)
MSG_RATE_LIMITED = "Too many requests. Please wait a moment and try again."
MSG_VALIDATION = "Please correct the errors below and try again."
MSG_BOT = "Invalid submission. Please try again."
MSG_DISPATCH_FAILED = (
    "Failed to send email. Please try again or contact us directly."
)
MSG_MALFORMED = "Invalid request."
MSG_TECHNICAL = (
    "A technical error occurred. Please try again or contact us directly "
    "if the problem persists."
)

REQUIRED_FIELDS = {
    "name": "name",
    "email": "email",
    "projectType": "project_type",
    "projectBudget": "project_budget",
    "vision": "vision",
}


class MalformedSubmissionError(ValueError):
    """Request body does not have the contact form's shape."""


def extract_submission(raw: Any) -> ContactSubmission:
    """Pull contact fields out of a decoded request body.

    Missing text fields become empty strings (the validator reports them).
    Non-string values are a shape error, except ``formTimestamp`` which may
    arrive as a JSON number.

    Raises:
        MalformedSubmissionError: If *raw* is not a mapping or a field has
            the wrong type.
    """
    if not isinstance(raw, Mapping):
        raise MalformedSubmissionError("Request body is not an object")

    values: dict[str, Any] = {}
    for wire_name, field in REQUIRED_FIELDS.items():
        value = raw.get(wire_name)
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise MalformedSubmissionError(f"Invalid form data for field: {wire_name}")
        values[field] = value.strip()

    for field in HONEYPOT_FIELDS:
        value = raw.get(field)
        if value is None:
            continue
        if not isinstance(value, str):
            raise MalformedSubmissionError(f"Invalid form data for field: {field}")
        values[field] = value.strip()

    timestamp = raw.get("formTimestamp")
    if isinstance(timestamp, bool) or not isinstance(
        timestamp, (str, int, float, type(None))
    ):
        raise MalformedSubmissionError("Invalid form data for field: formTimestamp")
    if timestamp is not None:
        values["form_timestamp"] = str(timestamp).strip()

    token = raw.get("formToken")
    if token is not None:
        if not isinstance(token, str):
            raise MalformedSubmissionError("Invalid form data for field: formToken")
        values["form_token"] = token.strip()

    return ContactSubmission(**values)


def _log_outcome(
    submission: ContactSubmission | None,
    success: bool,
    error: str | None = None,
) -> None:
    """Log one terminal outcome. Never includes name, email or vision."""
    log_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "success": success,
        "projectType": submission.project_type if submission else None,
        "budgetRange": submission.project_budget if submission else None,
        "error": error,
    }
    logger.info("Contact form submission: %s", json.dumps(log_data))


async def _run_pipeline(
    raw: Any,
    identifier: str | None,
    *,
    limiter: RateLimiter,
    transport: EmailTransport,
    settings: Settings,
    clock: Clock,
) -> SubmissionOutcome:
    bucket, limit = resolve_bucket(
        identifier,
        default_limit=settings.rate_limit_max,
        unknown_limit=settings.rate_limit_unknown_max,
    )
    rate = limiter.check(bucket, limit=limit, window_ms=settings.rate_limit_window_ms)
    if rate.limited:
        _log_outcome(None, False, "rate_limited")
        return RejectedRateLimited(message=MSG_RATE_LIMITED)

    try:
        submission = extract_submission(raw)
    except MalformedSubmissionError as e:
        logger.warning("Malformed contact submission: %s", e)
        _log_outcome(None, False, "malformed_request")
        return RejectedMalformed(message=MSG_MALFORMED)

    validation = validate_submission(
        submission,
        project_types=settings.project_types,
        budget_ranges=settings.budget_ranges,
    )
    if not validation.is_valid or validation.submission is None:
        _log_outcome(submission, False, "validation_failed")
        return RejectedValidation(
            message=MSG_VALIDATION, field_errors=validation.field_errors
        )
    submission = validation.submission

    verdict = detect_bot(
        submission,
        now_ms=clock(),
        min_submission_time_ms=settings.min_submission_time_ms,
        require_token=settings.require_form_token,
    )
    if verdict.is_bot:
        logger.warning("Bot submission rejected (%s)", verdict.reason)
        _log_outcome(submission, False, "bot_detected")
        return RejectedBot(message=MSG_BOT)

    dispatch = await dispatch_notification(
        submission,
        transport,
        sender=settings.email_from,
        recipient=settings.email_to,
        timeout=settings.dispatch_timeout_seconds,
    )
    if not dispatch.success:
        logger.error("Lead notification failed: %s", dispatch.error)
        _log_outcome(submission, False, "dispatch_failed")
        return RejectedDispatchFailed(message=MSG_DISPATCH_FAILED)

    _log_outcome(submission, True)
    return Accepted(message=MSG_ACCEPTED)


async def process_submission(
    raw: Any,
    identifier: str | None,
    *,
    limiter: RateLimiter,
    transport: EmailTransport,
    settings: Settings,
    clock: Clock = system_clock,
) -> SubmissionOutcome:
    """Run one contact form submission to a terminal outcome.

    Args:
        raw: Decoded request body (JSON object or form fields). ``None`` when
            the body could not be decoded.
        identifier: Caller address used for rate limiting; ``None`` or
            ``"unknown"`` selects the shared unknown-address bucket.
        limiter: Rate limiter holding per-identifier counters.
        transport: Outbound email transport.
        settings: Thresholds, choices and email addresses.
        clock: Epoch-millisecond clock used for bot timing.

    Returns:
        One ``SubmissionOutcome`` variant. Unexpected errors are logged and
        reported as a generic technical failure.
    """
    try:
        return await _run_pipeline(
            raw,
            identifier,
            limiter=limiter,
            transport=transport,
            settings=settings,
            clock=clock,
        )
    except Exception:
        logger.exception("Contact form submission error")
        _log_outcome(None, False, "internal_error")
        return RejectedDispatchFailed(message=MSG_TECHNICAL)
