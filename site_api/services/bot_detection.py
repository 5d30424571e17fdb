"""Bot heuristics for contact form submissions.

Honeypot fields, minimum fill time, and the render-time form token.  The
verdict's ``reason`` is for server logs; callers must never echo it back.
"""

import math
import re
import secrets

from site_api.models.contact import (
    HONEYPOT_FIELDS,
    BotVerdict,
    ContactSubmission,
    FormSession,
)

MIN_SUBMISSION_TIME_MS = 2000
FORM_TOKEN_BYTES = 12

_FORM_TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]{8,64}$")


def generate_form_token() -> str:
    """Return an opaque URL-safe token for a freshly rendered form."""
    return secrets.token_urlsafe(FORM_TOKEN_BYTES)


def issue_form_session(now_ms: float) -> FormSession:
    """Build the timestamp/token pair a form embeds as hidden inputs."""
    return FormSession(form_timestamp=int(now_ms), form_token=generate_form_token())


def _parse_timestamp(raw: str | None) -> float | None:
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def detect_bot(
    submission: ContactSubmission,
    *,
    now_ms: float,
    min_submission_time_ms: int = MIN_SUBMISSION_TIME_MS,
    require_token: bool = False,
) -> BotVerdict:
    """Classify a submission as human or automated.

    Checks run in order and the first hit wins:

    1. Any non-empty honeypot field.
    2. Missing/unparseable ``formTimestamp``.
    3. Elapsed time since form load below ``min_submission_time_ms``
       (a submission at exactly the threshold passes).
    4. A ``formToken`` that is present but malformed, or absent when
       ``require_token`` is set.
    """
    for field in HONEYPOT_FIELDS:
        if getattr(submission, field):
            return BotVerdict(is_bot=True, reason=f"honeypot:{field}")

    loaded_at = _parse_timestamp(submission.form_timestamp)
    if loaded_at is None:
        return BotVerdict(is_bot=True, reason="missing timestamp")

    elapsed = now_ms - loaded_at
    if elapsed < min_submission_time_ms:
        return BotVerdict(is_bot=True, reason="too fast")

    token = submission.form_token
    if token:
        if not _FORM_TOKEN_RE.match(token):
            return BotVerdict(is_bot=True, reason="malformed token")
    elif require_token:
        return BotVerdict(is_bot=True, reason="missing token")

    return BotVerdict(is_bot=False)
