"""Contact form endpoint — lead capture with rate limiting and bot protection."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from site_api.config import Settings, get_settings
from site_api.models.contact import FormSession, SubmissionOutcome
from site_api.services.bot_detection import issue_form_session
from site_api.services.clock import system_clock
from site_api.services.contact import process_submission
from site_api.services.email import EmailTransport, get_email_transport
from site_api.services.rate_limit import UNKNOWN_IDENTIFIER, RateLimiter

router = APIRouter(prefix="/contact", tags=["contact"])
logger = logging.getLogger(__name__)

# Process-wide limiter (created lazily; see get_rate_limiter)
_limiter: RateLimiter | None = None

_STATUS_CODES = {
    "accepted": 200,
    "rejected-validation": 400,
    "rejected-bot": 400,
    "rejected-malformed": 400,
    "rejected-rate-limited": 429,
    "rejected-dispatch-failed": 500,
}

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def get_rate_limiter() -> RateLimiter:
    """Return the process-wide rate limiter, creating it on first call."""
    global _limiter
    if _limiter is None:
        settings = get_settings()
        _limiter = RateLimiter(
            cleanup_interval_ms=settings.rate_limit_cleanup_interval_ms
        )
    return _limiter


def client_identifier(request: Request) -> str:
    """Best-effort caller address: first X-Forwarded-For hop, X-Real-IP, peer."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop
    real_ip = request.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_IDENTIFIER


async def _read_body(request: Request) -> Any:
    """Decode a JSON or form-encoded body. Returns None if undecodable."""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith(_FORM_CONTENT_TYPES):
            form = await request.form()
            return dict(form.items())
        return await request.json()
    except (ValueError, StarletteHTTPException) as e:
        logger.warning("Undecodable contact body (%s): %s", content_type, e)
        return None


def outcome_response(outcome: SubmissionOutcome) -> JSONResponse:
    """Map a pipeline outcome onto the HTTP contract."""
    status_code = _STATUS_CODES[outcome.status]
    if outcome.status == "accepted":
        body: dict[str, Any] = {"message": outcome.message}
    elif outcome.status == "rejected-validation":
        body = {"error": outcome.message, "fieldErrors": outcome.field_errors}
    else:
        body = {"error": outcome.message}
    return JSONResponse(content=body, status_code=status_code)


@router.post("")
async def submit_contact(
    request: Request,
    settings: Settings = Depends(get_settings),
    limiter: RateLimiter = Depends(get_rate_limiter),
    transport: EmailTransport = Depends(get_email_transport),
):
    """Submit the contact form. Emails the lead to the studio."""
    raw = await _read_body(request)
    outcome = await process_submission(
        raw,
        client_identifier(request),
        limiter=limiter,
        transport=transport,
        settings=settings,
    )
    return outcome_response(outcome)


@router.get("/form-session", response_model=FormSession)
async def form_session():
    """Issue the hidden timestamp/token a contact form embeds when rendered."""
    return issue_form_session(system_clock())
