"""Lead notification rendering and dispatch."""

import asyncio
import html
import logging
import re

from site_api.models.contact import ContactSubmission, DispatchResult, EmailMessage
from site_api.services.email import EmailTransport

logger = logging.getLogger(__name__)

DISPATCH_TIMEOUT_SECONDS = 10.0

_WHITESPACE_RE = re.compile(r"\s+")

EMAIL_TEMPLATE = """\
<html>
  <head>
    <style>
      body {{ font-family: sans-serif; line-height: 1.6; color: #333; }}
      .container {{ padding: 20px; border: 1px solid #eee; border-radius: 8px; max-width: 600px; margin: 20px auto; }}
      .header {{ background-color: #4f46e5; color: white; padding: 15px; border-radius: 8px 8px 0 0; text-align: center; }}
      .detail {{ margin-bottom: 15px; padding: 10px; border-bottom: 1px dotted #ccc; }}
      .detail strong {{ display: inline-block; width: 150px; font-weight: 700; color: #1e40af; }}
    </style>
  </head>
  <body>
    <div class="container">
      <div class="header">
        <h2>NEW LEAD: Southwest Videography Inquiry</h2>
      </div>
      <p>You have received a new project brief from your website contact form.</p>
      <div class="detail"><strong>Name:</strong> {name}</div>
      <div class="detail"><strong>Email:</strong> <a href="mailto:{email}">{email}</a></div>
      <div class="detail"><strong>Project Type:</strong> {project_type}</div>
      <div class="detail"><strong>Budget Range:</strong> {project_budget}</div>
      <div class="detail">
        <strong>Vision/Brief:</strong>
        <p style="white-space: pre-wrap; margin-top: 5px; padding: 10px; background: #f9f9f9; border-left: 3px solid #4f46e5;">{vision}</p>
      </div>
      <p style="text-align: center; margin-top: 30px;">
        <a href="mailto:{email}" style="display: inline-block; padding: 10px 20px; background-color: #4f46e5; color: white; text-decoration: none; border-radius: 5px;">
          Reply to {name} Now
        </a>
      </p>
    </div>
  </body>
</html>
"""


def escape_html(text: str) -> str:
    """Entity-escape ``& < > " '`` for interpolation into HTML."""
    return html.escape(text, quote=True)


def render_notification_html(submission: ContactSubmission) -> str:
    """Render the lead email body. Every user-supplied value is escaped."""
    return EMAIL_TEMPLATE.format(
        name=escape_html(submission.name),
        email=escape_html(submission.email),
        project_type=escape_html(submission.project_type),
        project_budget=escape_html(submission.project_budget),
        vision=escape_html(submission.vision),
    )


def build_subject(submission: ContactSubmission) -> str:
    # Header value: collapse any embedded newlines/tabs
    name = _WHITESPACE_RE.sub(" ", submission.name).strip()
    return f"New Southwest Project Inquiry from {name}"


def build_notification(
    submission: ContactSubmission, *, sender: str, recipient: str
) -> EmailMessage:
    """Build the outbound message; replies go straight to the submitter."""
    return EmailMessage(
        from_=sender,
        to=recipient,
        reply_to=submission.email,
        subject=build_subject(submission),
        html=render_notification_html(submission),
    )


async def dispatch_notification(
    submission: ContactSubmission,
    transport: EmailTransport,
    *,
    sender: str,
    recipient: str,
    timeout: float = DISPATCH_TIMEOUT_SECONDS,
) -> DispatchResult:
    """Hand a validated lead to the email transport.

    Never raises: network errors, timeouts, API errors and malformed
    transport responses all come back as ``success=False`` with an
    internal ``error`` string for logging.
    """
    try:
        message = build_notification(submission, sender=sender, recipient=recipient)
        result = await asyncio.wait_for(transport.send(message), timeout=timeout)
    except asyncio.TimeoutError:
        return DispatchResult(
            success=False, error=f"Email transport timed out after {timeout:g}s"
        )
    except Exception as e:
        logger.exception("Email transport raised")
        return DispatchResult(success=False, error=f"Email transport error: {e}")

    error = getattr(result, "error", None)
    if error:
        return DispatchResult(success=False, error=str(error))
    if not getattr(result, "data", None):
        return DispatchResult(
            success=False, error="Email transport returned neither data nor error"
        )
    return DispatchResult(success=True)
