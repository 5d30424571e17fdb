"""Contact form submission models."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

HONEYPOT_FIELDS = ("website", "phone", "company")


class ContactSubmission(BaseModel):
    """Contact form submission as captured from the wire.

    Frozen: every check runs as a pure function over one instance.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = ""
    email: str = ""
    project_type: str = Field("", alias="projectType")
    project_budget: str = Field("", alias="projectBudget")
    vision: str = ""

    # Honeypots — hidden from humans, bots fill them
    website: str = ""
    phone: str = ""
    company: str = ""

    # Render-time values used for bot detection
    form_timestamp: str | None = Field(None, alias="formTimestamp")
    form_token: str | None = Field(None, alias="formToken")


class ValidationResult(BaseModel):
    """Outcome of field validation.

    ``submission`` holds the normalized submission when every field passed;
    otherwise ``field_errors`` maps wire field names to messages.
    """

    submission: ContactSubmission | None = None
    field_errors: dict[str, str] = {}

    @property
    def is_valid(self) -> bool:
        return not self.field_errors


class BotVerdict(BaseModel):
    """Bot heuristic classification. ``reason`` is for server logs only."""

    is_bot: bool
    reason: str | None = None


class RateLimitResult(BaseModel):
    limited: bool
    remaining: int


class EmailMessage(BaseModel):
    """Outbound email in the transport's wire shape."""

    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(..., alias="from")
    to: str
    reply_to: str | None = None
    subject: str
    html: str


class EmailSendResult(BaseModel):
    """Transport response: exactly one of ``data`` / ``error`` is expected."""

    data: dict[str, Any] | None = None
    error: str | None = None


class DispatchResult(BaseModel):
    success: bool
    error: str | None = None


class FormSession(BaseModel):
    """Values a contact form embeds when it is rendered."""

    model_config = ConfigDict(populate_by_name=True)

    form_timestamp: int = Field(..., alias="formTimestamp")
    form_token: str = Field(..., alias="formToken")


# ---------------------------------------------------------------------------
# Submission outcomes — one variant per terminal status
# ---------------------------------------------------------------------------


class Accepted(BaseModel):
    status: Literal["accepted"] = "accepted"
    message: str


class RejectedValidation(BaseModel):
    status: Literal["rejected-validation"] = "rejected-validation"
    message: str
    field_errors: dict[str, str]


class RejectedBot(BaseModel):
    status: Literal["rejected-bot"] = "rejected-bot"
    message: str


class RejectedRateLimited(BaseModel):
    status: Literal["rejected-rate-limited"] = "rejected-rate-limited"
    message: str


class RejectedDispatchFailed(BaseModel):
    status: Literal["rejected-dispatch-failed"] = "rejected-dispatch-failed"
    message: str


class RejectedMalformed(BaseModel):
    status: Literal["rejected-malformed"] = "rejected-malformed"
    message: str


SubmissionOutcome = Annotated[
    Union[
        Accepted,
        RejectedValidation,
        RejectedBot,
        RejectedRateLimited,
        RejectedDispatchFailed,
        RejectedMalformed,
    ],
    Field(discriminator="status"),
]
