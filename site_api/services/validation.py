"""Contact form field validation.

Pure functions: the same submission always yields the same result, and
problems come back as a field → message mapping rather than exceptions so
the form can show every error in one round trip.
"""

import re
from collections.abc import Sequence

from site_api.models.contact import ContactSubmission, ValidationResult

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 254
VISION_MIN_LENGTH = 10
VISION_MAX_LENGTH = 2000

_NAME_RE = re.compile(r"^[a-zA-Z\s\-'.]+$")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_submission(submission: ContactSubmission) -> ContactSubmission:
    """Return a copy with leading/trailing whitespace stripped from every field."""
    updates = {
        field: value.strip()
        for field, value in submission.model_dump().items()
        if isinstance(value, str)
    }
    return submission.model_copy(update=updates)


def _check_name(name: str) -> str | None:
    if not name:
        return "Name is required."
    if len(name) < NAME_MIN_LENGTH:
        return "Name must be at least 2 characters long."
    if len(name) > NAME_MAX_LENGTH:
        return "Name must be less than 100 characters."
    if not _NAME_RE.match(name):
        return (
            "Name can only contain letters, spaces, hyphens, apostrophes, "
            "and periods."
        )
    return None


def _check_email(email: str) -> str | None:
    if not email:
        return "Email address is required."
    if len(email) > EMAIL_MAX_LENGTH:
        return "Email address is too long."
    if not _EMAIL_RE.match(email):
        return "Please enter a valid email address."
    return None


def _check_choice(value: str, choices: Sequence[str], label: str) -> str | None:
    if not value:
        return f"Please select a {label}."
    if choices and value not in choices:
        return f"Please select a valid {label}."
    return None


def _check_vision(vision: str) -> str | None:
    if not vision:
        return "Project vision is required."
    if len(vision) < VISION_MIN_LENGTH:
        return "Please provide at least 10 characters describing your vision."
    if len(vision) > VISION_MAX_LENGTH:
        return "Project vision must be less than 2000 characters."
    return None


def validate_submission(
    submission: ContactSubmission,
    *,
    project_types: Sequence[str] = (),
    budget_ranges: Sequence[str] = (),
) -> ValidationResult:
    """Validate every contact field, collecting all errors.

    Args:
        submission: Submission as captured from the form.
        project_types: Allowed project types. Empty means any non-empty value.
        budget_ranges: Allowed budget ranges. Empty means any non-empty value.

    Returns:
        A ValidationResult carrying the normalized submission on success, or
        one message per offending field (keyed by the wire field name).
    """
    normalized = normalize_submission(submission)

    checks = {
        "name": _check_name(normalized.name),
        "email": _check_email(normalized.email),
        "projectType": _check_choice(
            normalized.project_type, project_types, "project type"
        ),
        "projectBudget": _check_choice(
            normalized.project_budget, budget_ranges, "budget range"
        ),
        "vision": _check_vision(normalized.vision),
    }
    field_errors = {field: msg for field, msg in checks.items() if msg is not None}

    if field_errors:
        return ValidationResult(field_errors=field_errors)
    return ValidationResult(submission=normalized)
