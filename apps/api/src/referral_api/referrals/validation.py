"""Submission validation.

Two ordered checks, first failure wins:
1. Presence of every required field for the active mode. All missing
   labels are reported together.
2. Loose email format for every email field of the active mode. A single
   generic message is reported, without saying which address failed.
"""

import re

from referral_shared.schemas import ReferralMode, ReferralSubmission

from referral_api.errors import ValidationError

# Loose pattern: something@something.something
EMAIL_REGEX = re.compile(r"\S+@\S+\.\S+")

INVALID_EMAIL_MESSAGE = "Invalid email format"

# Required fields per mode, in the order they are reported
REQUIRED_FIELDS: dict[ReferralMode, dict[str, str]] = {
    ReferralMode.TRACKED: {
        "referrer_name": "Referrer Name",
        "referrer_email": "Referrer Email",
        "referee_name": "Referee Name",
        "referee_email": "Referee Email",
        "field_of_work": "Field of Work",
        "program": "Program",
    },
    ReferralMode.DIRECT: {
        "name": "Name",
        "email": "Email",
        "company": "Company",
    },
}

EMAIL_FIELDS: dict[ReferralMode, tuple[str, ...]] = {
    ReferralMode.TRACKED: ("referrer_email", "referee_email"),
    ReferralMode.DIRECT: ("email",),
}


def is_valid_email(email: str | None) -> bool:
    """Check an address against the loose email pattern."""
    return bool(email) and EMAIL_REGEX.search(email) is not None


def missing_field_labels(
    submission: ReferralSubmission, mode: ReferralMode
) -> list[str]:
    """Labels of required fields that are absent, null or empty."""
    return [
        label
        for field_name, label in REQUIRED_FIELDS[mode].items()
        if not getattr(submission, field_name)
    ]


def validate_submission(submission: ReferralSubmission, mode: ReferralMode) -> None:
    """Raise ValidationError if the submission cannot be accepted."""
    missing = missing_field_labels(submission, mode)
    if missing:
        raise ValidationError(
            f"The following fields are required: {', '.join(missing)}"
        )

    if not all(
        is_valid_email(getattr(submission, field_name))
        for field_name in EMAIL_FIELDS[mode]
    ):
        raise ValidationError(INVALID_EMAIL_MESSAGE)
