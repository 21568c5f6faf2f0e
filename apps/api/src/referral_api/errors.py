"""Error taxonomy for the referral API.

Every error raised by request handling maps to one HTTP shape,
``{"error": message}``; the app factory registers the handlers.
"""

from fastapi import status


class ReferralServiceError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ReferralServiceError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class NotFoundError(ReferralServiceError):
    """Referenced id does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class DependencyError(ReferralServiceError):
    """Store or mail transport failure. Detail stays in server logs."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
