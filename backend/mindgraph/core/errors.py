"""Engine exceptions and the consistent error envelope.

Every error raised by the scheduling engine carries a stable ``code`` so the
calling layer (API, worker, CLI) can map it to its own presentation without
parsing messages.
"""

from typing import Any

from pydantic import BaseModel


class SchedulingError(Exception):
    """Base engine error with standardized error code."""

    code = "SCHEDULING_ERROR"

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | list[Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidRating(SchedulingError):
    """Rating missing or outside 1..5."""

    code = "INVALID_RATING"


class UnknownSubject(SchedulingError):
    """Referenced item or node id is not present in the supplied snapshot."""

    code = "UNKNOWN_SUBJECT"


class InvalidDateRange(SchedulingError):
    """Aggregate query with end date before start date."""

    code = "INVALID_DATE_RANGE"


class ConfigurationError(SchedulingError):
    """Graph settings outside their valid domain."""

    code = "CONFIGURATION_ERROR"


class InvalidCycle(SchedulingError):
    """Revision cycle counter is negative."""

    code = "INVALID_CYCLE"


class ErrorResponse(BaseModel):
    """Error envelope handed to the calling layer.

    Format: {error_code, message, details}
    """

    error_code: str
    message: str
    details: Any | None = None


def to_error_response(exc: SchedulingError) -> ErrorResponse:
    """Convert an engine error into the standard envelope."""
    return ErrorResponse(error_code=exc.code, message=exc.message, details=exc.details)


def require_rating(rating: Any) -> int:
    """
    Validate a review rating.

    Args:
        rating: Candidate rating

    Returns:
        The rating as int

    Raises:
        InvalidRating: If rating is None, not an integer, or outside 1..5
    """
    # bool is an int subclass; True must not be accepted as rating 1
    if rating is None or isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRating(
            f"Rating must be an integer between 1 and 5, got {rating!r}",
            details={"rating": repr(rating)},
        )
    if rating < 1 or rating > 5:
        raise InvalidRating(
            f"Rating must be between 1 and 5, got {rating}",
            details={"rating": rating},
        )
    return rating
