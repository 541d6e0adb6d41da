"""Error taxonomy for the Reviews domain.

Input errors extend Protean's ``ValidationError`` and lookups extend
``ObjectNotFoundError`` so they travel through the same handlers as the
framework's own exceptions. Authorization and infrastructure failures share
the ``ReviewsError`` base.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class InvalidRating(ValidationError):
    """Rating outside the 1–5 range."""


class InvalidStatus(ValidationError):
    """Status that the requested transition does not accept."""


class DuplicateReview(ValidationError):
    """A review already exists for this customer, product and order."""


class ReviewNotFound(ObjectNotFoundError):
    """Review id does not resolve.

    Carries a field-keyed ``messages`` dict like ``ValidationError`` does.
    """

    def __init__(self, messages: dict):
        super().__init__(messages)
        self.messages = messages


class ReviewsError(Exception):
    """Base class for non-validation failures raised by the review service."""

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class Unauthorized(ReviewsError):
    """No caller identity was supplied."""


class Forbidden(ReviewsError):
    """The caller is known but has no rights over the resource."""


class PurchaseNotVerified(Forbidden):
    """No delivered order backs the review and verified purchases are required."""


class TransactionConflict(ReviewsError):
    """Concurrent writes kept invalidating the unit of work."""


class StoreUnavailable(ReviewsError):
    """The underlying persistence could not be reached."""
