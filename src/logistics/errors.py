"""Typed failures raised by the logistics engine.

Every failure is a Protean ``ValidationError`` carrying a ``{field: [message]}``
dict, so the HTTP layer reports them like any other validation failure while
callers can still catch the specific condition.
"""

from protean.exceptions import ValidationError


class LogisticsError(ValidationError):
    """Base class for logistics engine failures."""


class InvalidPricingInput(LogisticsError):
    """Malformed product type or weight."""


class IncompleteAddress(LogisticsError):
    """A district is missing on the pickup or delivery side."""


class InvalidTransition(LogisticsError):
    """A status change outside the delivery's fixed path."""


class RiderUnavailable(LogisticsError):
    """The rider is already bound to another delivery."""


class NoCandidateAvailable(LogisticsError):
    """No verified, available rider serves the requested district."""


class InvalidRating(LogisticsError):
    """A rating outside 1-5."""
