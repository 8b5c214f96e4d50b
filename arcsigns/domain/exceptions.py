"""Domain exceptions for arcsigns.

Backend failures are reported as values (empty results, sentinel records,
stderr text) and never raised. These exceptions cover the few initialization
paths where continuing makes no sense: an unrecognised backend version or an
invalid configuration. They should be caught at the application boundary
(CLI) and converted to user-facing error messages.
"""


class ArcsignsDomainError(Exception):
    """Base exception for all domain errors.

    Attributes:
        message: User-facing error message.
        hint: Optional actionable suggestion.
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


class InvalidVersionError(ArcsignsDomainError):
    """Raised when the backend version string cannot be parsed."""

    pass
