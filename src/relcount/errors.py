"""Exception types raised by relcount."""


class RelcountError(Exception):
    """Base class for relcount errors."""


class ValidationError(RelcountError):
    """User input was rejected before any request was made."""


class FetchError(RelcountError):
    """A remote API call failed.

    Args:
        message: Human readable description.
        origin: Which service failed ("GitHub" or "Flathub").
    """

    def __init__(self, message: str, origin: str = "GitHub") -> None:
        super().__init__(message)
        self.origin = origin


class NotFoundError(FetchError):
    """The requested repository or application does not exist."""


class TransportError(FetchError):
    """Non-2xx response, connection failure or malformed payload."""

    def __init__(
        self,
        message: str,
        origin: str = "GitHub",
        status: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(message, origin)
        self.status = status
        self.reason = reason
