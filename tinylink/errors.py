"""Typed failures of the link service, each mapped to one HTTP status."""


class LinkError(Exception):
    """Base exception for all link service errors."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class InvalidInput(LinkError):
    """Malformed URL, custom code or request body."""

    status_code = 400
    message = "Invalid input"


class Conflict(LinkError):
    """The code is already taken."""

    status_code = 409
    message = "Code already exists"


class NotFound(LinkError):
    """No link with that code."""

    status_code = 404
    message = "Not found"


class ResourceExhausted(LinkError):
    """Random code generation ran out of attempts."""

    status_code = 500
    message = "Failed to generate unique short_code, try again"
