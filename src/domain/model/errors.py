"""Domain-level exceptions.

Requests catch transport and parse errors per variant and record them as
their error string. Route handlers map NotFoundError to HTTP 404.
"""


class DomainError(Exception):
    """Base class for all domain errors."""


class NotFoundError(DomainError):
    """Requested entity does not exist."""


class TransportError(DomainError):
    """A network transfer failed, timed out, or returned a non-success status."""


class XmlParseError(DomainError):
    """The API response is not a well-formed XML document."""

    def __init__(self, message: str, line: int, column: int):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"XML parse error: {message} at {line},{column}")


class TableOfContentsError(DomainError):
    """The section list cannot be turned into a nested table of contents."""
