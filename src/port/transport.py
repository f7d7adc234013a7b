"""Transport port — outbound interface for HTTP GET transfers."""

from typing import Protocol


class TransportPort(Protocol):
    """Port for fetching a URL.

    get() returns the response body. Any failure (connection, TLS, timeout,
    non-success status) is raised as domain.model.errors.TransportError.
    Cancelling the awaiting task aborts the transfer.
    """

    async def get(self, url: str, timeout: float) -> bytes: ...
