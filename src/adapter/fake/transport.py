"""In-memory implementation of TransportPort for testing."""

import asyncio
from dataclasses import dataclass, field
from urllib.parse import parse_qs, urlsplit

from domain.model.errors import TransportError


@dataclass
class PendingCall:
    url: str
    timeout: float
    future: asyncio.Future = field(repr=False)

    @property
    def term(self) -> str | None:
        """The ``page`` or ``apfrom`` value of the request, decoded."""
        query = parse_qs(urlsplit(self.url).query)
        values = query.get("page") or query.get("apfrom")
        return values[0] if values else None


class FakeTransport:
    """Fake transport whose responses are released by the test.

    Terms listed in ``responses`` complete immediately; every other call
    stays pending until ``resolve()`` or ``reject()`` is called for it.
    """

    def __init__(self, responses: dict[str, bytes | Exception] | None = None):
        self.responses = responses or {}
        self.calls: list[PendingCall] = []

    async def get(self, url: str, timeout: float) -> bytes:
        call = PendingCall(url, timeout, asyncio.get_running_loop().create_future())
        self.calls.append(call)

        canned = self.responses.get(call.term) if call.term is not None else None
        if isinstance(canned, Exception):
            raise canned
        if canned is not None:
            return canned
        return await call.future

    def resolve(self, index: int, body: bytes) -> bool:
        """Complete call ``index`` with body. Returns False if it is already done."""
        future = self.calls[index].future
        if future.done():
            return False
        future.set_result(body)
        return True

    def reject(self, index: int, message: str) -> bool:
        """Fail call ``index`` with a TransportError."""
        future = self.calls[index].future
        if future.done():
            return False
        future.set_exception(TransportError(message))
        return True

    def urls(self) -> list[str]:
        return [call.url for call in self.calls]
