"""Tests for PrefixSearchRequest."""

import asyncio
import threading
import unittest

import pytest

from adapter.fake.mediawiki_replies import make_allpages_reply
from adapter.fake.transport import FakeTransport
from domain.model.errors import TransportError
from services.prefix_search import PrefixSearchRequest

SITE_URL = "https://en.wiktionary.org/w"


async def _settle() -> None:
    for _ in range(10):
        await asyncio.sleep(0)


class TestPrefixSearchRequest(unittest.IsolatedAsyncioTestCase):
    """Test the allpages query and its completion handling."""

    def setUp(self):
        self.transport = FakeTransport()

    async def test_url_and_timeout(self):
        """Query targets allpages with apfrom and the 10 second default timeout."""
        request = PrefixSearchRequest("cat", SITE_URL, self.transport)
        await _settle()

        self.assertEqual(
            self.transport.urls(),
            [SITE_URL + "/api.php?action=query&list=allpages&aplimit=40&format=xml&apfrom=cat"],
        )
        self.assertEqual(self.transport.calls[0].timeout, 10.0)
        request.cancel()

    async def test_titles_in_reply_order(self):
        request = PrefixSearchRequest("cat", SITE_URL, self.transport)
        await _settle()

        self.transport.resolve(0, make_allpages_reply(["cat", "catalog", "Catalonia"]))
        await request.wait_finished()

        self.assertEqual(request.matches(), ["cat", "catalog", "Catalonia"])
        self.assertEqual(request.error_string(), "")

    async def test_max_results_truncates(self):
        request = PrefixSearchRequest("cat", SITE_URL, self.transport, max_results=2)
        await _settle()

        self.transport.resolve(0, make_allpages_reply(["cat", "catalog", "Catalonia"]))
        await request.wait_finished()

        self.assertEqual(request.matches(), ["cat", "catalog"])

    async def test_reply_without_allpages(self):
        request = PrefixSearchRequest("zzz", SITE_URL, self.transport)
        await _settle()

        self.transport.resolve(0, b'<?xml version="1.0"?><api><query /></api>')
        await request.wait_finished()

        self.assertEqual(request.matches(), [])
        self.assertEqual(request.error_string(), "")

    async def test_transport_error(self):
        self.transport.responses = {"cat": TransportError("Operation timed out")}
        request = PrefixSearchRequest("cat", SITE_URL, self.transport)
        await request.wait_finished()

        self.assertEqual(request.matches(), [])
        self.assertEqual(request.error_string(), "Operation timed out")

    async def test_parse_error(self):
        request = PrefixSearchRequest("cat", SITE_URL, self.transport)
        await _settle()

        self.transport.resolve(0, b"not xml")
        await request.wait_finished()

        self.assertTrue(request.error_string().startswith("XML parse error: "))

    async def test_cancel_before_reply(self):
        """A cancelled search finishes once and ignores the late reply."""
        request = PrefixSearchRequest("cat", SITE_URL, self.transport)
        await _settle()
        finished: list[bool] = []
        request.add_finished_listener(lambda r: finished.append(True))

        request.cancel()
        await _settle()

        self.assertTrue(request.is_finished())
        self.assertEqual(finished, [True])
        self.assertFalse(self.transport.resolve(0, make_allpages_reply(["cat"])))
        self.assertEqual(request.matches(), [])
        self.assertEqual(request.error_string(), "")

    async def test_cancel_from_other_thread(self):
        request = PrefixSearchRequest("cat", SITE_URL, self.transport)
        await _settle()
        listener_threads: list[int] = []
        request.add_finished_listener(lambda r: listener_threads.append(threading.get_ident()))

        thread = threading.Thread(target=request.cancel)
        thread.start()
        thread.join()

        self.assertTrue(request.is_finished())
        await asyncio.wait_for(request.wait_finished(), timeout=1)
        await _settle()

        self.assertTrue(self.transport.calls[0].future.cancelled())
        self.assertEqual(listener_threads, [threading.get_ident()])
        self.assertEqual(request.matches(), [])
        self.assertEqual(request.error_string(), "")

    async def test_transfer_cancelled_underneath(self):
        request = PrefixSearchRequest("cat", SITE_URL, self.transport)
        await _settle()

        self.transport.calls[0].future.cancel()
        await request.wait_finished()

        self.assertEqual(request.error_string(), "Operation canceled")


@pytest.mark.asyncio
async def test_plus_sign_encoded():
    """'+' must not reach the API as a literal plus."""
    transport = FakeTransport({"C++": make_allpages_reply(["C++"])})
    request = PrefixSearchRequest("C++", SITE_URL, transport)
    await request.wait_finished()

    assert transport.urls()[0].endswith("&apfrom=C%2B%2B")
    assert request.matches() == ["C++"]


if __name__ == '__main__':
    unittest.main()
