"""Tests for MediaWiki routes and the health check.

Dictionaries are wired to FakeTransport with canned replies, so every
lookup completes without network access.
"""

import unittest
from unittest.mock import patch
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from fastapi.testclient import TestClient
from api.main import app
from api.dependencies import get_dictionaries, get_settings, get_sites
from adapter.fake.audio_links import FakeAudioLinkRegistry
from adapter.fake.mediawiki_replies import make_allpages_reply, make_missing_page_reply, make_parse_reply
from adapter.fake.transport import FakeTransport
from domain.model.errors import TransportError
from domain.model.site import MediaWikiSite
from services.mediawiki_dictionary import make_dictionaries
from utils.config import Settings

SITES = [
    MediaWikiSite("enwiki", "English Wikipedia", "https://en.wikipedia.org/w", True),
    MediaWikiSite("hewikt", "Hebrew Wiktionary", "https://he.wiktionary.org/w", True),
    MediaWikiSite("dewiki", "German Wikipedia", "https://de.wikipedia.org/w", False),
]

CANNED = {
    "cat": make_parse_reply("<p>cat</p>", pageid=1),
    "cats": make_parse_reply("<p>cats</p>", pageid=2),
    "Cat": make_parse_reply("<p>cat</p>", pageid=1),
    "nosuchword": make_missing_page_reply("nosuchword"),
    "broken": TransportError("HTTP 503 Service Unavailable"),
    "ca": make_allpages_reply(["ca", "cab", "cat", "catalog"]),
}


class MediaWikiRouteTestCase(unittest.TestCase):

    def setUp(self):
        self.transport = FakeTransport(dict(CANNED))
        app.dependency_overrides[get_settings] = lambda: Settings()
        app.dependency_overrides[get_sites] = lambda: list(SITES)
        app.dependency_overrides[get_dictionaries] = lambda: make_dictionaries(
            SITES, self.transport, FakeAudioLinkRegistry()
        )
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()


class TestListSites(MediaWikiRouteTestCase):

    def test_enabled_sites_only(self):
        response = self.client.get("/mediawiki/sites")

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual([site["id"] for site in data], ["enwiki", "hewikt"])
        self.assertEqual(data[0]["language"], "en")
        self.assertFalse(data[0]["rtl"])
        self.assertEqual(data[0]["icon"], "wikipedia.png")
        self.assertTrue(data[1]["rtl"])
        self.assertEqual(data[1]["icon"], "wiktionary.png")


class TestPrefixRoute(MediaWikiRouteTestCase):

    def test_matches(self):
        response = self.client.get("/mediawiki/enwiki/prefix", params={"word": "ca"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"matches": ["ca", "cab", "cat", "catalog"], "error": None})

    def test_max_results(self):
        response = self.client.get("/mediawiki/enwiki/prefix", params={"word": "ca", "max_results": 2})
        self.assertEqual(response.json()["matches"], ["ca", "cab"])

    def test_max_results_out_of_range(self):
        response = self.client.get("/mediawiki/enwiki/prefix", params={"word": "ca", "max_results": 0})
        self.assertEqual(response.status_code, 422)

    def test_transport_error_reported(self):
        response = self.client.get("/mediawiki/enwiki/prefix", params={"word": "broken"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"matches": [], "error": "HTTP 503 Service Unavailable"})

    def test_unknown_site(self):
        response = self.client.get("/mediawiki/nope/prefix", params={"word": "ca"})
        self.assertEqual(response.status_code, 404)

    def test_disabled_site(self):
        response = self.client.get("/mediawiki/dewiki/prefix", params={"word": "ca"})
        self.assertEqual(response.status_code, 404)


class TestArticleRoute(MediaWikiRouteTestCase):

    def test_merged_in_order(self):
        response = self.client.get("/mediawiki/enwiki/article", params={"word": "cat", "alt": ["cats", "Cat"]})

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["html"], '<div class="mwiki"><p>cat</p></div><div class="mwiki"><p>cats</p></div>')
        self.assertTrue(data["has_data"])
        self.assertIsNone(data["error"])
        self.assertEqual([call.term for call in self.transport.calls], ["cat", "cats", "Cat"])

    def test_rtl_site(self):
        response = self.client.get("/mediawiki/hewikt/article", params={"word": "cat"})
        self.assertTrue(response.json()["html"].startswith('<div class="mwiki" dir="rtl">'))

    def test_not_found(self):
        response = self.client.get("/mediawiki/enwiki/article", params={"word": "nosuchword"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"html": "", "has_data": False, "error": None})

    def test_partial_failure(self):
        response = self.client.get("/mediawiki/enwiki/article", params={"word": "broken", "alt": ["cat"]})

        data = response.json()
        self.assertEqual(data["html"], '<div class="mwiki"><p>cat</p></div>')
        self.assertEqual(data["error"], "HTTP 503 Service Unavailable")

    def test_overlong_word_not_sent(self):
        response = self.client.get("/mediawiki/enwiki/article", params={"word": "x" * 81})

        self.assertEqual(response.json(), {"html": "", "has_data": False, "error": None})
        self.assertEqual(self.transport.calls, [])

    def test_word_required(self):
        response = self.client.get("/mediawiki/enwiki/article")
        self.assertEqual(response.status_code, 422)

    @patch("api.routes.mediawiki.REQUEST_DEADLINE_SECONDS", 0.05)
    def test_deadline(self):
        """A lookup that never completes is cancelled and reported as 504."""
        response = self.client.get("/mediawiki/enwiki/article", params={"word": "pending"})

        self.assertEqual(response.status_code, 504)
        self.assertTrue(self.transport.calls[0].future.cancelled())


class TestStreamRoute(MediaWikiRouteTestCase):

    def test_stream(self):
        response = self.client.get("/mediawiki/enwiki/article/stream", params={"word": "cat", "alt": ["cats"]})

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.headers["content-type"].startswith("text/html"))
        self.assertEqual(response.text, '<div class="mwiki"><p>cat</p></div><div class="mwiki"><p>cats</p></div>')

    def test_stream_unknown_site(self):
        response = self.client.get("/mediawiki/nope/article/stream", params={"word": "cat"})
        self.assertEqual(response.status_code, 404)


class TestHealth(MediaWikiRouteTestCase):

    def test_healthy(self):
        response = self.client.get("/health")

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["status"], "healthy")
        self.assertEqual(data["services"]["mediawiki"]["message"], "2 of 3 sites enabled")

    def test_degraded_without_enabled_sites(self):
        app.dependency_overrides[get_sites] = lambda: [SITES[2]]
        response = self.client.get("/health")

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["status"], "degraded")

    def test_root(self):
        response = self.client.get("/")
        self.assertEqual(response.json()["service"], "wikigloss")


if __name__ == '__main__':
    unittest.main()
