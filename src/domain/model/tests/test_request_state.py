"""Tests for request state and notifications."""

import asyncio
import threading
import unittest

from domain.model.errors import XmlParseError
from domain.model.request import (
    DataRequest,
    DataRequestInstant,
    Request,
    WordSearchRequest,
    WordSearchRequestInstant,
)


class TestRequest(unittest.IsolatedAsyncioTestCase):
    """Test the finished flag, error string and listeners."""

    async def test_initial_state(self):
        request = Request()
        self.assertFalse(request.is_finished())
        self.assertEqual(request.error_string(), "")

    async def test_finish_is_idempotent(self):
        request = Request()
        calls: list[Request] = []
        request.add_finished_listener(calls.append)

        request.finish()
        request.finish()

        self.assertTrue(request.is_finished())
        self.assertEqual(calls, [request])

    async def test_finished_listener_added_late_called_at_once(self):
        request = Request()
        request.finish()
        calls: list[Request] = []

        request.add_finished_listener(calls.append)

        self.assertEqual(calls, [request])

    async def test_update_listeners(self):
        request = Request()
        calls: list[Request] = []
        request.add_update_listener(calls.append)

        request.update()
        request.update()

        self.assertEqual(len(calls), 2)

    async def test_wait_finished(self):
        request = Request()
        waiter = asyncio.create_task(request.wait_finished())
        await asyncio.sleep(0)
        self.assertFalse(waiter.done())

        request.finish()
        await asyncio.wait_for(waiter, timeout=1)

    async def test_wait_for_change_after_finish_returns(self):
        request = Request()
        request.finish()
        await asyncio.wait_for(request.wait_for_change(), timeout=1)

    async def test_wait_for_change_rearms(self):
        request = Request()
        request.update()
        await asyncio.wait_for(request.wait_for_change(), timeout=1)

        second = asyncio.create_task(request.wait_for_change())
        await asyncio.sleep(0)
        self.assertFalse(second.done())
        request.update()
        await asyncio.wait_for(second, timeout=1)

    async def test_cancel_finishes(self):
        request = Request()
        request.cancel()
        self.assertTrue(request.is_finished())

    async def test_cancel_from_other_thread(self):
        """The flag is set at once; listeners run later on the loop thread."""
        request = Request()
        listener_threads: list[int] = []
        request.add_finished_listener(lambda r: listener_threads.append(threading.get_ident()))

        thread = threading.Thread(target=request.cancel)
        thread.start()
        thread.join()

        self.assertTrue(request.is_finished())
        await asyncio.wait_for(request.wait_finished(), timeout=1)
        self.assertEqual(listener_threads, [threading.get_ident()])

    async def test_error_string(self):
        request = Request()
        request.set_error_string(str(XmlParseError("not well-formed (invalid token)", 1, 5)))
        self.assertEqual(request.error_string(), "XML parse error: not well-formed (invalid token) at 1,5")


class TestDataRequest(unittest.IsolatedAsyncioTestCase):
    """Test the growing buffer."""

    async def test_empty(self):
        request = DataRequest()
        self.assertFalse(request.has_any_data())
        self.assertEqual(request.data_size(), 0)
        self.assertEqual(request.get_data(), b"")

    async def test_append_and_slice(self):
        request = DataRequest()
        request.append_data(b"hello ")
        request.append_data(b"world")

        self.assertTrue(request.has_any_data())
        self.assertEqual(request.data_size(), 11)
        self.assertEqual(request.get_data(), b"hello world")
        self.assertEqual(request.get_data(6), b"world")
        self.assertEqual(request.get_data(0, 5), b"hello")

    async def test_snapshot_is_copy(self):
        request = DataRequest()
        request.append_data(b"a")
        snapshot = request.get_data()
        request.append_data(b"b")
        self.assertEqual(snapshot, b"a")

    async def test_reads_from_other_thread(self):
        """Snapshots may be taken off the loop thread."""
        request = DataRequest()
        request.append_data(b"x" * 100)
        sizes: list[int] = []

        thread = threading.Thread(target=lambda: sizes.append(len(request.get_data())))
        thread.start()
        thread.join()

        self.assertEqual(sizes, [100])

    async def test_append_after_finish_ignored(self):
        request = DataRequest()
        request.append_data(b"a")
        request.cancel()
        request.append_data(b"b")
        self.assertEqual(request.get_data(), b"a")


class TestWordSearchRequest(unittest.IsolatedAsyncioTestCase):
    async def test_matches_snapshot(self):
        request = WordSearchRequest()
        request.add_matches(["a", "b"])
        snapshot = request.matches()
        request.add_matches(["c"])
        self.assertEqual(snapshot, ["a", "b"])
        self.assertEqual(request.matches(), ["a", "b", "c"])

    async def test_matches_after_finish_ignored(self):
        request = WordSearchRequest()
        request.add_matches(["a"])
        request.finish()
        request.add_matches(["b"])
        self.assertEqual(request.matches(), ["a"])


class TestInstantRequests(unittest.IsolatedAsyncioTestCase):
    async def test_word_search_instant(self):
        request = WordSearchRequestInstant()
        self.assertTrue(request.is_finished())
        self.assertEqual(request.matches(), [])

    async def test_word_search_instant_with_matches(self):
        self.assertEqual(WordSearchRequestInstant(["x"]).matches(), ["x"])

    async def test_data_instant(self):
        request = DataRequestInstant()
        self.assertTrue(request.is_finished())
        self.assertFalse(request.has_any_data())
        await asyncio.wait_for(request.wait_finished(), timeout=1)

    async def test_data_instant_with_data(self):
        request = DataRequestInstant(b"<p>x</p>")
        self.assertEqual(request.get_data(), b"<p>x</p>")


if __name__ == '__main__':
    unittest.main()
