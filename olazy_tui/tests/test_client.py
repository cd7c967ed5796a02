from __future__ import annotations

import threading
import time
import unittest
from pathlib import Path
import sys

import httpx

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from fake_backend import FakeBackend, TrickleStream  # noqa: E402
from olazy_tui.collectors import (  # noqa: E402
    BackendError,
    Deadline,
    DecodeError,
    TransportError,
    normalize_base_url,
)
from olazy_tui.collectors.ollama import parse_models  # noqa: E402
from olazy_tui.models import Model  # noqa: E402


class ListModelsTests(unittest.TestCase):
    def test_list_installed_parses_models_with_defaults(self):
        backend = FakeBackend()
        models = backend.client().list_installed(Deadline.after(5))
        self.assertEqual(len(models), 3)
        self.assertEqual(models[0], Model("llama2:7b", "sha256:aaa", 3825819519))
        self.assertEqual(models[2], Model("tiny:1b", "", 0))
        self.assertEqual(backend.calls["/api/tags"], 1)

    def test_list_running_hits_ps_endpoint(self):
        backend = FakeBackend()
        models = backend.client().list_running(Deadline.after(5))
        self.assertEqual([m.name for m in models], ["llama2:7b"])
        self.assertEqual(backend.calls["/api/ps"], 1)
        self.assertEqual(backend.calls["/api/tags"], 0)

    def test_missing_models_key_is_empty(self):
        backend = FakeBackend(tags=(200, {}))
        self.assertEqual(backend.client().list_installed(Deadline.after(5)), ())

    def test_null_models_is_empty(self):
        backend = FakeBackend(ps=(200, {"models": None}))
        self.assertEqual(backend.client().list_running(Deadline.after(5)), ())

    def test_non_200_is_backend_error(self):
        backend = FakeBackend(tags=(500, {"error": "boom"}))
        with self.assertRaises(BackendError) as ctx:
            backend.client().list_installed(Deadline.after(5))
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(str(ctx.exception), "tags: 500 Internal Server Error")

    def test_malformed_json_is_decode_error(self):
        backend = FakeBackend(ps=(200, b"{not json"))
        with self.assertRaises(DecodeError):
            backend.client().list_running(Deadline.after(5))

    def test_connection_failure_is_transport_error(self):
        backend = FakeBackend(tags=(200, httpx.ConnectError("connection refused")))
        with self.assertRaises(TransportError) as ctx:
            backend.client().list_installed(Deadline.after(5))
        self.assertIn("connection refused", str(ctx.exception))

    def test_timeout_is_transport_error(self):
        backend = FakeBackend(ps=(200, httpx.ReadTimeout("timed out")))
        with self.assertRaisesRegex(TransportError, "timed out"):
            backend.client().list_running(Deadline.after(5))

    def test_expired_deadline_skips_request(self):
        backend = FakeBackend()
        deadline = Deadline.after(5)
        deadline.cancel()
        with self.assertRaisesRegex(TransportError, "deadline exceeded"):
            backend.client().list_installed(deadline)
        self.assertEqual(backend.calls["/api/tags"], 0)

    def test_deadline_expiring_mid_body_aborts_request(self):
        chunks = [b'{"models": [', b'{"name": "llama2:7b"}', b']}']
        backend = FakeBackend(tags=(200, TrickleStream(chunks, delay=0.3)))
        started = time.monotonic()
        with self.assertRaisesRegex(TransportError, "tags: deadline exceeded"):
            backend.client().list_installed(Deadline.after(0.5))
        self.assertLess(time.monotonic() - started, 1.5)

    def test_cancel_mid_body_aborts_request(self):
        deadline = Deadline.after(0)
        chunks = [b'{"models": ', b'[]}']
        backend = FakeBackend(ps=(200, TrickleStream(chunks, delay=0.2)))
        threading.Timer(0.1, deadline.cancel).start()
        with self.assertRaisesRegex(TransportError, "ps: deadline exceeded"):
            backend.client().list_running(deadline)

    def test_trickled_body_within_deadline_succeeds(self):
        chunks = [b'{"models": [', b'{"name": "llama2:7b"}', b']}']
        backend = FakeBackend(tags=(200, TrickleStream(chunks, delay=0.01)))
        models = backend.client().list_installed(Deadline.after(5))
        self.assertEqual(models, (Model("llama2:7b"),))

    def test_no_retry_after_failure(self):
        backend = FakeBackend(tags=(503, {}))
        with self.assertRaises(BackendError):
            backend.client().list_installed(Deadline.after(5))
        self.assertEqual(backend.calls["/api/tags"], 1)


class ParseModelsTests(unittest.TestCase):
    def test_rejects_non_object_payload(self):
        with self.assertRaises(DecodeError):
            parse_models([{"name": "x"}])

    def test_rejects_non_array_models(self):
        with self.assertRaises(DecodeError):
            parse_models({"models": "llama2"})

    def test_rejects_wrong_field_types(self):
        with self.assertRaises(DecodeError):
            parse_models({"models": [{"name": "x", "size": "big"}]})
        with self.assertRaises(DecodeError):
            parse_models({"models": [{"name": 7}]})
        with self.assertRaises(DecodeError):
            parse_models({"models": [{"name": "x", "size": True}]})

    def test_ignores_unknown_fields(self):
        models = parse_models({"models": [{"name": "x", "model": "x", "details": {}}]})
        self.assertEqual(models, (Model("x"),))


class DeadlineTests(unittest.TestCase):
    def test_non_positive_is_unbounded(self):
        deadline = Deadline.after(0)
        self.assertIsNone(deadline.remaining())
        self.assertFalse(deadline.expired)

    def test_cancel_expires(self):
        deadline = Deadline.after(0)
        deadline.cancel()
        self.assertTrue(deadline.expired)

    def test_remaining_is_bounded(self):
        remaining = Deadline.after(5).remaining()
        self.assertGreater(remaining, 0)
        self.assertLessEqual(remaining, 5)


class BaseUrlTests(unittest.TestCase):
    def test_defaults(self):
        self.assertEqual(normalize_base_url(None), "http://localhost:11434")
        self.assertEqual(normalize_base_url("  "), "http://localhost:11434")

    def test_adds_scheme_and_strips_slash(self):
        self.assertEqual(normalize_base_url("127.0.0.1:11434"), "http://127.0.0.1:11434")
        self.assertEqual(normalize_base_url("https://gpu-box:11434/"), "https://gpu-box:11434")


if __name__ == "__main__":
    unittest.main()
