"""Transport error mapping, status handling and the reader/writer lock."""

from __future__ import annotations

import threading
import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import google.auth.exceptions
import requests

from fireadmin.adapters.http import HttpResponse, RequestsTransport, raise_for_status
from fireadmin.core.locks import ReadWriteLock
from fireadmin.errors import TransportError


class RequestsTransportTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = requests.Session()
        self.transport = RequestsTransport(session=self.session, default_timeout=7.5)

    def tearDown(self) -> None:
        self.transport.close()

    def test_response_is_wrapped(self) -> None:
        raw = SimpleNamespace(status_code=201, content=b'{"ok":true}', headers={"Expires": "x"}, reason="Created")
        with patch.object(self.session, "request", return_value=raw) as request:
            response = self.transport.request(
                "post",
                "https://example.test/items",
                params={"a": "1"},
                data=b"null",
                headers={"Content-Type": "application/json"},
            )

        request.assert_called_once_with(
            "POST",
            "https://example.test/items",
            params={"a": "1"},
            headers={"Content-Type": "application/json"},
            timeout=7.5,
            data=b"null",
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json(), {"ok": True})
        self.assertEqual(response.header("expires"), "x")

    def test_json_body_is_sent_when_no_raw_data(self) -> None:
        raw = SimpleNamespace(status_code=200, content=b"{}", headers={}, reason="OK")
        with patch.object(self.session, "request", return_value=raw) as request:
            self.transport.request("POST", "https://example.test", json_body={"k": "v"}, timeout=2.0)
        self.assertEqual(request.call_args.kwargs["json"], {"k": "v"})
        self.assertEqual(request.call_args.kwargs["timeout"], 2.0)

    def test_network_failures_are_classified(self) -> None:
        cases = [
            (requests.exceptions.ConnectTimeout("slow"), "DEADLINE_EXCEEDED", True),
            (requests.exceptions.ConnectionError("refused"), "UNAVAILABLE", True),
            (requests.exceptions.InvalidURL("bad"), "TRANSPORT_ERROR", False),
            (google.auth.exceptions.RefreshError("revoked"), "UNAUTHENTICATED", False),
        ]
        for exc, code, retryable in cases:
            with self.subTest(code=code):
                with patch.object(self.session, "request", side_effect=exc):
                    with self.assertRaises(TransportError) as context:
                        self.transport.request("GET", "https://example.test")
                self.assertEqual(context.exception.code, code)
                self.assertEqual(context.exception.retryable, retryable)

    def test_access_token_refreshes_invalid_credentials(self) -> None:
        credentials = MagicMock()
        credentials.valid = False
        credentials.token = "ya29.fresh"
        transport = RequestsTransport(credentials, session=requests.Session(), bearer_in_url=True)

        self.assertEqual(transport.access_token(), "ya29.fresh")
        credentials.refresh.assert_called_once()
        self.assertTrue(transport.bearer_in_url)
        self.assertIsNone(self.transport.access_token())
        self.assertFalse(self.transport.bearer_in_url)


class RaiseForStatusTests(unittest.TestCase):
    def test_success_passes_through(self) -> None:
        response = HttpResponse(status_code=204)
        self.assertIs(raise_for_status(response, service="svc"), response)

    def test_error_messages(self) -> None:
        cases = [
            (HttpResponse(400, b'{"error": "Invalid data"}', reason="Bad Request"), "svc: Invalid data"),
            (HttpResponse(400, b'{"error": {"message": "EMAIL_EXISTS"}}'), "svc: EMAIL_EXISTS"),
            (HttpResponse(404, b"<html>", reason="Not Found"), "svc: 404 Not Found"),
        ]
        for response, message in cases:
            with self.subTest(message=message):
                with self.assertRaises(TransportError) as context:
                    raise_for_status(response, service="svc")
                self.assertEqual(context.exception.message, message)
                self.assertEqual(context.exception.status_code, response.status_code)
                self.assertFalse(context.exception.retryable)

    def test_retryable_statuses(self) -> None:
        for status in (408, 429, 500, 502, 503, 504):
            with self.subTest(status=status):
                with self.assertRaises(TransportError) as context:
                    raise_for_status(HttpResponse(status), service="svc")
                self.assertTrue(context.exception.retryable)

    def test_malformed_json_body(self) -> None:
        with self.assertRaises(TransportError) as context:
            HttpResponse(200, b"{not json").json()
        self.assertEqual(context.exception.code, "MALFORMED_RESPONSE")


class ReadWriteLockTests(unittest.TestCase):
    def test_readers_share_and_writer_excludes(self) -> None:
        lock = ReadWriteLock()
        lock.acquire_read()
        lock.acquire_read()

        writer_done = threading.Event()

        def writer() -> None:
            with lock.write_locked():
                writer_done.set()

        thread = threading.Thread(target=writer)
        thread.start()
        self.assertFalse(writer_done.wait(0.05))

        lock.release_read()
        self.assertFalse(writer_done.wait(0.05))
        lock.release_read()

        self.assertTrue(writer_done.wait(1.0))
        thread.join()

        with lock.read_locked():
            pass


if __name__ == "__main__":
    unittest.main()
