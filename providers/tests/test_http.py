from __future__ import annotations

import requests
from django.test import SimpleTestCase

from providers.exceptions import ProviderTransportError, RateLimitedError
from providers.http import HttpClient
from providers.tests.fakes import FakeSession, make_response


class HttpClientTests(SimpleTestCase):
    def client_for(self, routes, **kwargs):
        session = FakeSession(routes)
        kwargs.setdefault("backoff_s", 0)
        return HttpClient(session=session, **kwargs), session

    def test_server_errors_are_retried(self):
        http, session = self.client_for(
            {"/feed": [make_response(503), make_response(200, json_body={"ok": True})]}
        )
        self.assertEqual(http.get_json("https://x.test/feed"), {"ok": True})
        self.assertEqual(len(session.calls), 2)

    def test_retries_give_up_after_max(self):
        http, session = self.client_for({"/feed": make_response(502)}, max_retries=3)
        with self.assertRaises(ProviderTransportError) as ctx:
            http.get("https://x.test/feed", label="Feed")
        self.assertEqual(ctx.exception.status_code, 502)
        self.assertEqual(len(session.calls), 3)

    def test_connection_errors_are_retried_then_raised(self):
        http, session = self.client_for(
            {"/feed": requests.ConnectionError("refused")}, max_retries=2
        )
        with self.assertRaises(ProviderTransportError):
            http.get("https://x.test/feed")
        self.assertEqual(len(session.calls), 2)

    def test_rate_limit_is_not_retried(self):
        http, session = self.client_for({"/feed": make_response(429)})
        with self.assertRaises(RateLimitedError) as ctx:
            http.get("https://x.test/feed")
        self.assertEqual(ctx.exception.status_code, 429)
        self.assertEqual(len(session.calls), 1)

    def test_client_error_uses_label_not_url(self):
        http, _ = self.client_for({"/secret-key/": make_response(403, body="denied")})
        with self.assertRaises(ProviderTransportError) as ctx:
            http.get("https://x.test/secret-key/", label="Availability feed")
        message = str(ctx.exception)
        self.assertIn("Availability feed HTTP 403", message)
        self.assertIn("denied", message)
        self.assertNotIn("secret-key", message)
        self.assertEqual(ctx.exception.status_code, 403)

    def test_malformed_json(self):
        http, _ = self.client_for({"/feed": make_response(200, body="<html>")})
        with self.assertRaises(ProviderTransportError):
            http.get_json("https://x.test/feed", label="Feed")

    def test_get_text_strips_bom(self):
        http, _ = self.client_for({"/feed": make_response(200, body="\ufeffa;b\n1;2")})
        self.assertEqual(http.get_text("https://x.test/feed"), "a;b\n1;2")

    def test_context_manager_closes_session(self):
        session = FakeSession()
        with HttpClient(session=session) as http:
            self.assertIn("User-Agent", http.session.headers)
        self.assertTrue(session.closed)
