from __future__ import annotations

from django.test import SimpleTestCase, override_settings

from providers import registry
from providers.adapters import AlsoAdapter, NodAdapter
from providers.http import HttpClient
from providers.tests.fakes import FakeSession


class RegistryTests(SimpleTestCase):
    def test_known_keys(self):
        self.assertEqual(registry.list_keys(), ["also", "elko", "ingram", "nod"])

    def test_lookup_is_case_insensitive_and_fresh(self):
        http = HttpClient(session=FakeSession())
        first = registry.get("NOD", http=http)
        second = registry.get("nod", http=http)
        self.assertIsInstance(first, NodAdapter)
        self.assertIsNot(first, second)
        self.assertIs(first.http, http)

    def test_unknown_key(self):
        http = HttpClient(session=FakeSession())
        self.assertIsNone(registry.get("nope", http=http))
        self.assertIsNone(registry.get("", http=http))

    def test_adapters_need_an_explicit_http_client(self):
        with self.assertRaises(TypeError):
            NodAdapter({"api_user": "u", "api_key": "k"})
        with self.assertRaises(TypeError):
            registry.get("nod")

    @override_settings(PROVIDER_CREDENTIALS={"nod": {"api_user": "u", "api_key": "k"}})
    def test_overrides_layer_on_settings(self):
        creds = registry.credentials_for("nod", {"api_key": "", "api_user": "db-user", "x": None})
        self.assertEqual(creds, {"api_user": "db-user", "api_key": "k"})

    @override_settings(PROVIDER_CREDENTIALS={})
    def test_missing_settings_block(self):
        http = HttpClient(session=FakeSession())
        adapter = registry.get("also", overrides={"host": "h"}, http=http)
        self.assertIsInstance(adapter, AlsoAdapter)
        self.assertEqual(adapter.credentials, {"host": "h"})
