from __future__ import annotations

from unittest.mock import MagicMock, patch

from django.core.cache import cache
from django.test import SimpleTestCase, TestCase

from catalog.models import Product
from catalog.services.stats import (
    dashboard_stats,
    filter_options,
    invalidate_catalog_cache,
    provider_overview,
)
from core.cache import QueryCache
from providers.models import Provider, SyncJob


class QueryCacheTests(SimpleTestCase):
    def setUp(self) -> None:
        cache.clear()

    def test_get_or_set_calls_loader_once(self):
        qc = QueryCache(prefix="t")
        loader = MagicMock(return_value={"n": 1})
        self.assertEqual(qc.get_or_set("k", 60, loader), {"n": 1})
        self.assertEqual(qc.get_or_set("k", 60, loader), {"n": 1})
        loader.assert_called_once()
        self.assertEqual(cache.get("t:k"), {"n": 1})

    def test_delete(self):
        qc = QueryCache(prefix="t")
        qc.set("a", 1, 60)
        qc.set("b", 2, 60)
        qc.delete("a", "b")
        self.assertIsNone(qc.get("a"))
        self.assertIsNone(qc.get("b"))

    def test_backend_failure_degrades_to_miss(self):
        with patch("core.cache.caches") as caches:
            backend = caches.__getitem__.return_value
            backend.get.side_effect = ConnectionError("redis down")
            backend.set.side_effect = ConnectionError("redis down")
            backend.delete_many.side_effect = ConnectionError("redis down")
            qc = QueryCache()
            self.assertIsNone(qc.get("k"))
            self.assertEqual(qc.get_or_set("k", 60, lambda: 42), 42)
            qc.delete("k")

    def test_unknown_alias_degrades_to_miss(self):
        qc = QueryCache(alias="does-not-exist")
        self.assertEqual(qc.get_or_set("k", 60, lambda: "fresh"), "fresh")


class CatalogStatsTests(TestCase):
    def setUp(self) -> None:
        cache.clear()
        self.provider = Provider.objects.create(key="nod", name="NOD", enabled=True)

    def test_stats_are_cached_until_invalidated(self):
        Product.objects.create(provider=self.provider, external_id="1", name="A", in_stock=True)
        stats = dashboard_stats()
        self.assertEqual((stats["products"], stats["in_stock"]), (1, 1))
        self.assertEqual(stats["latest_jobs"][0]["status"], None)

        Product.objects.create(provider=self.provider, external_id="2", name="B")
        SyncJob.objects.create(provider=self.provider, status=SyncJob.STATUS_SUCCESS)
        self.assertEqual(dashboard_stats()["products"], 1)

        invalidate_catalog_cache()
        stats = dashboard_stats()
        self.assertEqual(stats["products"], 2)
        self.assertEqual(stats["latest_jobs"][0]["status"], SyncJob.STATUS_SUCCESS)

    def test_provider_overview_counts(self):
        Provider.objects.create(key="elko", name="ELKO")
        Product.objects.create(provider=self.provider, external_id="1", name="A")
        rows = {r["key"]: r for r in provider_overview()}
        self.assertEqual(rows["nod"]["products"], 1)
        self.assertEqual(rows["elko"]["products"], 0)

    def test_filter_options_per_provider(self):
        other = Provider.objects.create(key="elko", name="ELKO")
        Product.objects.create(provider=self.provider, external_id="1", name="A", currency="RON")
        Product.objects.create(provider=other, external_id="1", name="B", currency="EUR")
        self.assertEqual(filter_options()["currencies"], ["EUR", "RON"])
        self.assertEqual(filter_options("elko")["currencies"], ["EUR"])
