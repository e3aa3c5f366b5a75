# catalog/services/stats.py
"""
Cached read models for dashboards/reporting. Every value is recomputed on a
miss, so a cold or unavailable cache only costs latency.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db.models import Count, OuterRef, Subquery

from catalog.models import Brand, Category, Product
from core.cache import QueryCache
from providers.models import Provider, SyncJob

STATS_KEY = "catalog:stats"
PROVIDERS_KEY = "catalog:providers"
FILTERS_KEY = "catalog:filters"


def _ttl(name: str) -> int:
    return int(getattr(settings, "CATALOG_CACHE_TTL", {}).get(name, 60))


def dashboard_stats(cache: Optional[QueryCache] = None) -> Dict[str, Any]:
    cache = cache or QueryCache()
    return cache.get_or_set(STATS_KEY, _ttl("stats"), _compute_stats)


def _compute_stats() -> Dict[str, Any]:
    latest = []
    for provider in Provider.objects.order_by("key"):
        job = provider.sync_jobs.order_by("-created_at", "-id").first()
        latest.append(
            {
                "provider": provider.key,
                "status": job.status if job else None,
                "ended_at": job.ended_at.isoformat() if job and job.ended_at else None,
                "fetched": job.fetched_count if job else 0,
                "upserted": job.upserted_count if job else 0,
            }
        )
    return {
        "products": Product.objects.count(),
        "in_stock": Product.objects.filter(in_stock=True).count(),
        "brands": Brand.objects.count(),
        "categories": Category.objects.count(),
        "providers": Provider.objects.count(),
        "enabled_providers": Provider.objects.filter(enabled=True).count(),
        "latest_jobs": latest,
    }


def provider_overview(cache: Optional[QueryCache] = None) -> List[Dict[str, Any]]:
    cache = cache or QueryCache()
    return cache.get_or_set(PROVIDERS_KEY, _ttl("providers"), _compute_provider_overview)


def _compute_provider_overview() -> List[Dict[str, Any]]:
    def _count(model):
        return Subquery(
            model.objects.filter(provider=OuterRef("pk"))
            .order_by()
            .values("provider")
            .annotate(n=Count("pk"))
            .values("n")[:1]
        )

    rows = Provider.objects.order_by("key").annotate(
        product_count=_count(Product),
        brand_count=_count(Brand),
        category_count=_count(Category),
        job_count=_count(SyncJob),
    )
    return [
        {
            "key": p.key,
            "name": p.name,
            "enabled": p.enabled,
            "products": p.product_count or 0,
            "brands": p.brand_count or 0,
            "categories": p.category_count or 0,
            "jobs": p.job_count or 0,
        }
        for p in rows
    ]


def filter_options(
    provider_key: Optional[str] = None, cache: Optional[QueryCache] = None
) -> Dict[str, Any]:
    cache = cache or QueryCache()
    key = f"{FILTERS_KEY}:{provider_key or 'all'}"
    return cache.get_or_set(key, _ttl("filters"), lambda: _compute_filters(provider_key))


def _compute_filters(provider_key: Optional[str]) -> Dict[str, Any]:
    products = Product.objects.all()
    brands = Brand.objects.all()
    categories = Category.objects.all()
    if provider_key:
        products = products.filter(provider__key=provider_key)
        brands = brands.filter(provider__key=provider_key)
        categories = categories.filter(provider__key=provider_key)
    return {
        "currencies": sorted(set(products.values_list("currency", flat=True))),
        "brands": list(brands.order_by("name").values("id", "name", "slug")),
        "categories": list(categories.order_by("name").values("id", "name", "slug")),
    }


def invalidate_catalog_cache(cache: Optional[QueryCache] = None) -> None:
    cache = cache or QueryCache()
    keys = [STATS_KEY, PROVIDERS_KEY, f"{FILTERS_KEY}:all"]
    keys += [f"{FILTERS_KEY}:{k}" for k in Provider.objects.values_list("key", flat=True)]
    cache.delete(*keys)
