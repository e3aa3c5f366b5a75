# providers/services/sync.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from catalog.models import DEFAULT_CURRENCY, Brand, Category, PriceHistory, Product, ProductAttribute
from catalog.services.stats import invalidate_catalog_cache
from catalog.utils import slugify_unique
from providers import registry
from providers.base import (
    FULL_SYNC_CURSOR,
    BaseProvider,
    FetchProductsOptions,
    NormalizedBrand,
    NormalizedCategory,
    NormalizedProduct,
)
from providers.exceptions import ProviderNotEligible
from providers.http import HttpClient
from providers.models import Provider, SyncJob
from providers.services.jobs import last_successful_job

log = logging.getLogger(__name__)


class JobLog:
    """Structured log lines for SyncJob.logs, mirrored to the module logger."""

    def __init__(self, provider_key: str):
        self.provider_key = provider_key
        self.entries: List[Dict[str, str]] = []

    def add(self, level: str, message: str) -> None:
        self.entries.append({"ts": timezone.now().isoformat(), "level": level, "message": message})
        log.log(
            getattr(logging, level.upper(), logging.INFO),
            "sync.log provider=%s %s",
            self.provider_key,
            message,
        )

    def info(self, message: str) -> None:
        self.add("info", message)

    def warning(self, message: str) -> None:
        self.add("warning", message)

    def error(self, message: str) -> None:
        self.add("error", message)


@dataclass
class SyncCounters:
    fetched: int = 0
    upserted: int = 0
    secondary_failures: int = 0
    pages: int = 0


# -----------------------------
# Entry points
# -----------------------------
def get_eligible_adapter(provider_key: str, *, http: HttpClient) -> Tuple[Provider, BaseProvider]:
    """
    Provider row + configured adapter, or raise before anything is written:
    unknown/disabled provider and missing adapter -> ProviderNotEligible,
    missing credentials / transport -> ProviderConfigurationError.
    """
    provider = Provider.objects.filter(key=provider_key).first()
    if provider is None:
        raise ProviderNotEligible(f"Unknown provider '{provider_key}'")
    if not provider.enabled:
        raise ProviderNotEligible(f"Provider '{provider_key}' is disabled")
    adapter = registry.get(provider.key, overrides=provider.credentials_json, http=http)
    if adapter is None:
        raise ProviderNotEligible(f"No adapter registered for provider '{provider_key}'")
    adapter.ensure_configured()
    return provider, adapter


def run_provider_sync(
    provider_key: str, *, full: bool = False, http: Optional[HttpClient] = None
) -> int:
    """
    Sync one provider and return the SyncJob id once the job is terminal.

    Delta vs full: the last SUCCESS job's `ended_at` becomes `updated_since`
    unless `full` is set or no such job exists. Failures mark the job FAILED
    and keep whatever was already written; upserts are idempotent, so re-running
    is the recovery path.
    """
    owns_http = http is None
    http = http or HttpClient()
    try:
        provider, adapter = get_eligible_adapter(provider_key, http=http)

        job = SyncJob.objects.create(
            provider=provider,
            status=SyncJob.STATUS_RUNNING,
            full=full,
            started_at=timezone.now(),
        )
        job_log = JobLog(provider.key)
        counters = SyncCounters()
        updated_since: Optional[datetime] = None
        status = SyncJob.STATUS_FAILED
        error_message = ""

        log.info("sync.start provider=%s job=%s full=%s", provider.key, job.pk, full)
        try:
            if not full:
                last_ok = last_successful_job(provider)
                updated_since = last_ok.ended_at if last_ok else None
            job_log.info(
                f"Delta sync since {updated_since.isoformat()}"
                if updated_since
                else "Full sync"
            )

            sync_brands(provider, adapter.fetch_brands(), job_log)
            sync_categories(provider, adapter.fetch_categories(), job_log)
            sync_products(
                provider, adapter, job_log, counters, updated_since=updated_since, full=full
            )
            status = _completed_status(counters, job_log)
        except Exception as e:
            error_message = f"{type(e).__name__}: {e}"
            job_log.error(f"Sync failed: {error_message}")
            log.exception("sync.failed provider=%s job=%s", provider.key, job.pk)
        finally:
            job.status = status
            job.ended_at = timezone.now()
            job.updated_since = updated_since
            job.fetched_count = counters.fetched
            job.upserted_count = counters.upserted
            job.error_message = error_message
            job.logs = job_log.entries
            job.save(
                update_fields=[
                    "status",
                    "ended_at",
                    "updated_since",
                    "fetched_count",
                    "upserted_count",
                    "error_message",
                    "logs",
                ]
            )
            log.info(
                "sync.end provider=%s job=%s status=%s fetched=%s upserted=%s",
                provider.key,
                job.pk,
                status,
                counters.fetched,
                counters.upserted,
            )
    finally:
        if owns_http:
            http.close()

    invalidate_catalog_cache()
    return job.pk


def run_all_syncs(*, http: Optional[HttpClient] = None) -> List[int]:
    """One job per enabled provider; a failing provider never stops the loop."""
    enabled = set(Provider.objects.filter(enabled=True).values_list("key", flat=True))
    job_ids: List[int] = []
    for key in registry.list_keys():
        if key not in enabled:
            continue
        try:
            job_ids.append(run_provider_sync(key, http=http))
        except Exception as e:
            log.error("sync.skip provider=%s err=%s", key, e)
    return job_ids


# -----------------------------
# Taxonomy
# -----------------------------
def sync_brands(provider: Provider, brands: List[NormalizedBrand], job_log: JobLog) -> int:
    for item in brands:
        _upsert_named(Brand, provider, item.external_id, item.name)
    job_log.info(f"Brands: {len(brands)} upserted")
    return len(brands)


def sync_categories(
    provider: Provider, categories: List[NormalizedCategory], job_log: JobLog
) -> int:
    for item in categories:
        _upsert_named(
            Category,
            provider,
            item.external_id,
            item.name,
            parent_external_id=item.parent_external_id or "",
        )
    link_category_parents(provider, job_log)
    job_log.info(f"Categories: {len(categories)} upserted")
    return len(categories)


def _upsert_named(model, provider: Provider, external_id: str, name: str, **extra: Any):
    name = (name or external_id)[:255]
    obj = model.objects.filter(provider=provider, external_id=external_id).first()
    if obj is None:
        return model.objects.create(
            provider=provider,
            external_id=external_id,
            name=name,
            slug=slugify_unique(model, name, provider=provider),
            **extra,
        )
    changed = [f for f, v in {"name": name, **extra}.items() if getattr(obj, f) != v]
    if changed:
        for f in changed:
            setattr(obj, f, {"name": name, **extra}[f])
        obj.save(update_fields=changed + ["updated_at"])
    return obj


def link_category_parents(provider: Provider, job_log: JobLog) -> None:
    """
    Resolve `parent_external_id` into the `parent` FK. Unknown parents and edges
    that would close a cycle are left unlinked, so the stored tree stays a forest.
    """
    cats = list(
        Category.objects.filter(provider=provider)
        .only("id", "external_id", "parent_external_id", "parent_id")
        .order_by("id")
    )
    by_ext = {c.external_id: c for c in cats}
    parent_of: Dict[int, Optional[int]] = {}
    unknown = 0

    for cat in cats:
        parent = by_ext.get(cat.parent_external_id) if cat.parent_external_id else None
        if cat.parent_external_id and parent is None:
            unknown += 1
        if parent is not None and _closes_cycle(parent_of, cat.id, parent.id):
            job_log.warning(
                f"Category {cat.external_id}: parent {cat.parent_external_id} "
                "would create a cycle, left as root"
            )
            parent = None
        parent_of[cat.id] = parent.id if parent is not None else None
        if cat.parent_id != parent_of[cat.id]:
            Category.objects.filter(pk=cat.pk).update(parent_id=parent_of[cat.id])

    if unknown:
        job_log.warning(f"Categories: {unknown} reference an unknown parent, left as root")


def _closes_cycle(parent_of: Mapping[int, Optional[int]], child_id: int, parent_id: int) -> bool:
    node: Optional[int] = parent_id
    while node is not None:
        if node == child_id:
            return True
        node = parent_of.get(node)
    return False


# -----------------------------
# Products
# -----------------------------
def sync_products(
    provider: Provider,
    adapter: BaseProvider,
    job_log: JobLog,
    counters: SyncCounters,
    *,
    updated_since: Optional[datetime] = None,
    full: bool = False,
) -> None:
    # brands/categories are complete at this point; resolve ids once
    brand_ids = dict(Brand.objects.filter(provider=provider).values_list("external_id", "id"))
    category_ids = dict(
        Category.objects.filter(provider=provider).values_list("external_id", "id")
    )

    options = FetchProductsOptions(
        cursor=FULL_SYNC_CURSOR if full else None,
        updated_since=updated_since,
        limit=settings.SYNC_PAGE_LIMIT,
    )
    while True:
        result = adapter.fetch_products(options)
        counters.pages += 1
        counters.fetched += len(result.products)
        counters.secondary_failures += result.secondary_failures

        for item in result.products:
            if not item.external_id:
                job_log.warning("Skipped a product without external id")
                continue
            upsert_product(
                provider,
                item,
                brand_id=brand_ids.get(item.brand_external_id or ""),
                category_id=category_ids.get(item.category_external_id or ""),
            )
            counters.upserted += 1

        job_log.info(
            f"Page {counters.pages}: fetched {len(result.products)} products "
            f"(total: {counters.fetched})"
        )
        if not (result.has_more and result.next_cursor):
            break
        options = FetchProductsOptions(
            cursor=result.next_cursor, updated_since=updated_since, limit=options.limit
        )


@transaction.atomic
def upsert_product(
    provider: Provider,
    item: NormalizedProduct,
    *,
    brand_id: Optional[int] = None,
    category_id: Optional[int] = None,
) -> Tuple[Product, bool]:
    """
    Insert or update one product by (provider, external_id). Returns (product, created).

    A PriceHistory row is added for a new product with a price, and afterwards
    only when the observed price differs from the stored one.
    """
    now = timezone.now()
    product = Product.objects.filter(provider=provider, external_id=item.external_id).first()

    if product is None:
        product = Product.objects.create(
            provider=provider,
            external_id=item.external_id,
            sku=(item.sku or "")[:255],
            name=item.name[:500],
            description=item.description or "",
            price=item.price,
            currency=item.currency or DEFAULT_CURRENCY,
            stock_qty=item.stock_qty,
            in_stock=item.in_stock,
            url=(item.url or "")[:1000],
            images=list(item.images),
            brand_id=brand_id,
            category_id=category_id,
            raw_json=item.raw_json,
            last_synced_at=now,
        )
        if item.price is not None:
            PriceHistory.objects.create(
                product=product, price=item.price, currency=product.currency, observed_at=now
            )
        _replace_attributes(product, item.attributes)
        return product, True

    previous_price = product.price
    _apply_changes(product, item, brand_id=brand_id, category_id=category_id)
    product.last_synced_at = now
    product.save()

    if item.price is not None and item.price != previous_price:
        PriceHistory.objects.create(
            product=product, price=item.price, currency=product.currency, observed_at=now
        )
    if not item.partial:
        _replace_attributes(product, item.attributes)
    return product, False


def _apply_changes(
    product: Product,
    item: NormalizedProduct,
    *,
    brand_id: Optional[int],
    category_id: Optional[int],
) -> None:
    # measured values missing from a feed cycle mean "not reported", not "cleared"
    if item.price is not None:
        product.price = item.price
    if item.currency:
        product.currency = item.currency
    if item.stock_qty is not None:
        product.stock_qty = item.stock_qty
    product.in_stock = item.in_stock

    if item.partial:
        if item.sku:
            product.sku = item.sku[:255]
        return

    product.sku = (item.sku or "")[:255]
    product.name = item.name[:500]
    product.description = item.description or ""
    product.url = (item.url or "")[:1000]
    product.images = list(item.images)
    product.brand_id = brand_id
    product.category_id = category_id
    product.raw_json = item.raw_json


def _replace_attributes(product: Product, attributes: Mapping[str, str]) -> None:
    ProductAttribute.objects.filter(product=product).delete()
    ProductAttribute.objects.bulk_create(
        [ProductAttribute(product=product, key=k[:100], value=v) for k, v in attributes.items()]
    )


def _completed_status(counters: SyncCounters, job_log: JobLog) -> str:
    if counters.secondary_failures:
        job_log.warning(
            f"{counters.secondary_failures} secondary lookups failed; list values kept"
        )
    threshold = getattr(settings, "SYNC_PARTIAL_FAILURE_THRESHOLD", None)
    if threshold is not None and counters.secondary_failures > threshold:
        return SyncJob.STATUS_PARTIAL
    return SyncJob.STATUS_SUCCESS
