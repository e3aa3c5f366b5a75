# catalog/models.py
from __future__ import annotations

from django.db import models
from django.utils import timezone

DEFAULT_CURRENCY = "RON"


# ---------- Base ----------
class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# ---------- Taxonomy (provider scoped) ----------
class Brand(TimeStampedModel):
    provider = models.ForeignKey(
        "providers.Provider", on_delete=models.CASCADE, related_name="brands"
    )
    external_id = models.CharField(max_length=255)
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=120)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["provider", "external_id"], name="uq_brand_provider_external_id"
            ),
            models.UniqueConstraint(fields=["provider", "slug"], name="uq_brand_provider_slug"),
        ]

    def __str__(self) -> str:
        return self.name


class Category(TimeStampedModel):
    provider = models.ForeignKey(
        "providers.Provider", on_delete=models.CASCADE, related_name="categories"
    )
    external_id = models.CharField(max_length=255)
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=120)
    # As reported by the provider; `parent` is the resolved (cycle-free) link.
    parent_external_id = models.CharField(max_length=255, blank=True, default="")
    parent = models.ForeignKey(
        "self", null=True, blank=True, on_delete=models.SET_NULL, related_name="children"
    )

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"
        constraints = [
            models.UniqueConstraint(
                fields=["provider", "external_id"], name="uq_category_provider_external_id"
            ),
            models.UniqueConstraint(
                fields=["provider", "slug"], name="uq_category_provider_slug"
            ),
        ]

    def __str__(self) -> str:
        return self.name


# ---------- Core ----------
class Product(TimeStampedModel):
    provider = models.ForeignKey(
        "providers.Provider", on_delete=models.CASCADE, related_name="products"
    )
    external_id = models.CharField(max_length=255)
    sku = models.CharField(max_length=255, blank=True, default="", db_index=True)
    name = models.CharField(max_length=500)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=3, default=DEFAULT_CURRENCY)
    stock_qty = models.IntegerField(null=True, blank=True)
    in_stock = models.BooleanField(default=False, db_index=True)
    url = models.URLField(max_length=1000, blank=True, default="")
    images = models.JSONField(default=list, blank=True)
    brand = models.ForeignKey(
        Brand, null=True, blank=True, on_delete=models.SET_NULL, related_name="products"
    )
    category = models.ForeignKey(
        Category, null=True, blank=True, on_delete=models.SET_NULL, related_name="products"
    )
    raw_json = models.JSONField(null=True, blank=True)
    last_synced_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["provider", "external_id"], name="uq_product_provider_external_id"
            )
        ]
        indexes = [
            models.Index(fields=["provider", "in_stock"], name="product_provider_stock_idx"),
            models.Index(fields=["brand"], name="product_brand_idx"),
            models.Index(fields=["category"], name="product_category_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.provider_id}:{self.external_id})"


class ProductAttribute(models.Model):
    """Key/value pairs; the whole set is replaced on every sync."""

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="attributes")
    key = models.CharField(max_length=100)
    value = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["key"]
        indexes = [models.Index(fields=["product", "key"], name="attribute_product_key_idx")]

    def __str__(self) -> str:
        return f"{self.key}={self.value}"


class PriceHistory(models.Model):
    """Append-only: one row per observed price change."""

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="price_history")
    price = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default=DEFAULT_CURRENCY)
    observed_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-observed_at", "-id"]
        verbose_name_plural = "price history"

    def __str__(self) -> str:
        return f"{self.price} {self.currency} @ {self.observed_at:%Y-%m-%d %H:%M}"
