from __future__ import annotations

from django.contrib import admin

from .models import Brand, Category, PriceHistory, Product, ProductAttribute


# -------- Inlines --------
class ProductAttributeInline(admin.TabularInline):
    """Replaced wholesale by every sync, so read-only here."""

    model = ProductAttribute
    extra = 0
    fields = ("key", "value")
    readonly_fields = ("key", "value")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class PriceHistoryInline(admin.TabularInline):
    model = PriceHistory
    extra = 0
    fields = ("observed_at", "price", "currency")
    readonly_fields = ("observed_at", "price", "currency")
    can_delete = False
    ordering = ("-observed_at",)

    def has_add_permission(self, request, obj=None):
        return False


# -------- ModelAdmins --------
@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "provider",
        "external_id",
        "sku",
        "price",
        "currency",
        "stock_qty",
        "in_stock",
        "brand",
        "category",
        "last_synced_at",
    )
    list_filter = ("provider", "in_stock", "currency")
    search_fields = ("name", "sku", "external_id", "brand__name", "category__name")
    readonly_fields = ("provider", "external_id", "raw_json", "last_synced_at", "created_at")
    inlines = [ProductAttributeInline, PriceHistoryInline]
    autocomplete_fields = ("brand", "category")
    list_select_related = ("provider", "brand", "category")
    ordering = ("name",)
    list_per_page = 50


@admin.register(Brand)
class BrandAdmin(admin.ModelAdmin):
    list_display = ("name", "provider", "external_id", "slug", "updated_at")
    list_filter = ("provider",)
    search_fields = ("name", "slug", "external_id")
    list_select_related = ("provider",)
    ordering = ("name",)


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "provider", "external_id", "parent", "slug")
    list_filter = ("provider",)
    search_fields = ("name", "slug", "external_id")
    autocomplete_fields = ("parent",)
    list_select_related = ("provider", "parent")
    ordering = ("name",)
