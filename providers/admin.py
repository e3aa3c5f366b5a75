# providers/admin.py
from django.contrib import admin, messages
from django.contrib.admin.widgets import AdminTextareaWidget
from django.db import models

from providers.exceptions import ProviderError
from providers.http import HttpClient
from providers.models import Provider, SyncJob
from providers.services.health import ping_provider
from providers.services.sync import run_provider_sync


def _run_sync(modeladmin, request, queryset, *, full: bool):
    with HttpClient() as http:
        for provider in queryset:
            try:
                job_id = run_provider_sync(provider.key, full=full, http=http)
            except ProviderError as e:
                messages.error(request, f"{provider.key} not synced: {e}")
                continue
            job = SyncJob.objects.get(pk=job_id)
            summary = (
                f"{provider.key}: job {job.pk} {job.status} "
                f"(fetched={job.fetched_count}, upserted={job.upserted_count})"
            )
            if job.status == SyncJob.STATUS_FAILED:
                messages.error(request, f"{summary}: {job.error_message}")
            elif job.status == SyncJob.STATUS_PARTIAL:
                messages.warning(request, summary)
            else:
                messages.success(request, summary)


@admin.action(description="Sync selected providers now")
def sync_selected_providers(modeladmin, request, queryset):
    _run_sync(modeladmin, request, queryset, full=False)


@admin.action(description="Full sync selected providers now")
def full_sync_selected_providers(modeladmin, request, queryset):
    _run_sync(modeladmin, request, queryset, full=True)


@admin.action(description="Test connection")
def test_selected_providers(modeladmin, request, queryset):
    with HttpClient() as http:
        for provider in queryset:
            result = ping_provider(provider.key, http=http)
            if result.success:
                messages.success(
                    request, f"{provider.key} OK in {result.latency_ms} ms: {result.message}"
                )
            else:
                messages.error(request, f"{provider.key} failed: {result.message}")


@admin.action(description="Enable selected providers")
def enable_providers(modeladmin, request, queryset):
    queryset.update(enabled=True)


@admin.action(description="Disable selected providers")
def disable_providers(modeladmin, request, queryset):
    queryset.update(enabled=False)


@admin.register(Provider)
class ProviderAdmin(admin.ModelAdmin):
    list_display = ("key", "name", "enabled", "updated_at")
    list_filter = ("enabled",)
    search_fields = ("key", "name")
    actions = [
        sync_selected_providers,
        full_sync_selected_providers,
        test_selected_providers,
        enable_providers,
        disable_providers,
    ]
    formfield_overrides = {
        models.JSONField: {"widget": AdminTextareaWidget},
    }


@admin.register(SyncJob)
class SyncJobAdmin(admin.ModelAdmin):
    """The job ledger is written by the sync service only."""

    list_display = (
        "provider",
        "status",
        "full",
        "started_at",
        "ended_at",
        "fetched_count",
        "upserted_count",
    )
    list_filter = ("status", "provider")
    date_hierarchy = "started_at"
    search_fields = ("provider__key", "error_message")
    list_select_related = ("provider",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
