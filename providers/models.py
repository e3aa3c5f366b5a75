# providers/models.py
from __future__ import annotations

from django.db import models


class Provider(models.Model):
    """
    A distributor integration (e.g. nod, elko).
    `credentials_json` optionally overrides the values configured in settings.PROVIDER_CREDENTIALS.
    """

    key = models.SlugField(max_length=50, unique=True, help_text="Registry key, e.g. 'nod'")
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default="")
    enabled = models.BooleanField(default=False)
    credentials_json = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]

    def __str__(self) -> str:
        return f"{self.key} ({'enabled' if self.enabled else 'disabled'})"


class SyncJob(models.Model):
    STATUS_PENDING = "pending"
    STATUS_RUNNING = "running"
    STATUS_SUCCESS = "success"
    STATUS_FAILED = "failed"
    STATUS_PARTIAL = "partial"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_RUNNING, "Running"),
        (STATUS_SUCCESS, "Success"),
        (STATUS_FAILED, "Failed"),
        (STATUS_PARTIAL, "Partial"),  # finished, but too many secondary lookups failed
    ]
    TERMINAL_STATUSES = (STATUS_SUCCESS, STATUS_FAILED, STATUS_PARTIAL)

    provider = models.ForeignKey(Provider, on_delete=models.CASCADE, related_name="sync_jobs")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    full = models.BooleanField(default=False, help_text="Full sync was requested")
    updated_since = models.DateTimeField(
        null=True, blank=True, help_text="Delta window used (empty = full catalog)"
    )
    started_at = models.DateTimeField(null=True, blank=True)
    ended_at = models.DateTimeField(null=True, blank=True)
    fetched_count = models.PositiveIntegerField(default=0)
    upserted_count = models.PositiveIntegerField(default=0)
    error_message = models.TextField(blank=True, default="")
    logs = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["provider", "-created_at"], name="syncjob_provider_created_idx"),
            models.Index(
                fields=["provider", "status", "-ended_at"], name="syncjob_provider_status_idx"
            ),
            models.Index(fields=["status"], name="syncjob_status_idx"),
        ]

    def __str__(self) -> str:
        started = f"{self.started_at:%Y-%m-%d %H:%M:%S}" if self.started_at else "-"
        return f"{self.provider.key} @ {started} [{self.status}]"

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    @property
    def duration_ms(self) -> int | None:
        if not (self.started_at and self.ended_at):
            return None
        return int((self.ended_at - self.started_at).total_seconds() * 1000)
