# providers/services/jobs.py
"""Read-only queries over the sync job ledger."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from django.db.models import QuerySet

from providers.models import Provider, SyncJob


def recent_jobs(provider_key: Optional[str] = None, limit: int = 20) -> QuerySet[SyncJob]:
    qs = SyncJob.objects.select_related("provider").order_by("-created_at", "-id")
    if provider_key:
        qs = qs.filter(provider__key=provider_key)
    return qs[:limit]


def latest_job(provider_key: str) -> Optional[SyncJob]:
    return (
        SyncJob.objects.select_related("provider")
        .filter(provider__key=provider_key)
        .order_by("-created_at", "-id")
        .first()
    )


def last_successful_job(provider: Provider) -> Optional[SyncJob]:
    """Most recent SUCCESS job; its `ended_at` is the next delta window."""
    return (
        SyncJob.objects.filter(
            provider=provider, status=SyncJob.STATUS_SUCCESS, ended_at__isnull=False
        )
        .order_by("-ended_at")
        .first()
    )


def job_logs(job_id: int) -> List[Dict[str, Any]]:
    logs = SyncJob.objects.filter(pk=job_id).values_list("logs", flat=True).first()
    return list(logs or [])
