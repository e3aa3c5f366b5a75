# providers/tasks.py
from __future__ import annotations

from celery import shared_task

from providers.http import HttpClient
from providers.services.sync import run_all_syncs, run_provider_sync


@shared_task
def sync_provider(key: str, full: bool = False) -> int:
    with HttpClient() as http:
        return run_provider_sync(key, full=full, http=http)


@shared_task
def sync_all_providers() -> list[int]:
    with HttpClient() as http:
        return run_all_syncs(http=http)
