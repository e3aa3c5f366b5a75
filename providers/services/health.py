# providers/services/health.py
from __future__ import annotations

import logging
from typing import Optional

from providers import registry
from providers.base import ProviderTestResult
from providers.http import HttpClient
from providers.models import Provider

log = logging.getLogger(__name__)


def ping_provider(provider_key: str, *, http: Optional[HttpClient] = None) -> ProviderTestResult:
    """
    Cheapest authenticated call for `provider_key`; never raises, also for disabled
    providers. Without `http` a client is opened for this call and closed after it.
    """
    owns_http = http is None
    http = http or HttpClient()
    try:
        provider = Provider.objects.filter(key=provider_key).first()
        overrides = provider.credentials_json if provider else None
        adapter = registry.get(provider_key, overrides=overrides, http=http)
        if adapter is None:
            return ProviderTestResult(success=False, message=f"Unknown provider '{provider_key}'")
        result = adapter.test_connection()
    finally:
        if owns_http:
            http.close()

    log.info(
        "provider.ping provider=%s ok=%s latency_ms=%s",
        provider_key,
        result.success,
        result.latency_ms,
    )
    return result
