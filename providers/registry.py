# providers/registry.py
"""
Provider key -> adapter factory. The only place that knows which distributors exist.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional

from django.conf import settings

from providers.adapters import AlsoAdapter, ElkoAdapter, IngramAdapter, NodAdapter
from providers.base import BaseProvider
from providers.http import HttpClient

AdapterFactory = Callable[..., BaseProvider]

_FACTORIES: Dict[str, AdapterFactory] = {
    NodAdapter.key: NodAdapter,
    ElkoAdapter.key: ElkoAdapter,
    IngramAdapter.key: IngramAdapter,
    AlsoAdapter.key: AlsoAdapter,
}


def list_keys() -> List[str]:
    return sorted(_FACTORIES)


def credentials_for(key: str, overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Configured credentials for `key`, with non-empty overrides layered on top."""
    creds = dict(getattr(settings, "PROVIDER_CREDENTIALS", {}).get(key) or {})
    for name, value in (overrides or {}).items():
        if value not in (None, ""):
            creds[name] = value
    return creds


def get(
    key: str,
    *,
    http: HttpClient,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Optional[BaseProvider]:
    """
    Fresh adapter for `key` bound to the caller's HTTP client, or None when no
    adapter is registered under it.
    """
    factory = _FACTORIES.get((key or "").lower())
    if factory is None:
        return None
    return factory(credentials=credentials_for(key.lower(), overrides), http=http)
