# providers/base.py
from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from providers.exceptions import ProviderConfigurationError
from providers.http import HttpClient

# Cursor value that forces the full catalog endpoint even when updated_since is set.
FULL_SYNC_CURSOR = "full"


# -----------------------------
# Normalized model
# -----------------------------
@dataclass
class NormalizedBrand:
    external_id: str
    name: str


@dataclass
class NormalizedCategory:
    external_id: str
    name: str
    parent_external_id: Optional[str] = None


@dataclass
class NormalizedProduct:
    """
    Canonical product shape every adapter returns.

    `in_stock` is authoritative. `price` / `stock_qty` stay None when the feed did
    not report them this cycle. `partial` marks change-feed records that only
    carry a handful of fields (id, code, stock).
    """

    external_id: str
    name: str
    in_stock: bool = False
    sku: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    currency: Optional[str] = None
    stock_qty: Optional[int] = None
    url: Optional[str] = None
    images: List[str] = field(default_factory=list)
    brand_external_id: Optional[str] = None
    category_external_id: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    raw_json: Optional[Any] = None
    partial: bool = False


@dataclass
class FetchProductsOptions:
    cursor: Optional[str] = None
    updated_since: Optional[datetime] = None
    limit: Optional[int] = None

    @property
    def wants_delta(self) -> bool:
        return self.updated_since is not None and self.cursor != FULL_SYNC_CURSOR


@dataclass
class FetchProductsResult:
    products: List[NormalizedProduct] = field(default_factory=list)
    next_cursor: Optional[str] = None
    has_more: bool = False
    # secondary per-item lookups that failed and fell back to list data
    secondary_failures: int = 0


@dataclass
class ProviderTestResult:
    success: bool
    message: str
    latency_ms: int = 0


# -----------------------------
# Adapter contract
# -----------------------------
class BaseProvider(ABC):
    """
    Provider adapters implement a small capability set:
    - test_connection(): cheapest authenticated call, never raises.
    - fetch_brands() / fetch_categories(): flat lists of normalized entities.
    - fetch_products(options): one page of normalized products plus paging info.

    `required_credentials` maps credential keys to the configuration names an
    operator has to set; they are checked at first use, not at construction.
    """

    key: str = ""
    name: str = ""
    currency: str = "RON"
    required_credentials: Mapping[str, str] = {}

    def __init__(self, credentials: Mapping[str, Any], *, http: HttpClient):
        self.credentials: Dict[str, Any] = dict(credentials or {})
        self.http = http

    # ---------- configuration ----------
    def missing_credentials(self) -> List[str]:
        return [
            setting
            for cred_key, setting in self.required_credentials.items()
            if not str(self.credentials.get(cred_key) or "").strip()
        ]

    def ensure_configured(self) -> None:
        missing = self.missing_credentials()
        if missing:
            raise ProviderConfigurationError(
                f"{self.name or self.key}: missing required configuration: {', '.join(missing)}"
            )

    # ---------- health ----------
    def test_connection(self) -> ProviderTestResult:
        started = time.monotonic()
        try:
            self.ensure_configured()
            message = self._probe()
        except Exception as e:
            return ProviderTestResult(
                success=False,
                message=f"{type(e).__name__}: {e}",
                latency_ms=_elapsed_ms(started),
            )
        return ProviderTestResult(success=True, message=message, latency_ms=_elapsed_ms(started))

    @abstractmethod
    def _probe(self) -> str:
        """Run the cheapest authenticated call and return a human-readable summary."""
        raise NotImplementedError

    # ---------- catalog ----------
    @abstractmethod
    def fetch_brands(self) -> List[NormalizedBrand]:
        raise NotImplementedError

    @abstractmethod
    def fetch_categories(self) -> List[NormalizedCategory]:
        raise NotImplementedError

    @abstractmethod
    def fetch_products(self, options: Optional[FetchProductsOptions] = None) -> FetchProductsResult:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} key={self.key}>"


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
