# providers/adapters/elko.py
from __future__ import annotations

import logging
import time
from typing import Any, List, Mapping, Optional

from providers.base import (
    BaseProvider,
    FetchProductsOptions,
    FetchProductsResult,
    NormalizedBrand,
    NormalizedCategory,
    NormalizedProduct,
)
from providers.exceptions import ProviderError
from providers.normalize import clean_attributes, first_positive_price, text_or_none, to_int

log = logging.getLogger(__name__)


class ElkoAdapter(BaseProvider):
    """
    ELKO B2B REST API (bearer token).

    The product list only carries base values; price and stock come from a
    per-product Availability call. That call is paced (short sleep every N
    products) and allowed to fail: the product then keeps its list values.

    credentials:
      - token: str     (ELKO_API_TOKEN)
      - base_url: str  (ELKO_API_BASE_URL, default https://roapi.elko.cloud/v3.0/)
      Optional:
      - api_timeout: int seconds (default 30)
    """

    key = "elko"
    name = "ELKO"
    currency = "EUR"
    required_credentials = {"token": "ELKO_API_TOKEN", "base_url": "ELKO_API_BASE_URL"}

    DEFAULT_TIMEOUT = 30
    PACE_EVERY = 10
    PACE_DELAY_S = 0.1

    # ---------- basic config ----------
    def _url(self, endpoint: str) -> str:
        return f"{str(self.credentials['base_url']).rstrip('/')}/{endpoint.lstrip('/')}"

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.credentials['token']}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def _get(self, endpoint: str) -> Any:
        self.ensure_configured()
        return self.http.get_json(
            self._url(endpoint),
            headers=self._headers(),
            timeout=int(self.credentials.get("api_timeout") or self.DEFAULT_TIMEOUT),
            label="ELKO API",
        )

    # ---------- contract ----------
    def _probe(self) -> str:
        cats = self._get("Catalogs/Categories")
        count = len(cats) if isinstance(cats, list) else "?"
        return f"Connected to ELKO API. {count} categories found."

    def fetch_brands(self) -> List[NormalizedBrand]:
        vendors = self._get("Catalogs/Vendors")
        if not isinstance(vendors, list):
            return []
        return [
            NormalizedBrand(external_id=str(v["code"]), name=str(v["name"]))
            for v in vendors
            if isinstance(v, Mapping) and v.get("code") and v.get("name")
        ]

    def fetch_categories(self) -> List[NormalizedCategory]:
        cats = self._get("Catalogs/Categories")
        if not isinstance(cats, list):
            return []
        return [
            NormalizedCategory(
                external_id=str(c["code"]),
                name=str(c["name"]),
                parent_external_id=text_or_none(c.get("parentCode")),
            )
            for c in cats
            if isinstance(c, Mapping) and c.get("code") and c.get("name")
        ]

    def fetch_products(self, options: Optional[FetchProductsOptions] = None) -> FetchProductsResult:
        # No change feed and no paging on ELKO's side: every call is the full list.
        items = self._get("Catalogs/Products")
        if not isinstance(items, list):
            return FetchProductsResult()

        products: List[NormalizedProduct] = []
        failures = 0
        for raw in items:
            if not isinstance(raw, Mapping):
                continue
            code = text_or_none(raw.get("code") or raw.get("elkoCode"))
            if not code:
                continue

            price, stock = raw.get("price"), raw.get("stock")
            availability = self._availability(code)
            if availability is None:
                failures += 1
            else:
                if availability.get("price") is not None:
                    price = availability["price"]
                if availability.get("stock") is not None:
                    stock = availability["stock"]

            products.append(map_product(raw, code=code, price=price, stock=stock))

            if len(products) % self.PACE_EVERY == 0:
                time.sleep(self.PACE_DELAY_S)

        if failures:
            log.warning("elko.availability_failed count=%s of=%s", failures, len(products))
        return FetchProductsResult(products=products, has_more=False, secondary_failures=failures)

    def _availability(self, code: str) -> Optional[Mapping[str, Any]]:
        """Secondary lookup; None means it failed and list values should be kept."""
        try:
            data = self._get(f"Catalogs/Products/{code}/Availability")
        except ProviderError as e:
            log.debug("elko.availability_failed code=%s err=%s", code, e)
            return None
        return data if isinstance(data, Mapping) else {}


# -----------------------------
# Helpers (pure functions)
# -----------------------------
def map_product(raw: Mapping[str, Any], *, code: str, price: Any, stock: Any) -> NormalizedProduct:
    qty = to_int(stock, 0)
    images = raw.get("images")
    return NormalizedProduct(
        external_id=code,
        sku=code,
        name=str(raw.get("name") or code),
        description=text_or_none(raw.get("description")),
        price=first_positive_price(price),
        currency=ElkoAdapter.currency,
        stock_qty=qty,
        in_stock=qty > 0,
        images=[str(u) for u in images if u] if isinstance(images, list) else [],
        brand_external_id=text_or_none(raw.get("vendorCode")),
        category_external_id=text_or_none(raw.get("categoryCode")),
        attributes=clean_attributes({"ean": raw.get("ean"), "weight": raw.get("weight")}),
        raw_json=dict(raw),
    )
