# providers/adapters/ingram.py
from __future__ import annotations

import logging
from typing import List, Mapping, Optional

from providers.base import (
    BaseProvider,
    FetchProductsOptions,
    FetchProductsResult,
    NormalizedBrand,
    NormalizedCategory,
    NormalizedProduct,
)
from providers.exceptions import ProviderTransportError
from providers.normalize import clean_attributes, first_positive_price, first_present, to_int
from providers.parsers.delimited import parse_table

log = logging.getLogger(__name__)


class IngramAdapter(BaseProvider):
    """
    Ingram Micro 24 hourly availability feed: a CSV download keyed by the API
    key in the URL path. No brand/category endpoints; brand and category names
    ride along as product attributes.

    credentials:
      - api_key: str   (IM_API_KEY)
      Optional:
      - api_base: str  (default https://www.ingrammicro24.com)
      - api_timeout: int seconds (default 120)
    """

    key = "ingram"
    name = "Ingram Micro 24"
    currency = "EUR"
    required_credentials = {"api_key": "IM_API_KEY"}

    BASE_URL = "https://www.ingrammicro24.com"
    DEFAULT_TIMEOUT = 120

    def _feed_url(self) -> str:
        base = (self.credentials.get("api_base") or self.BASE_URL).rstrip("/")
        return f"{base}/ro/api/availability/{self.credentials['api_key']}/"

    def _download(self) -> str:
        self.ensure_configured()
        # label only: the URL embeds the API key
        return self.http.get_text(
            self._feed_url(),
            timeout=int(self.credentials.get("api_timeout") or self.DEFAULT_TIMEOUT),
            label="Ingram availability feed",
        )

    # ---------- contract ----------
    def _probe(self) -> str:
        preview = self._download()[:200]
        if "," not in preview and ";" not in preview:
            raise ProviderTransportError(
                "Ingram returned an unexpected response, API key may be invalid"
            )
        return "Connected to Ingram Micro 24. Availability feed reachable."

    def fetch_brands(self) -> List[NormalizedBrand]:
        return []

    def fetch_categories(self) -> List[NormalizedCategory]:
        return []

    def fetch_products(self, options: Optional[FetchProductsOptions] = None) -> FetchProductsResult:
        table = parse_table(self._download())
        products = [p for p in (map_row(row) for row in table.rows) if p is not None]
        log.info(
            "ingram.feed rows=%s products=%s delimiter=%r",
            len(table.rows),
            len(products),
            table.delimiter,
        )
        return FetchProductsResult(products=products, has_more=False)


# -----------------------------
# Helpers (pure functions)
# -----------------------------
def map_row(row: Mapping[str, str]) -> Optional[NormalizedProduct]:
    external_id = first_present(row, "p_id", "ImSKU", "p_pn", "VPN")
    if not external_id:
        return None
    sku = first_present(row, "p_pn", "VPN", "p_id")

    price = first_positive_price(
        first_present(row, "FinalPrice", "finalPrice"),
        first_present(row, "price", "StdPrice"),
        first_present(row, "l_price", "ListPrice"),
    )
    local_free = to_int(first_present(row, "stockFree", "FreeOnStock"), 0)
    central = to_int(first_present(row, "imStock", "CentralStock"), 0)
    stock = local_free + central

    return NormalizedProduct(
        external_id=str(external_id),
        sku=sku,
        name=str(first_present(row, "p_name", "Name") or sku or external_id),
        price=price,
        currency=IngramAdapter.currency,
        stock_qty=stock,
        in_stock=stock > 0,
        attributes=clean_attributes(
            {
                "ean": first_present(row, "eancode", "EANCode"),
                "brand": first_present(row, "manufacturer_name", "Brand"),
                "category": first_present(row, "category_name", "Category"),
                "local_stock": local_free,
                "central_stock": central,
            }
        ),
        raw_json=dict(row),
    )
