# providers/adapters/nod.py
from __future__ import annotations

import logging
from datetime import timezone
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import urlencode

from providers.base import (
    BaseProvider,
    FetchProductsOptions,
    FetchProductsResult,
    NormalizedBrand,
    NormalizedCategory,
    NormalizedProduct,
)
from providers.exceptions import ProviderTransportError
from providers.normalize import (
    as_list,
    clean_attributes,
    dedupe,
    first_positive_price,
    first_present,
    text_or_none,
    to_decimal,
    to_int,
)
from providers.parsers.signing import build_signed_headers

log = logging.getLogger(__name__)

ParamValue = Union[str, int, Sequence[Union[str, int]]]

# attribute name -> NOD field
PRODUCT_ATTRIBUTES = (
    ("ean", "ean"),
    ("code", "code"),
    ("warranty_months", "warranty"),
    ("warranty_type", "warranty_type"),
    ("vat_percent", "vat_percent"),
    ("min_quantity", "min_quantity"),
    ("fault_code", "fault_code"),
    ("defect", "defect"),
    ("original_currency", "currency"),
)
# attribute name -> NOD price field (normalized to a plain decimal string)
PRICE_ATTRIBUTES = (
    ("catalog_price_eur", "catalog_price"),
    ("catalog_price_ron", "ron_catalog_price"),
    ("price_original", "price"),
)

# promo in lei first, then list in lei, then whatever the account currency is
PRICE_PRECEDENCE = ("ron_promo_price", "ron_price", "promo_price", "price")


class NodAdapter(BaseProvider):
    """
    NOD B2B REST API (https://api.b2b.nod.ro).

    Every request is HMAC-SHA1 signed over METHOD + query string + user + date.

    credentials:
      - api_user: str   (NOD_API_USER)
      - api_key: str    (NOD_API_KEY)
      Optional:
      - api_base: str   (default https://api.b2b.nod.ro)
      - api_timeout: int seconds (default 180; the full feed is large)
    """

    key = "nod"
    name = "NOD"
    currency = "RON"
    required_credentials = {"api_user": "NOD_API_USER", "api_key": "NOD_API_KEY"}

    BASE_URL = "https://api.b2b.nod.ro"
    DEFAULT_TIMEOUT = 180

    # ---------- basic config ----------
    def _base(self) -> str:
        return (self.credentials.get("api_base") or self.BASE_URL).rstrip("/")

    def _timeout(self) -> int:
        return int(self.credentials.get("api_timeout") or self.DEFAULT_TIMEOUT)

    def _request(self, path: str, params: Optional[Mapping[str, ParamValue]] = None) -> Any:
        self.ensure_configured()
        query = encode_query(params or {})
        url = f"{self._base()}{path}" + (f"?{query}" if query else "")
        headers = build_signed_headers(
            "GET",
            query,
            str(self.credentials["api_user"]),
            str(self.credentials["api_key"]),
        )
        headers["X-NodWS-Accept"] = "json"
        return self.http.get_json(url, headers=headers, timeout=self._timeout(), label="NOD API")

    # ---------- contract ----------
    def _probe(self) -> str:
        categories = self.fetch_categories()
        return f"Connected to NOD API. {len(categories)} categories available."

    def fetch_categories(self) -> List[NormalizedCategory]:
        data = self._request("/product-categories/")
        return flatten_categories(extract_category_list(data))

    def fetch_brands(self) -> List[NormalizedBrand]:
        data = self._request(
            "/manufacturers/",
            {"count": 10000, "order_by": "name", "order_direction": "asc"},
        )
        brands = []
        for m in extract_list(data, "manufacturers", "result"):
            if not isinstance(m, Mapping) or m.get("id") in (None, "") or not m.get("name"):
                continue
            brands.append(NormalizedBrand(external_id=str(m["id"]), name=str(m["name"])))
        return brands

    def fetch_products(self, options: Optional[FetchProductsOptions] = None) -> FetchProductsResult:
        options = options or FetchProductsOptions()
        if options.wants_delta:
            return self._fetch_stock_changes(options)

        data = self._request(
            "/products/full-feed",
            {
                "format": "json",
                "include_inactive": 0,
                "show_extended_info": 1,
                "show_product_properties": 0,
            },
        )
        products = [map_product(raw) for raw in extract_products(data)]
        log.info("nod.full_feed products=%s", len(products))
        return FetchProductsResult(products=products, has_more=False)

    def _fetch_stock_changes(self, options: FetchProductsOptions) -> FetchProductsResult:
        since = options.updated_since.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        try:
            data = self._request("/products/stock-changes", {"changedfrom": since})
        except ProviderTransportError as e:
            # NOD answers 404 when nothing changed in the window
            if e.status_code == 404:
                log.info("nod.stock_changes none since=%s", since)
                return FetchProductsResult(products=[], has_more=False)
            raise

        records = data if isinstance(data, list) else []
        if isinstance(data, Mapping):
            records = as_list(data.get("result") or data.get("results") or [])

        products = []
        for raw in records:
            if not isinstance(raw, Mapping) or raw.get("id") in (None, ""):
                continue
            stock = to_int(first_present(raw, "stock_value", "stock"), 0)
            code = text_or_none(raw.get("code"))
            products.append(
                NormalizedProduct(
                    external_id=str(raw["id"]),
                    sku=code,
                    name=code or str(raw["id"]),
                    in_stock=stock > 0,
                    stock_qty=stock,
                    partial=True,
                )
            )
        log.info("nod.stock_changes since=%s products=%s", since, len(products))
        return FetchProductsResult(products=products, has_more=False)


# -----------------------------
# Helpers (pure functions)
# -----------------------------
def encode_query(params: Mapping[str, ParamValue]) -> str:
    """URL-encode params; list values repeat as `name[]` (PHP style)."""
    pairs: List[Tuple[str, str]] = []
    for key, value in params.items():
        if isinstance(value, (list, tuple)):
            pairs.extend((f"{key}[]", str(v)) for v in value)
        elif value is not None:
            pairs.append((key, str(value)))
    return urlencode(pairs)


def extract_list(data: Any, *keys: str) -> List[Any]:
    if isinstance(data, list):
        return data
    if isinstance(data, Mapping):
        for key in keys:
            value = data.get(key)
            if isinstance(value, list):
                return value
            if isinstance(value, Mapping):
                return [value]
    return []


def extract_category_list(data: Any) -> List[Any]:
    return extract_list(data, "product_categories", "categories", "result")


def extract_products(data: Any) -> List[Mapping[str, Any]]:
    """
    Shape rules, in order:
      [..] | {products: [..]} | {result: [..]} | {result: {products: [..]}} | {id|code: ..}
    """
    if isinstance(data, list):
        return _mappings(data)
    if not isinstance(data, Mapping):
        return []
    if data.get("products"):
        return _mappings(data["products"])
    result = data.get("result")
    if isinstance(result, list):
        return _mappings(result)
    if isinstance(result, Mapping) and result.get("products"):
        return _mappings(result["products"])
    if data.get("id") or data.get("code"):
        return [data]
    return []


def flatten_categories(
    nodes: List[Any], parent_id: Optional[str] = None
) -> List[NormalizedCategory]:
    """Tree -> flat list. `children` may be a list, one object, or {children: obj|list}."""
    out: List[NormalizedCategory] = []
    for node in nodes:
        if not isinstance(node, Mapping) or node.get("id") in (None, ""):
            continue
        ext_id = str(node["id"])
        parent = _id_or_none(node.get("parent_id")) or parent_id
        out.append(
            NormalizedCategory(
                external_id=ext_id,
                name=str(node.get("name") or node.get("title") or ext_id),
                parent_external_id=parent,
            )
        )
        children = node.get("children")
        if isinstance(children, Mapping) and "children" in children:
            children = children["children"]
        if children:
            out.extend(flatten_categories(as_list(children), ext_id))
    return out


def extract_images(raw: Mapping[str, Any]) -> List[str]:
    images: List[str] = []
    value = raw.get("images")
    if isinstance(value, str):
        images.extend(
            u.strip() for u in value.split(",") if u.strip() and u.strip().lower() != "nan"
        )

    pictures = raw.get("pictures")
    if isinstance(pictures, Mapping):
        pictures = pictures.get("picture")
    for pic in as_list(pictures):
        if not isinstance(pic, Mapping):
            continue
        url = pic.get("url_overlay_picture") or pic.get("url_thumbnail_picture")
        if url:
            images.append(str(url))
    return dedupe(images)


def map_product(raw: Mapping[str, Any]) -> NormalizedProduct:
    ext_id = str(raw.get("id") or raw.get("code") or "")
    stock = to_int(first_present(raw, "stock_value", "stock"), 0)
    return NormalizedProduct(
        external_id=ext_id,
        sku=text_or_none(raw.get("code") or raw.get("original_code")),
        name=str(raw.get("title") or raw.get("name") or f"NOD-{ext_id}"),
        description=text_or_none(raw.get("description")),
        price=first_positive_price(*(raw.get(k) for k in PRICE_PRECEDENCE)),
        currency=NodAdapter.currency,
        stock_qty=stock,
        in_stock=stock > 0,
        url=text_or_none(raw.get("url")),
        images=extract_images(raw),
        brand_external_id=_id_or_none(raw.get("manufacturer_id")),
        category_external_id=_id_or_none(raw.get("product_category_id")),
        attributes=map_attributes(raw),
        raw_json=dict(raw),
    )


def _id_or_none(value: Any) -> Optional[str]:
    if value in (None, "", 0, "0"):
        return None
    return str(value)


def map_attributes(raw: Mapping[str, Any]) -> dict:
    attrs = {name: raw.get(source) for name, source in PRODUCT_ATTRIBUTES}
    for name, source in PRICE_ATTRIBUTES:
        amount = to_decimal(raw.get(source))
        attrs[name] = str(amount) if amount else None
    if raw.get("has_resealed") and str(raw.get("has_resealed")) not in {"0", "false"}:
        attrs["has_resealed"] = "1"
    return clean_attributes(attrs)


def _mappings(value: Any) -> List[Mapping[str, Any]]:
    return [p for p in as_list(value) if isinstance(p, Mapping)]
