# providers/adapters/also.py
from __future__ import annotations

import importlib
import logging
import socket
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Optional

from providers.base import (
    BaseProvider,
    FetchProductsOptions,
    FetchProductsResult,
    NormalizedBrand,
    NormalizedCategory,
    NormalizedProduct,
)
from providers.exceptions import ProviderTransportError, TransportUnavailableError
from providers.normalize import PRICE_QUANT, clean_attributes, dedupe, to_decimal
from providers.parsers.segmented import parse_row

log = logging.getLogger(__name__)

# Feed prices include 19% Romanian VAT; we store net prices.
VAT_FACTOR = Decimal("1.19")


def load_paramiko() -> Any:
    """SFTP support is an optional extra; fail before touching the network without it."""
    try:
        return importlib.import_module("paramiko")
    except ImportError as e:
        raise TransportUnavailableError(
            "ALSO feed needs the SFTP transport library 'paramiko', which is not installed. "
            "Install it with: pip install 'feedhub[sftp]'"
        ) from e


class AlsoAdapter(BaseProvider):
    """
    ALSO price list delivered over SFTP (pricelist-1.csv).

    Each line holds tab separated super-columns, each one `;` delimited:
      A: ProductID;Code;;Brand;EAN;Name;;Price;;cat1...
      B: cat2;cat3
      C: cat4;;qty

    credentials:
      - host, port      (ALSO_FTP_HOST / ALSO_FTP_PORT, default paco.also.com:22)
      - username        (ALSO_FTP_USER)
      - password        (ALSO_FTP_PASSWORD)
      - filename        (ALSO_FEED_FILENAME, default pricelist-1.csv)
      Optional:
      - connect_timeout: int seconds (default 30)
    """

    key = "also"
    name = "ALSO"
    currency = "RON"
    required_credentials = {
        "host": "ALSO_FTP_HOST",
        "username": "ALSO_FTP_USER",
        "password": "ALSO_FTP_PASSWORD",
    }

    DEFAULT_PORT = 22
    DEFAULT_FILENAME = "pricelist-1.csv"
    DEFAULT_CONNECT_TIMEOUT = 30

    def ensure_configured(self) -> None:
        super().ensure_configured()
        load_paramiko()

    # ---------- transport ----------
    def _download(self) -> str:
        self.ensure_configured()
        paramiko = load_paramiko()

        host = str(self.credentials["host"])
        port = int(self.credentials.get("port") or self.DEFAULT_PORT)
        filename = str(self.credentials.get("filename") or self.DEFAULT_FILENAME)
        timeout = int(self.credentials.get("connect_timeout") or self.DEFAULT_CONNECT_TIMEOUT)

        transport = None
        try:
            sock = socket.create_connection((host, port), timeout=timeout)
            transport = paramiko.Transport(sock)
            transport.banner_timeout = timeout
            transport.auth_timeout = timeout
            transport.connect(
                username=str(self.credentials["username"]),
                password=str(self.credentials["password"]),
            )
            sftp = paramiko.SFTPClient.from_transport(transport)
            with sftp.open(filename, "rb") as fh:
                payload = fh.read()
        except (paramiko.SSHException, OSError, EOFError) as e:
            raise ProviderTransportError(
                f"ALSO feed unreachable or authentication failed ({host}:{port}): {e}"
            ) from e
        finally:
            if transport is not None:
                transport.close()

        log.info("also.download file=%s bytes=%s", filename, len(payload))
        return payload.decode("utf-8", errors="replace")

    # ---------- contract ----------
    def _probe(self) -> str:
        text = self._download()
        lines = sum(1 for ln in text.splitlines() if ln.strip())
        return f"Connected to ALSO SFTP. Feed has ~{lines} lines."

    def fetch_brands(self) -> List[NormalizedBrand]:
        return []

    def fetch_categories(self) -> List[NormalizedCategory]:
        return []

    def fetch_products(self, options: Optional[FetchProductsOptions] = None) -> FetchProductsResult:
        products = parse_feed(self._download())
        return FetchProductsResult(products=products, has_more=False)


# -----------------------------
# Helpers (pure functions)
# -----------------------------
def parse_feed(text: str) -> List[NormalizedProduct]:
    products = []
    for line in text.splitlines():
        product = map_line(line)
        if product is not None:
            products.append(product)
    return products


def map_line(line: str) -> Optional[NormalizedProduct]:
    segments = parse_row(line)
    if segments is None:
        return None
    a = segments[0]
    b = segments[1] if len(segments) > 1 else []
    c = segments[2] if len(segments) > 2 else []

    def col(i: int) -> str:
        return a[i] if i < len(a) else ""

    product_id = col(0)
    gross = to_decimal(col(7))
    if gross is not None and gross <= 0:
        gross = None

    categories = dedupe(
        [f for f in a[9:] if f]
        + [f for f in b if f and not f.isdigit()]
        + [f for f in c if f and not f.isdigit()]
    )

    return NormalizedProduct(
        external_id=product_id,
        sku=col(1) or product_id,
        name=col(5) or f"Product {product_id}",
        price=net_price(gross),
        currency=AlsoAdapter.currency,
        stock_qty=None,  # the price list has no stock column
        in_stock=gross is not None,
        attributes=clean_attributes(
            {
                "ean": col(4),
                "brand": col(3),
                "main_category": categories[0] if categories else None,
                "sub_category": categories[1] if len(categories) > 1 else None,
                "price_with_vat": gross,
            }
        ),
        raw_json={"segments": segments},
    )


def net_price(gross: Optional[Decimal]) -> Optional[Decimal]:
    if gross is None:
        return None
    return (gross / VAT_FACTOR).quantize(PRICE_QUANT, rounding=ROUND_HALF_UP)
