# providers/normalize.py
"""Pure coercion helpers shared by the adapters."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional

PRICE_QUANT = Decimal("0.01")
# Largest amount a price column (12 digits, 2 decimals) can hold.
PRICE_MAX = Decimal("9999999999.99")


def to_decimal(value: Any) -> Optional[Decimal]:
    """'12,50' / 12.5 / '12.50' -> Decimal('12.50'); junk or out of range -> None."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip().replace(",", ".", 1)
    if not text or text.lower() in {"nan", "null", "none"}:
        return None
    try:
        number = Decimal(text)
        if not number.is_finite():
            return None
        number = number.quantize(PRICE_QUANT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None
    if abs(number) > PRICE_MAX:
        return None
    return number


def first_positive_price(*candidates: Any) -> Optional[Decimal]:
    """First candidate that parses to a positive amount; zero/missing means no price."""
    for candidate in candidates:
        price = to_decimal(candidate)
        if price is not None and price > 0:
            return price
    return None


def to_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(Decimal(str(value).strip().replace(",", ".", 1)))
    except (InvalidOperation, ValueError, OverflowError):
        return default


def first_present(mapping: Mapping[str, Any], *keys: str) -> Any:
    """Value of the first key that is present and not blank."""
    for key in keys:
        value = mapping.get(key)
        if value is not None and str(value).strip() != "":
            return value
    return None


def as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def dedupe(values: Iterable[str]) -> List[str]:
    seen = set()
    out = []
    for v in values:
        if v and v not in seen:
            seen.add(v)
            out.append(v)
    return out


def clean_attributes(values: Mapping[str, Any]) -> Dict[str, str]:
    """Drop empty values and stringify the rest."""
    out: Dict[str, str] = {}
    for key, value in values.items():
        if value is None:
            continue
        text = str(value).strip()
        if text:
            out[key] = text
    return out


def text_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
