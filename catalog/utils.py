# catalog/utils.py
from __future__ import annotations

from typing import Any

from django.db.models import Model
from django.utils.text import slugify

SLUG_MAX_LENGTH = 100


def slugify_unique(
    model_cls: type[Model], value: str, slug_field: str = "slug", **scope: Any
) -> str:
    """
    Create a slug for `model_cls` from `value` that is unique within `scope`
    (e.g. provider=...), appending -2, -3, ... if needed.
    """
    base = (slugify(value) or "item")[:SLUG_MAX_LENGTH].strip("-") or "item"
    slug = base
    i = 2
    while model_cls.objects.filter(**scope, **{slug_field: slug}).exists():
        suffix = f"-{i}"
        slug = f"{base[: SLUG_MAX_LENGTH - len(suffix)]}{suffix}"
        i += 1
    return slug
