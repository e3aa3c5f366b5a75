# providers/parsers/signing.py
from __future__ import annotations

import hashlib
import hmac
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Dict, Optional


def rfc1123(moment: Optional[datetime] = None) -> str:
    """'Mon, 19 Oct 2026 10:00:00 GMT'; naive datetimes are taken as UTC."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


def compute_signature(
    method: str, query_string: str, identity: str, secret: str, timestamp: str
) -> str:
    message = f"{method.upper()}{query_string.lstrip('?')}{identity}{timestamp}"
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha1).hexdigest()


def build_signed_headers(
    method: str,
    query_string: str,
    identity: str,
    secret: str,
    *,
    timestamp: Optional[str] = None,
    identity_header: str = "X-NodWS-User",
    signature_header: str = "X-NodWS-Auth",
) -> Dict[str, str]:
    """
    Headers for an HMAC-signed request. The timestamp is part of the signed
    message, so call this once per request.
    """
    timestamp = timestamp or rfc1123()
    return {
        "Date": timestamp,
        identity_header: identity,
        signature_header: compute_signature(method, query_string, identity, secret, timestamp),
    }
