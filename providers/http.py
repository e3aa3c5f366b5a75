# providers/http.py
from __future__ import annotations

import logging
import time
from typing import Any, Mapping, Optional

import requests
from django.conf import settings

from providers.exceptions import ProviderTransportError, RateLimitedError

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
USER_AGENT = "feedhub/1.0 (+catalog sync)"


class HttpClient:
    """
    Process-scoped HTTP handle shared by the adapters of one sync run.

    Owns a requests.Session; whoever creates it closes it (it is a context
    manager). Connection errors, timeouts and 5xx answers are retried with a
    linear backoff; 429 raises RateLimitedError straight away; any other non-2xx
    becomes ProviderTransportError carrying the status code.
    """

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        max_retries: Optional[int] = None,
        backoff_s: Optional[float] = None,
    ):
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)
        self.max_retries = max(
            1, int(max_retries if max_retries is not None else settings.HTTP_MAX_RETRIES)
        )
        self.backoff_s = float(backoff_s if backoff_s is not None else settings.HTTP_BACKOFF_S)

    # ---------- lifecycle ----------
    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ---------- requests ----------
    def get(
        self,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        label: str = "HTTP",
    ) -> requests.Response:
        """GET with retries. `label` names the call in errors/logs (URLs may embed keys)."""
        for attempt in range(1, self.max_retries + 1):
            try:
                resp = self.session.get(
                    url, headers=dict(headers or {}), params=params, timeout=timeout
                )
            except (requests.ConnectionError, requests.Timeout) as e:
                if attempt < self.max_retries:
                    log.warning(
                        "http.retry label=%s attempt=%s err=%s", label, attempt, type(e).__name__
                    )
                    self._sleep(attempt)
                    continue
                raise ProviderTransportError(f"{label} request failed: {e}") from e
            except requests.RequestException as e:
                raise ProviderTransportError(f"{label} request failed: {e}") from e

            if resp.status_code == 429:
                raise RateLimitedError(f"{label} rate limited (HTTP 429)", status_code=429)
            if resp.status_code >= 500 and attempt < self.max_retries:
                log.warning(
                    "http.retry label=%s attempt=%s status=%s", label, attempt, resp.status_code
                )
                self._sleep(attempt)
                continue
            if not resp.ok:
                raise _decorate_http_error(label, resp)
            return resp

        # unreachable: the loop either returns or raises
        raise ProviderTransportError(f"{label} request failed")

    def get_json(self, url: str, **kwargs) -> Any:
        label = kwargs.get("label", "HTTP")
        resp = self.get(url, **kwargs)
        try:
            return resp.json()
        except ValueError as e:
            raise ProviderTransportError(
                f"{label} returned malformed JSON", status_code=resp.status_code
            ) from e

    def get_text(self, url: str, *, encoding: str = "utf-8-sig", **kwargs) -> str:
        resp = self.get(url, **kwargs)
        return resp.content.decode(encoding, errors="replace")

    def _sleep(self, attempt: int) -> None:
        if self.backoff_s > 0:
            time.sleep(self.backoff_s * attempt)


def _decorate_http_error(label: str, resp: requests.Response) -> ProviderTransportError:
    body = (resp.text or "").strip().replace("\n", " ")
    if len(body) > 300:
        body = body[:300] + "..."
    return ProviderTransportError(
        f"{label} HTTP {resp.status_code} {resp.reason or ''}".rstrip()
        + (f" :: {body}" if body else ""),
        status_code=resp.status_code,
    )
