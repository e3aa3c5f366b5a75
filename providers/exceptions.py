# providers/exceptions.py
from __future__ import annotations

from typing import Optional


class ProviderError(Exception):
    """Base class for everything a provider integration raises on purpose."""


class ProviderConfigurationError(ProviderError):
    """Missing credential or other configuration; raised before any job is created."""


class ProviderNotEligible(ProviderConfigurationError):
    """Unknown provider key, disabled provider, or no adapter registered for it."""


class TransportUnavailableError(ProviderConfigurationError):
    """An optional transport library (e.g. paramiko for SFTP) is not installed."""


class ProviderTransportError(ProviderError):
    """Network failure, non-2xx response or malformed payload from a distributor."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitedError(ProviderTransportError):
    """Provider returned/indicated a rate-limit (HTTP 429)."""
