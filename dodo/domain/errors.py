"""Error taxonomy shared by gateways, storage adapters, and the generation pipelines."""

from __future__ import annotations


class DodoError(RuntimeError):
    """Base class for every error raised by the lullaby backend."""


class ValidationError(DodoError):
    """Raised when client input is missing or out of bounds."""


class ProviderError(DodoError):
    """Raised when an external provider call does not produce a usable result."""

    def __init__(
        self,
        provider: str,
        raw_message: str,
        *,
        status_code: int | None = None,
    ) -> None:
        self.provider = provider
        self.raw_message = raw_message
        self.status_code = status_code
        prefix = f"[{provider}]"
        if status_code is not None:
            prefix = f"{prefix} [HTTP {status_code}]"
        super().__init__(f"{prefix} {raw_message}")


class ProviderUnavailable(ProviderError):
    """Network, DNS, timeout, or provider-side 5xx failure."""


class ProviderRejected(ProviderError):
    """The provider answered with a structured error (quota, invalid audio, ...)."""


class InvalidRequest(ProviderError):
    """The request was refused locally before reaching the provider."""


class EndpointNotFound(ProviderRejected):
    """Every candidate endpoint path answered 404."""


class PollingExhausted(DodoError):
    """A provider job never reached a terminal state within the polling budget."""

    def __init__(self, job_id: str, message: str) -> None:
        self.job_id = job_id
        super().__init__(message)


class StorageError(DodoError):
    """Raised when record or blob persistence fails."""


class FallbackUnavailable(DodoError):
    """Neither a bundled fallback asset nor a fallback URL is usable."""


__all__ = [
    "DodoError",
    "ValidationError",
    "ProviderError",
    "ProviderUnavailable",
    "ProviderRejected",
    "InvalidRequest",
    "EndpointNotFound",
    "PollingExhausted",
    "StorageError",
    "FallbackUnavailable",
]
