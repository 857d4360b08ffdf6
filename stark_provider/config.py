"""
Provider configuration.

A provider talks to two endpoints derived from one root:

    feeder_gateway_url = {base_url}/feeder_gateway   (reads)
    gateway_url        = {base_url}/gateway          (writes)

Either endpoint may be given explicitly; the rest are derived. All URLs
are validated at construction and stored without a trailing slash.

Environment variables (read by ``ProviderConfig.from_env``):
    STARK_PROVIDER_NETWORK             named network (default goerli-alpha)
    STARK_PROVIDER_BASE_URL            overrides the network's base URL
    STARK_PROVIDER_FEEDER_GATEWAY_URL  overrides the read endpoint
    STARK_PROVIDER_GATEWAY_URL         overrides the write endpoint
    STARK_PROVIDER_TIMEOUT             HTTP timeout in seconds
    STARK_PROVIDER_RETRY_INTERVAL      default poll interval in seconds
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

import httpx

NETWORKS: dict[str, str] = {
    "mainnet-alpha": "https://alpha-mainnet.starknet.io",
    "goerli-alpha": "https://alpha4.starknet.io",
}
DEFAULT_NETWORK = "goerli-alpha"

DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRY_INTERVAL = 8.0

FEEDER_GATEWAY_PATH = "feeder_gateway"
GATEWAY_PATH = "gateway"

_ENV_PREFIX = "STARK_PROVIDER_"


def _normalize_url(value: str | None, name: str) -> str:
    if value is None or not value.strip():
        raise ValueError(f"{name} must be non-empty")
    url = value.strip().rstrip("/")
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise ValueError(f"{name} is not a valid URL: {exc}") from exc
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ValueError(f"{name} must be an absolute http(s) URL, got: {value!r}")
    return url


def base_url_for_network(network: str) -> str:
    try:
        return NETWORKS[network]
    except KeyError:
        known = ", ".join(sorted(NETWORKS))
        raise ValueError(f"unknown network {network!r} (known: {known})") from None


@dataclass(frozen=True)
class ProviderConfig:
    """Endpoints and timing for one provider.

    Attributes:
        base_url: Root URL of the sequencer.
        feeder_gateway_url: Read endpoint.
        gateway_url: Write endpoint.
        timeout: HTTP request timeout in seconds.
        retry_interval: Default delay between status polls, in seconds.
    """

    base_url: str
    feeder_gateway_url: str
    gateway_url: str
    timeout: float = DEFAULT_TIMEOUT
    retry_interval: float = DEFAULT_RETRY_INTERVAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", _normalize_url(self.base_url, "base_url"))
        object.__setattr__(
            self,
            "feeder_gateway_url",
            _normalize_url(self.feeder_gateway_url, "feeder_gateway_url"),
        )
        object.__setattr__(
            self, "gateway_url", _normalize_url(self.gateway_url, "gateway_url")
        )
        if self.feeder_gateway_url == self.gateway_url:
            raise ValueError("feeder_gateway_url and gateway_url must differ")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be > 0, got: {self.timeout}")
        if self.retry_interval < 0:
            raise ValueError(f"retry_interval must be >= 0, got: {self.retry_interval}")

    @classmethod
    def from_base_url(
        cls,
        base_url: str,
        *,
        feeder_gateway_url: str | None = None,
        gateway_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        retry_interval: float = DEFAULT_RETRY_INTERVAL,
    ) -> ProviderConfig:
        """Derive missing endpoints from base_url."""
        root = _normalize_url(base_url, "base_url")
        return cls(
            base_url=root,
            feeder_gateway_url=feeder_gateway_url or f"{root}/{FEEDER_GATEWAY_PATH}",
            gateway_url=gateway_url or f"{root}/{GATEWAY_PATH}",
            timeout=timeout,
            retry_interval=retry_interval,
        )

    @classmethod
    def for_network(cls, network: str = DEFAULT_NETWORK, **kwargs: float) -> ProviderConfig:
        return cls.from_base_url(base_url_for_network(network), **kwargs)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ProviderConfig:
        """Build a config from STARK_PROVIDER_* variables."""
        env = os.environ if environ is None else environ

        def get(key: str) -> str | None:
            value = env.get(_ENV_PREFIX + key)
            return value if value else None

        base_url = get("BASE_URL") or base_url_for_network(
            get("NETWORK") or DEFAULT_NETWORK
        )
        return cls.from_base_url(
            base_url,
            feeder_gateway_url=get("FEEDER_GATEWAY_URL"),
            gateway_url=get("GATEWAY_URL"),
            timeout=float(get("TIMEOUT") or DEFAULT_TIMEOUT),
            retry_interval=float(get("RETRY_INTERVAL") or DEFAULT_RETRY_INTERVAL),
        )
