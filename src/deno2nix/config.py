"""Run configuration and network policy helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from urllib.parse import urlsplit

from deno2nix.errors import ConfigError, PolicyError

ConflictPolicy = Literal["ignore", "warn", "error"]
NetworkMode = Literal["online", "offline"]

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
DEFAULT_MIRROR_URL = "https://npm.jsr.io"


@dataclass(frozen=True, slots=True)
class Config:
    registry_url: str = DEFAULT_REGISTRY_URL
    mirror_url: str = DEFAULT_MIRROR_URL
    max_concurrency: int = 8
    request_timeout: float = 30.0
    deadline: float = 300.0
    network_mode: NetworkMode = "online"
    conflict_policy: ConflictPolicy = "ignore"

    @property
    def registry_host(self) -> str:
        return _host_of(self.registry_url)

    @property
    def mirror_host(self) -> str:
        return _host_of(self.mirror_url)

    def validate(self) -> Config:
        for field_name in ("registry_url", "mirror_url"):
            url = getattr(self, field_name)
            parts = urlsplit(url)
            if parts.scheme not in ("http", "https") or not parts.netloc:
                raise ConfigError(
                    f"Invalid `{field_name}` value.",
                    hint="Use an absolute http(s) URL such as https://registry.npmjs.org.",
                    context={"field": field_name, "value": url},
                )
        if self.max_concurrency < 1:
            raise ConfigError(
                "`max_concurrency` must be at least 1.",
                context={"value": str(self.max_concurrency)},
            )
        for field_name in ("request_timeout", "deadline"):
            value = getattr(self, field_name)
            if value <= 0:
                raise ConfigError(
                    f"`{field_name}` must be positive.",
                    context={"value": str(value)},
                )
        if self.conflict_policy not in ("ignore", "warn", "error"):
            raise ConfigError(
                "Unknown `conflict_policy` value.",
                context={"value": str(self.conflict_policy)},
            )
        return self


def ensure_network_allowed(*, config: Config, operation: str) -> None:
    if config.network_mode == "offline":
        raise PolicyError(
            "Network operations are disabled by configuration.",
            hint="Drop --offline to resolve JSR packages through the mirror.",
            context={"operation": operation},
        )


def _host_of(url: str) -> str:
    return urlsplit(url).netloc


__all__ = [
    "DEFAULT_MIRROR_URL",
    "DEFAULT_REGISTRY_URL",
    "Config",
    "ConflictPolicy",
    "NetworkMode",
    "ensure_network_allowed",
]
