"""Package key parsing for ``deno.lock`` sections."""

from __future__ import annotations

import re
from dataclasses import dataclass

# "<name>@<version>[_<peer>...]", name optionally "@scope/pkg".
NPM_KEY_PATTERN = re.compile(r"^(@?[^@]+)@([^_]+)")
# "@<scope>/<name>@<version>"
JSR_KEY_PATTERN = re.compile(r"^@([^/]+)/([^@]+)@(.+)$")


@dataclass(frozen=True, slots=True)
class NpmKey:
    name: str
    version: str

    @property
    def scope(self) -> str | None:
        if not self.name.startswith("@"):
            return None
        return self.name[1:].split("/", 1)[0]

    @property
    def bare_name(self) -> str:
        """Package name without its scope."""
        if self.name.startswith("@") and "/" in self.name:
            return self.name.split("/", 1)[1]
        return self.name


@dataclass(frozen=True, slots=True)
class JsrKey:
    scope: str
    name: str
    version: str

    @property
    def full_name(self) -> str:
        return f"@{self.scope}/{self.name}"

    @property
    def mirror_name(self) -> str:
        """Package name used by the npm compatibility mirror."""
        return f"@jsr/{self.scope}__{self.name}"


def parse_npm_key(key: str) -> NpmKey | None:
    match = NPM_KEY_PATTERN.match(key)
    if match is None:
        return None
    return NpmKey(name=match.group(1), version=match.group(2))


def parse_jsr_key(key: str) -> JsrKey | None:
    match = JSR_KEY_PATTERN.match(key)
    if match is None:
        return None
    return JsrKey(scope=match.group(1), name=match.group(2), version=match.group(3))


__all__ = ["JsrKey", "NpmKey", "parse_jsr_key", "parse_npm_key"]
