"""Shared test fixtures."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import pytest

from deno2nix.errors import MetadataLookupError
from deno2nix.fetch import MirrorDist

HEX_DIGEST = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
HEX_DIGEST_BASE64 = "47DEQpj8HBSa+/TImW+5JCeuQeRkm5NMpJWZG3hSuFU="

LockText = Callable[..., str]


@dataclass(slots=True)
class StubMirrorClient:
    """In-memory mirror keyed by (mirror package name, version)."""

    dists: dict[tuple[str, str], MirrorDist] = field(default_factory=dict)
    delays: dict[tuple[str, str], float] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)
    in_flight: int = 0
    max_in_flight: int = 0

    def add(self, package: str, version: str, *, tarball: str, integrity: str) -> None:
        self.dists[(package, version)] = MirrorDist(tarball=tarball, integrity=integrity)

    async def fetch_dist(self, package: str, version: str) -> MirrorDist:
        self.calls.append((package, version))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get((package, version), 0.01))
            dist = self.dists.get((package, version))
            if dist is None:
                raise MetadataLookupError(f"Failed to fetch metadata for {package}: 404")
            return dist
        finally:
            self.in_flight -= 1


@pytest.fixture
def stub_mirror() -> StubMirrorClient:
    return StubMirrorClient()


@pytest.fixture
def lock_text() -> LockText:
    """Build ``deno.lock`` v5 text from keyword sections."""

    def build(**sections: Any) -> str:
        payload: dict[str, Any] = {"version": "5", "specifiers": {}}
        payload.update(sections)
        return json.dumps(payload, indent=2)

    return build
