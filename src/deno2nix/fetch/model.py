"""Mirror lookup result models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MirrorDist:
    tarball: str
    integrity: str


__all__ = ["MirrorDist"]
