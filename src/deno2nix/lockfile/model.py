"""Typed model for ``deno.lock`` (schema version 5)."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

SUPPORTED_LOCK_VERSION = "5"


@dataclass(frozen=True, slots=True)
class NpmPackage:
    integrity: str
    dependencies: tuple[str, ...] = ()
    optional_dependencies: tuple[str, ...] = ()
    os: tuple[str, ...] = ()
    cpu: tuple[str, ...] = ()
    deprecated: bool = False
    bin: bool = False
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class JsrPackage:
    integrity: str
    dependencies: tuple[str, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class LockManifest:
    version: str
    specifiers: Mapping[str, str] = field(default_factory=dict)
    npm: Mapping[str, NpmPackage] = field(default_factory=dict)
    jsr: Mapping[str, JsrPackage] = field(default_factory=dict)
    remote: Mapping[str, str] = field(default_factory=dict)
    workspace: Mapping[str, Any] = field(default_factory=dict)


__all__ = ["SUPPORTED_LOCK_VERSION", "JsrPackage", "LockManifest", "NpmPackage"]
