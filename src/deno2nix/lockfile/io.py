"""Lock manifest parser and reader."""

from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import Any

from deno2nix.errors import FormatError, ManifestIOError
from deno2nix.lockfile.model import (
    SUPPORTED_LOCK_VERSION,
    JsrPackage,
    LockManifest,
    NpmPackage,
)

_NPM_KNOWN_FIELDS = frozenset(
    {"integrity", "dependencies", "optionalDependencies", "os", "cpu", "deprecated", "bin"}
)
_JSR_KNOWN_FIELDS = frozenset({"integrity", "dependencies"})


def parse_manifest(raw: str) -> LockManifest:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise FormatError("Invalid lock manifest JSON.", hint=str(exc)) from exc

    if not isinstance(payload, dict):
        raise FormatError("Invalid lock manifest payload type.")

    version = payload.get("version")
    if version != SUPPORTED_LOCK_VERSION:
        raise FormatError(
            f"Expected deno.lock version {SUPPORTED_LOCK_VERSION}, got {version or 'unknown'}.",
            hint="Only the deno.lock v5 format is supported; regenerate the lock with Deno 2.3+.",
            context={"version": str(version) if version is not None else ""},
        )

    specifiers = _optional_dict(payload, "specifiers")
    npm = {
        key: _parse_npm_package(key, item) for key, item in _optional_dict(payload, "npm").items()
    }
    jsr = {
        key: _parse_jsr_package(key, item) for key, item in _optional_dict(payload, "jsr").items()
    }
    remote = _parse_remote(_optional_dict(payload, "remote"))
    return LockManifest(
        version=version,
        specifiers=MappingProxyType(dict(specifiers)),
        npm=MappingProxyType(npm),
        jsr=MappingProxyType(jsr),
        remote=MappingProxyType(remote),
        workspace=MappingProxyType(_optional_dict(payload, "workspace")),
    )


def read_manifest(path: str | Path) -> LockManifest:
    lock_path = Path(path)
    try:
        raw = lock_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestIOError(
            f"Could not read {lock_path}.",
            hint="Pass the path to an existing deno.lock file.",
            context={"path": str(lock_path), "reason": str(exc)},
        ) from exc
    return parse_manifest(raw)


def _parse_npm_package(key: str, item: Any) -> NpmPackage:
    if not isinstance(item, dict):
        raise FormatError("Invalid npm entry in lock manifest.", context={"key": key})
    return NpmPackage(
        integrity=_integrity_str(item, key=key),
        dependencies=_optional_str_tuple(item, "dependencies", key=key),
        optional_dependencies=_optional_str_tuple(item, "optionalDependencies", key=key),
        os=_optional_str_tuple(item, "os", key=key),
        cpu=_optional_str_tuple(item, "cpu", key=key),
        deprecated=bool(item.get("deprecated", False)),
        bin=bool(item.get("bin", False)),
        extra=MappingProxyType({k: v for k, v in item.items() if k not in _NPM_KNOWN_FIELDS}),
    )


def _parse_jsr_package(key: str, item: Any) -> JsrPackage:
    if not isinstance(item, dict):
        raise FormatError("Invalid jsr entry in lock manifest.", context={"key": key})
    return JsrPackage(
        integrity=_integrity_str(item, key=key),
        dependencies=_optional_str_tuple(item, "dependencies", key=key),
        extra=MappingProxyType({k: v for k, v in item.items() if k not in _JSR_KNOWN_FIELDS}),
    )


def _parse_remote(section: dict[str, Any]) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for url, digest in section.items():
        if not isinstance(digest, str):
            raise FormatError("Invalid remote entry in lock manifest.", context={"key": url})
        parsed[url] = digest
    return parsed


def _optional_dict(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise FormatError(f"Invalid lock manifest `{key}` value.")
    return value


def _integrity_str(payload: dict[str, Any], *, key: str) -> str:
    # A missing digest is reported per entry when the integrity is decoded.
    value = payload.get("integrity", "")
    if not isinstance(value, str):
        raise FormatError(
            "Invalid lock manifest `integrity` value.",
            context={"key": key},
        )
    return value


def _optional_str_tuple(payload: dict[str, Any], field_name: str, *, key: str) -> tuple[str, ...]:
    value = payload.get(field_name, [])
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise FormatError(
            f"Invalid lock manifest `{field_name}` list.",
            context={"key": key},
        )
    return tuple(value)
