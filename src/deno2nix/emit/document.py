"""Typed intermediate representation of a generated ``deps.nix``."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from deno2nix.sources import SourceRecord

GENERATED_MARKER = "# This file has been generated by deno2nix. Do not edit!"
CACHE_DERIVATION_NAME = "deno-npm-cache"


@dataclass(frozen=True, slots=True)
class SourceBlock:
    key: str
    type: str
    name: str
    package_name: str
    version: str
    registry_path: str
    url: str
    hash_type: str
    hash: str


@dataclass(frozen=True, slots=True)
class CacheStep:
    """Derivation unpacking every cached source under ``$out/<registryPath>``."""

    name: str
    registry_paths: tuple[str, ...]
    strip_components: int = 1


@dataclass(frozen=True, slots=True)
class DepsDocument:
    header: str
    sources: tuple[SourceBlock, ...]
    cache: CacheStep


def escape_nix_name(name: str) -> str:
    """Make a package name safe for use as a Nix derivation name."""
    return name.replace("@", "_at_").replace("/", "_slash_")


def build_document(records: Iterable[SourceRecord]) -> DepsDocument:
    ordered = sorted(records, key=lambda record: record.key)
    blocks = tuple(
        SourceBlock(
            key=record.key,
            type=str(record.family),
            name=escape_nix_name(record.name),
            package_name=record.package_name,
            version=record.version,
            registry_path=record.registry_path,
            url=record.url,
            hash_type=record.integrity.hash_type,
            hash=record.integrity.value,
        )
        for record in ordered
    )
    cache = CacheStep(
        name=CACHE_DERIVATION_NAME,
        registry_paths=tuple(block.registry_path for block in blocks if block.registry_path),
    )
    return DepsDocument(header=GENERATED_MARKER, sources=blocks, cache=cache)
