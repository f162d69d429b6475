"""Deterministic ``deps.nix`` emission."""

from .document import (
    CACHE_DERIVATION_NAME,
    GENERATED_MARKER,
    CacheStep,
    DepsDocument,
    SourceBlock,
    build_document,
    escape_nix_name,
)
from .nix import nix_string, render_deps_nix, write_deps_nix

__all__ = [
    "CACHE_DERIVATION_NAME",
    "GENERATED_MARKER",
    "CacheStep",
    "DepsDocument",
    "SourceBlock",
    "build_document",
    "escape_nix_name",
    "nix_string",
    "render_deps_nix",
    "write_deps_nix",
]
