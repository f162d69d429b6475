"""Public package entrypoint for deno2nix."""

from .config import Config
from .errors import (
    ConfigError,
    Deno2NixError,
    ErrorCode,
    FormatError,
    IntegrityFormatError,
    ManifestIOError,
    MetadataLookupError,
    PolicyError,
    SourceConflictError,
)
from .generate import GenerationResult, generate, generate_async, generate_from_text
from .integrity import HashEncoding, IntegrityValue, decode_integrity
from .keys import JsrKey, NpmKey, parse_jsr_key, parse_npm_key
from .lockfile import LockManifest, parse_manifest, read_manifest
from .sources import SourceFamily, SourceRecord, SourceSet

__all__ = [
    "Config",
    "ConfigError",
    "Deno2NixError",
    "ErrorCode",
    "FormatError",
    "GenerationResult",
    "HashEncoding",
    "IntegrityFormatError",
    "IntegrityValue",
    "JsrKey",
    "LockManifest",
    "ManifestIOError",
    "MetadataLookupError",
    "NpmKey",
    "PolicyError",
    "SourceConflictError",
    "SourceFamily",
    "SourceRecord",
    "SourceSet",
    "decode_integrity",
    "generate",
    "generate_async",
    "generate_from_text",
    "parse_jsr_key",
    "parse_manifest",
    "parse_npm_key",
    "read_manifest",
]
