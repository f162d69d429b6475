"""Lock manifest model and decoder."""

from .io import parse_manifest, read_manifest
from .model import SUPPORTED_LOCK_VERSION, JsrPackage, LockManifest, NpmPackage

__all__ = [
    "SUPPORTED_LOCK_VERSION",
    "JsrPackage",
    "LockManifest",
    "NpmPackage",
    "parse_manifest",
    "read_manifest",
]
