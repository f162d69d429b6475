"""Integrity string normalization.

Lock files and registries describe content hashes in three shapes:

- SRI ``sha512-<base64>`` (npm registry entries)
- SRI ``sha256-<base64>``
- bare lowercase hex SHA-256 (JSR entries and remote URLs in ``deno.lock``)

Nix fetchers accept base64 digests under a ``sha256``/``sha512`` attribute,
so every shape is normalized to an (encoding, base64 value) pair.
"""

from __future__ import annotations

import base64
import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from deno2nix.errors import IntegrityFormatError

HEX_SHA256_PATTERN = re.compile(r"^[a-f0-9]{64}$")


class HashEncoding(StrEnum):
    HEX_SHA256 = "hex-sha256"
    SRI_SHA256 = "sri-sha256"
    SRI_SHA512 = "sri-sha512"


@dataclass(frozen=True, slots=True)
class IntegrityValue:
    encoding: HashEncoding
    value: str

    @property
    def hash_type(self) -> str:
        """Nix fetcher attribute name for this digest."""
        if self.encoding is HashEncoding.SRI_SHA512:
            return "sha512"
        return "sha256"

    @property
    def sri(self) -> str:
        return f"{self.hash_type}-{self.value}"


def decode_integrity(raw: Any) -> IntegrityValue:
    """Normalize an integrity string, raising ``IntegrityFormatError`` if unrecognized."""
    if not isinstance(raw, str):
        raise IntegrityFormatError(
            "Integrity value must be a string.",
            context={"integrity": repr(raw)},
        )
    if raw.startswith("sha512-"):
        return IntegrityValue(encoding=HashEncoding.SRI_SHA512, value=raw[len("sha512-") :])
    if raw.startswith("sha256-"):
        return IntegrityValue(encoding=HashEncoding.SRI_SHA256, value=raw[len("sha256-") :])
    if HEX_SHA256_PATTERN.fullmatch(raw):
        return decode_hex_sha256(raw)
    raise IntegrityFormatError(
        "Unknown integrity format.",
        hint="Expected `sha512-<base64>`, `sha256-<base64>` or 64 lowercase hex characters.",
        context={"integrity": raw},
    )


def decode_hex_sha256(raw: str) -> IntegrityValue:
    if not isinstance(raw, str) or not HEX_SHA256_PATTERN.fullmatch(raw):
        raise IntegrityFormatError(
            "Expected a hex encoded SHA-256 digest.",
            context={"integrity": str(raw)},
        )
    encoded = base64.b64encode(bytes.fromhex(raw)).decode("ascii")
    return IntegrityValue(encoding=HashEncoding.HEX_SHA256, value=encoded)


__all__ = [
    "HEX_SHA256_PATTERN",
    "HashEncoding",
    "IntegrityValue",
    "decode_hex_sha256",
    "decode_integrity",
]
