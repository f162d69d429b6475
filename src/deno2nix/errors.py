"""Typed error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import ClassVar


class ErrorCode(StrEnum):
    """Stable error identifiers used across the pipeline and CLI."""

    FORMAT = "E_FORMAT"
    INTEGRITY = "E_INTEGRITY"
    METADATA = "E_METADATA"
    CONFLICT = "E_CONFLICT"
    CONFIG = "E_CONFIG"
    POLICY = "E_POLICY"
    IO = "E_IO"


class Deno2NixError(Exception):
    """Base error class that carries code, optional hint, and context.

    Subclasses pin their code with ``error_code``; the base class takes it
    explicitly.
    """

    error_code: ClassVar[ErrorCode]
    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = (code or self.error_code).value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        lines = [super().__str__()]
        if self.hint:
            lines.append(f"Hint: {self.hint}")
        lines.extend(f"  {name}: {value}" for name, value in self.context.items() if value)
        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class FormatError(Deno2NixError):
    error_code = ErrorCode.FORMAT


class IntegrityFormatError(Deno2NixError):
    error_code = ErrorCode.INTEGRITY


class MetadataLookupError(Deno2NixError):
    error_code = ErrorCode.METADATA


class SourceConflictError(Deno2NixError):
    error_code = ErrorCode.CONFLICT


class ConfigError(Deno2NixError):
    error_code = ErrorCode.CONFIG


class PolicyError(Deno2NixError):
    error_code = ErrorCode.POLICY


class ManifestIOError(Deno2NixError):
    error_code = ErrorCode.IO


__all__ = [
    "ConfigError",
    "Deno2NixError",
    "ErrorCode",
    "FormatError",
    "IntegrityFormatError",
    "ManifestIOError",
    "MetadataLookupError",
    "PolicyError",
    "SourceConflictError",
]
