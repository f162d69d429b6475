"""Structured logging and run reporting helpers."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from deno2nix.errors import ManifestIOError

logger = logging.getLogger(__name__)

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass(slots=True)
class StructuredLogger:
    records: list[dict[str, Any]] = field(default_factory=list)

    def log(
        self,
        *,
        operation: str,
        family: str | None,
        key: str | None,
        message: str,
        level: str = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = {
            "level": level,
            "operation": operation,
            "family": family,
            "key": key,
            "message": message,
        }
        if extra is not None:
            record["extra"] = extra
        self.records.append(record)
        logger.log(_LEVELS.get(level, logging.INFO), "%s: %s", key or operation, message)

    def warnings(self) -> list[dict[str, Any]]:
        return [record for record in self.records if record["level"] == "warning"]

    def records_for_family(self, family: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("family") == family]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        lines = [json.dumps(record, sort_keys=True) for record in self.records]
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        except OSError as exc:
            raise ManifestIOError(
                f"Could not write log records to {output_path}.",
                hint="Pass a writable path to --log-json.",
                context={"path": str(output_path), "reason": str(exc)},
            ) from exc
        return output_path


@dataclass(slots=True)
class FamilyCounts:
    seen: int = 0
    emitted: int = 0
    skipped: int = 0
    duplicates: int = 0


@dataclass(slots=True)
class GenerationReport:
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    families: dict[str, FamilyCounts] = field(default_factory=dict)

    def counts(self, family: str) -> FamilyCounts:
        return self.families.setdefault(family, FamilyCounts())

    def skip(self, *, family: str, key: str, message: str, **extra: Any) -> None:
        self.counts(family).skipped += 1
        self.logger.log(
            operation="resolve",
            family=family,
            key=key,
            message=message,
            level="warning",
            extra=extra or None,
        )

    @property
    def warnings(self) -> list[dict[str, Any]]:
        return self.logger.warnings()

    def summary_lines(self) -> list[str]:
        labels = {"npm": "NPM packages", "jsr": "JSR packages", "remote": "Remote URLs"}
        lines = []
        for family, label in labels.items():
            counts = self.counts(family)
            line = f"  {label + ':':<14}{counts.seen}"
            if counts.skipped or counts.duplicates:
                line += f" ({counts.emitted} emitted, {counts.skipped} skipped"
                line += f", {counts.duplicates} duplicate)" if counts.duplicates else ")"
            lines.append(line)
        return lines


__all__ = ["FamilyCounts", "GenerationReport", "StructuredLogger"]
