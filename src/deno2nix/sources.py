"""Resolved source records and the deduplicating source set."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import StrEnum

from deno2nix.integrity import IntegrityValue


class SourceFamily(StrEnum):
    NPM = "npm"
    JSR = "jsr"
    REMOTE = "remote"


@dataclass(frozen=True, slots=True)
class SourceRecord:
    family: SourceFamily
    name: str
    package_name: str
    version: str
    registry_path: str
    url: str
    integrity: IntegrityValue

    @property
    def key(self) -> str:
        return source_key(self.package_name, self.version)


def source_key(package_name: str, version: str) -> str:
    return f"{package_name}-{version}"


class SourceSet:
    """Keyed record collection where the first inserted record for a key wins."""

    def __init__(self) -> None:
        self._records: dict[str, SourceRecord] = {}
        self._lock = threading.Lock()

    def insert_if_absent(self, record: SourceRecord) -> tuple[bool, SourceRecord]:
        """Insert ``record`` unless its key exists; return (inserted, stored record)."""
        with self._lock:
            existing = self._records.get(record.key)
            if existing is not None:
                return False, existing
            self._records[record.key] = record
            return True, record

    def get(self, key: str) -> SourceRecord | None:
        with self._lock:
            return self._records.get(key)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def sorted(self) -> list[SourceRecord]:
        with self._lock:
            return [self._records[key] for key in sorted(self._records)]


__all__ = ["SourceFamily", "SourceRecord", "SourceSet", "source_key"]
