"""Per-family source resolution policies.

Each policy walks one ``deno.lock`` section, turns every entry into at most
one ``SourceRecord`` and inserts it into the shared ``SourceSet``. Entries
that cannot be resolved are skipped with a warning on the run report; only
a fatal conflict under ``conflict_policy="error"`` escapes.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Mapping
from urllib.parse import urlsplit

from deno2nix.config import Config
from deno2nix.errors import (
    IntegrityFormatError,
    MetadataLookupError,
    PolicyError,
    SourceConflictError,
)
from deno2nix.fetch import MirrorClient, MirrorDist
from deno2nix.integrity import IntegrityValue, decode_hex_sha256, decode_integrity
from deno2nix.keys import JsrKey, NpmKey, parse_jsr_key, parse_npm_key
from deno2nix.lockfile import JsrPackage, NpmPackage
from deno2nix.observability import GenerationReport
from deno2nix.sources import SourceFamily, SourceRecord, SourceSet, source_key

REMOTE_VERSION_PATTERN = re.compile(r"@([\d.]+)")
DEFAULT_REMOTE_VERSION = "0.0.0"


def npm_tarball_url(registry_url: str, key: NpmKey) -> str:
    base = registry_url.rstrip("/")
    if key.scope is not None:
        return f"{base}/@{key.scope}/{key.bare_name}/-/{key.bare_name}-{key.version}.tgz"
    return f"{base}/{key.name}/-/{key.name}-{key.version}.tgz"


def resolve_npm(
    packages: Mapping[str, NpmPackage],
    *,
    config: Config,
    sources: SourceSet,
    report: GenerationReport,
) -> None:
    family = SourceFamily.NPM
    for key, package in packages.items():
        report.counts(family).seen += 1
        parsed = parse_npm_key(key)
        if parsed is None:
            report.skip(family=family, key=key, message=f"Could not parse NPM package key: {key}")
            continue
        try:
            integrity = decode_integrity(package.integrity)
        except IntegrityFormatError as exc:
            report.skip(family=family, key=key, message=_reason(exc))
            continue
        record = SourceRecord(
            family=family,
            name=parsed.name,
            package_name=parsed.name,
            version=parsed.version,
            registry_path=f"{config.registry_host}/{parsed.name}/{parsed.version}",
            url=npm_tarball_url(config.registry_url, parsed),
            integrity=integrity,
        )
        _insert(record, key=key, config=config, sources=sources, report=report)


async def resolve_jsr(
    packages: Mapping[str, JsrPackage],
    *,
    config: Config,
    sources: SourceSet,
    report: GenerationReport,
    client: MirrorClient,
) -> None:
    """Resolve JSR entries through the npm mirror.

    The lock's own JSR digest covers the JSR registry's file listing, not
    the tarball served by the mirror, so every entry costs one metadata
    lookup. Lookups run concurrently, bounded by ``max_concurrency``;
    records are inserted in manifest order once all lookups settle.
    """
    family = SourceFamily.JSR
    pending: list[tuple[str, JsrKey]] = []
    for key in packages:
        report.counts(family).seen += 1
        parsed = parse_jsr_key(key)
        if parsed is None:
            report.skip(family=family, key=key, message=f"Could not parse JSR package key: {key}")
            continue
        if source_key(parsed.full_name, parsed.version) in sources:
            report.counts(family).duplicates += 1
            continue
        pending.append((key, parsed))
    if not pending:
        return

    report.logger.log(
        operation="resolve",
        family=family,
        key=None,
        message=f"Fetching JSR package metadata from {config.mirror_host}...",
        extra={"lookups": len(pending)},
    )
    semaphore = asyncio.Semaphore(config.max_concurrency)

    async def lookup(parsed: JsrKey) -> MirrorDist:
        async with semaphore:
            try:
                return await asyncio.wait_for(
                    client.fetch_dist(parsed.mirror_name, parsed.version),
                    timeout=config.request_timeout,
                )
            except TimeoutError as exc:
                raise MetadataLookupError(
                    f"Timed out fetching metadata for {parsed.mirror_name}.",
                    context={"package": parsed.mirror_name, "version": parsed.version},
                ) from exc

    tasks = [asyncio.ensure_future(lookup(parsed)) for _, parsed in pending]
    _, not_done = await asyncio.wait(tasks, timeout=config.deadline)
    for task in not_done:
        task.cancel()
    if not_done:
        await asyncio.gather(*not_done, return_exceptions=True)

    for (key, parsed), task in zip(pending, tasks):
        label = f"{parsed.full_name}@{parsed.version}"
        if task.cancelled():
            report.skip(
                family=family,
                key=key,
                message=f"Skipping {label} - metadata lookup exceeded the deadline",
            )
            continue
        exc = task.exception()
        if isinstance(exc, (MetadataLookupError, PolicyError)):
            report.skip(
                family=family,
                key=key,
                message=f"Skipping {label} - could not fetch metadata: {_reason(exc)}",
                code=exc.code,
            )
            continue
        if isinstance(exc, Exception):
            # Client implementations may fail outside the typed errors.
            report.skip(
                family=family,
                key=key,
                message=f"Skipping {label} - metadata lookup failed: {exc!r}",
                error=type(exc).__name__,
            )
            continue
        if exc is not None:
            raise exc
        dist = task.result()
        try:
            integrity = decode_integrity(dist.integrity)
        except IntegrityFormatError as exc:
            report.skip(family=family, key=key, message=f"Skipping {label} - {_reason(exc)}")
            continue
        record = SourceRecord(
            family=family,
            name=parsed.full_name,
            package_name=parsed.full_name,
            version=parsed.version,
            registry_path=f"{config.mirror_host}/{parsed.mirror_name}/{parsed.version}",
            url=dist.tarball,
            integrity=integrity,
        )
        _insert(record, key=key, config=config, sources=sources, report=report)


def resolve_remote(
    remote: Mapping[str, str],
    *,
    config: Config,
    sources: SourceSet,
    report: GenerationReport,
) -> None:
    family = SourceFamily.REMOTE
    for url, digest in remote.items():
        report.counts(family).seen += 1
        try:
            parts = urlsplit(url)
            hostname = parts.hostname
        except ValueError:
            hostname = None
        if not hostname:
            report.skip(family=family, key=url, message=f"Could not parse remote URL: {url}")
            continue
        segments = [segment for segment in parts.path.split("/") if segment]
        filename = segments[-1] if segments else "remote"
        match = REMOTE_VERSION_PATTERN.search(url)
        version = match.group(1) if match else DEFAULT_REMOTE_VERSION
        name = f"remote:{hostname}/{filename}"
        try:
            integrity = decode_hex_sha256(digest)
        except IntegrityFormatError as exc:
            report.skip(family=family, key=url, message=_reason(exc))
            continue
        record = SourceRecord(
            family=family,
            name=name,
            package_name=name,
            version=version,
            registry_path="",
            url=url,
            integrity=integrity,
        )
        _insert(record, key=url, config=config, sources=sources, report=report)


def _insert(
    record: SourceRecord,
    *,
    key: str,
    config: Config,
    sources: SourceSet,
    report: GenerationReport,
) -> None:
    inserted, existing = sources.insert_if_absent(record)
    counts = report.counts(record.family)
    if inserted:
        counts.emitted += 1
        return
    counts.duplicates += 1
    if _same_digest(existing.integrity, record.integrity) or config.conflict_policy == "ignore":
        report.logger.log(
            operation="dedupe",
            family=record.family,
            key=key,
            message=f"Duplicate source {record.key} ignored",
            level="debug",
        )
        return
    context = {
        "key": record.key,
        "kept": existing.integrity.sri,
        "discarded": record.integrity.sri,
    }
    if config.conflict_policy == "error":
        raise SourceConflictError(
            f"Conflicting hashes for {record.key}.",
            hint="Regenerate the lock file or run with --conflict-policy=warn.",
            context=context,
        )
    report.logger.log(
        operation="dedupe",
        family=record.family,
        key=key,
        message=f"Conflicting duplicate for {record.key} discarded; keeping first hash",
        level="warning",
        extra=context,
    )


def _same_digest(left: IntegrityValue, right: IntegrityValue) -> bool:
    return (left.hash_type, left.value) == (right.hash_type, right.value)


def _reason(exc: Exception) -> str:
    return str(exc.args[0]) if exc.args else type(exc).__name__


__all__ = [
    "DEFAULT_REMOTE_VERSION",
    "npm_tarball_url",
    "resolve_jsr",
    "resolve_npm",
    "resolve_remote",
]
