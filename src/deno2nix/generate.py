"""End-to-end ``deno.lock`` to ``deps.nix`` generation."""

from __future__ import annotations

import asyncio
from contextlib import AsyncExitStack
from dataclasses import dataclass, field

from deno2nix.config import Config
from deno2nix.emit import DepsDocument, build_document, render_deps_nix
from deno2nix.fetch import HttpMirrorClient, MirrorClient
from deno2nix.lockfile import LockManifest, parse_manifest
from deno2nix.observability import GenerationReport
from deno2nix.resolve import resolve_jsr, resolve_npm, resolve_remote
from deno2nix.sources import SourceRecord, SourceSet


@dataclass(slots=True)
class GenerationResult:
    text: str
    document: DepsDocument
    records: list[SourceRecord]
    report: GenerationReport = field(default_factory=GenerationReport)


async def resolve_sources(
    manifest: LockManifest,
    *,
    config: Config,
    report: GenerationReport,
    client: MirrorClient | None = None,
) -> SourceSet:
    """Resolve all families into one deduplicated ``SourceSet``.

    Families are processed npm, jsr, remote so that an npm entry wins
    over a jsr entry for the same package and version.
    """
    sources = SourceSet()
    resolve_npm(manifest.npm, config=config, sources=sources, report=report)
    if manifest.jsr:
        async with AsyncExitStack() as stack:
            if client is None:
                client = await stack.enter_async_context(HttpMirrorClient(config))
            await resolve_jsr(
                manifest.jsr,
                config=config,
                sources=sources,
                report=report,
                client=client,
            )
    resolve_remote(manifest.remote, config=config, sources=sources, report=report)
    return sources


async def generate_async(
    manifest: LockManifest,
    *,
    config: Config | None = None,
    client: MirrorClient | None = None,
) -> GenerationResult:
    config = (config or Config()).validate()
    report = GenerationReport()
    sources = await resolve_sources(manifest, config=config, report=report, client=client)
    records = sources.sorted()
    document = build_document(records)
    return GenerationResult(
        text=render_deps_nix(document),
        document=document,
        records=records,
        report=report,
    )


def generate(
    manifest: LockManifest,
    *,
    config: Config | None = None,
    client: MirrorClient | None = None,
) -> GenerationResult:
    return asyncio.run(generate_async(manifest, config=config, client=client))


def generate_from_text(
    raw: str,
    *,
    config: Config | None = None,
    client: MirrorClient | None = None,
) -> GenerationResult:
    return generate(parse_manifest(raw), config=config, client=client)


__all__ = [
    "GenerationResult",
    "generate",
    "generate_async",
    "generate_from_text",
    "resolve_sources",
]
