"""Nix renderer for ``DepsDocument``."""

from __future__ import annotations

import os
from pathlib import Path

from deno2nix.emit.document import CacheStep, DepsDocument, SourceBlock
from deno2nix.errors import ManifestIOError

INDENT = "  "


def nix_string(value: str) -> str:
    """Render ``value`` as a double-quoted Nix string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
    return f'"{escaped}"'


def render_deps_nix(document: DepsDocument) -> str:
    lines = [
        document.header,
        "",
        "{ stdenv, fetchurl, lib }:",
        "",
        "let",
        f"{INDENT}sources = {{",
    ]
    for block in document.sources:
        lines.extend(_render_source(block, depth=2))
    lines.append(f"{INDENT}}};")
    lines.append("")
    lines.extend(_render_cache(document.cache, depth=1))
    lines.append("")
    lines.append("in {")
    lines.append(f"{INDENT}inherit sources cache;")
    lines.append("}")
    return "\n".join(lines) + "\n"


def _attr(depth: int, name: str, value: str) -> str:
    return f"{INDENT * depth}{name} = {nix_string(value)};"


def _render_source(block: SourceBlock, *, depth: int) -> list[str]:
    pad = INDENT * depth
    return [
        f"{pad}{nix_string(block.key)} = {{",
        _attr(depth + 1, "type", block.type),
        _attr(depth + 1, "name", block.name),
        _attr(depth + 1, "packageName", block.package_name),
        _attr(depth + 1, "version", block.version),
        _attr(depth + 1, "registryPath", block.registry_path),
        f"{pad}{INDENT}src = fetchurl {{",
        _attr(depth + 2, "url", block.url),
        _attr(depth + 2, block.hash_type, block.hash),
        f"{pad}{INDENT}}};",
        f"{pad}}};",
    ]


def _render_cache(cache: CacheStep, *, depth: int) -> list[str]:
    # Nix-side interpolation: `${...}` and `$out` here are meant literally.
    pad = INDENT * depth
    strip = f"--strip-components={cache.strip_components}"
    return [
        f"{pad}# Build the npm cache directory for Deno",
        f"{pad}cache = stdenv.mkDerivation {{",
        _attr(depth + 1, "name", cache.name),
        f"{pad}  dontUnpack = true;",
        f"{pad}  buildPhase = ''",
        f"{pad}    mkdir -p $out",
        f'{pad}    ${{lib.concatStringsSep "\\n" (lib.mapAttrsToList (name: pkg:',
        f'{pad}      lib.optionalString (pkg.registryPath != "") \'\'',
        f'{pad}        mkdir -p "$out/${{pkg.registryPath}}"',
        f'{pad}        tar -xzf ${{pkg.src}} -C "$out/${{pkg.registryPath}}" {strip}',
        f"{pad}      ''",
        f"{pad}    ) sources)}}",
        f"{pad}  '';",
        f'{pad}  installPhase = "true";',
        f"{pad}}};",
    ]


def write_deps_nix(text: str, path: str | Path) -> Path:
    """Write ``text`` to ``path`` atomically, leaving no partial file on failure."""
    output_path = Path(path)
    temp_path = output_path.with_name(f".{output_path.name}.tmp")
    try:
        temp_path.write_text(text, encoding="utf-8")
        os.replace(temp_path, output_path)
    except OSError as exc:
        temp_path.unlink(missing_ok=True)
        raise ManifestIOError(
            f"Could not write {output_path}.",
            hint="Check that the output directory exists and is writable.",
            context={"path": str(output_path), "reason": str(exc)},
        ) from exc
    return output_path
