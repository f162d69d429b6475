from pathlib import Path

import pytest

from deno2nix.emit import (
    GENERATED_MARKER,
    build_document,
    escape_nix_name,
    nix_string,
    render_deps_nix,
    write_deps_nix,
)
from deno2nix.errors import ManifestIOError
from deno2nix.integrity import decode_integrity
from deno2nix.sources import SourceFamily, SourceRecord

from conftest import HEX_DIGEST, HEX_DIGEST_BASE64

EXPECTED_DEPS_NIX = """\
# This file has been generated by deno2nix. Do not edit!

{ stdenv, fetchurl, lib }:

let
  sources = {
    "hono-4.11.3" = {
      type = "npm";
      name = "hono";
      packageName = "hono";
      version = "4.11.3";
      registryPath = "registry.npmjs.org/hono/4.11.3";
      src = fetchurl {
        url = "https://registry.npmjs.org/hono/-/hono-4.11.3.tgz";
        sha512 = "AAAA==";
      };
    };
    "remote:deno.land/mod.ts-0.167.0" = {
      type = "remote";
      name = "remote:deno.land_slash_mod.ts";
      packageName = "remote:deno.land/mod.ts";
      version = "0.167.0";
      registryPath = "";
      src = fetchurl {
        url = "https://deno.land/std@0.167.0/fs/mod.ts";
        sha256 = "47DEQpj8HBSa+/TImW+5JCeuQeRkm5NMpJWZG3hSuFU=";
      };
    };
  };

  # Build the npm cache directory for Deno
  cache = stdenv.mkDerivation {
    name = "deno-npm-cache";
    dontUnpack = true;
    buildPhase = ''
      mkdir -p $out
      ${lib.concatStringsSep "\\n" (lib.mapAttrsToList (name: pkg:
        lib.optionalString (pkg.registryPath != "") ''
          mkdir -p "$out/${pkg.registryPath}"
          tar -xzf ${pkg.src} -C "$out/${pkg.registryPath}" --strip-components=1
        ''
      ) sources)}
    '';
    installPhase = "true";
  };

in {
  inherit sources cache;
}
"""


def test_render_matches_golden_output() -> None:
    document = build_document([_remote_record(), _npm_record("hono", "4.11.3")])

    assert render_deps_nix(document) == EXPECTED_DEPS_NIX


def test_document_orders_blocks_by_key() -> None:
    records = [
        _npm_record("zod", "3.23.8"),
        _npm_record("@types/node", "22.10.2"),
        _npm_record("hono", "4.11.3"),
        _npm_record("hono", "4.10.0"),
    ]

    document = build_document(records)

    assert [block.key for block in document.sources] == [
        "@types/node-22.10.2",
        "hono-4.10.0",
        "hono-4.11.3",
        "zod-3.23.8",
    ]


def test_cache_step_only_covers_sources_with_registry_path() -> None:
    document = build_document([_npm_record("hono", "4.11.3"), _remote_record()])

    assert document.header == GENERATED_MARKER
    assert document.cache.registry_paths == ("registry.npmjs.org/hono/4.11.3",)
    assert document.cache.strip_components == 1


def test_scoped_names_are_escaped_for_nix() -> None:
    document = build_document([_npm_record("@types/node", "22.10.2")])

    assert document.sources[0].name == "_at_types_slash_node"
    assert document.sources[0].package_name == "@types/node"
    assert escape_nix_name("@jsr/std__assert") == "_at_jsr_slash_std__assert"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("plain", '"plain"'),
        ('say "hi"', '"say \\"hi\\""'),
        ("C:\\path", '"C:\\\\path"'),
        ("${builtins.currentSystem}", '"\\${builtins.currentSystem}"'),
        ('\\"$', '"\\\\\\"\\$"'),
    ],
)
def test_nix_string_escapes_backslash_quote_and_dollar(value: str, expected: str) -> None:
    assert nix_string(value) == expected


def test_render_escapes_each_field_once() -> None:
    record = SourceRecord(
        family=SourceFamily.REMOTE,
        name='remote:evil.test/a"b',
        package_name='remote:evil.test/a"b',
        version="0.0.0",
        registry_path="",
        url="https://evil.test/${x}",
        integrity=decode_integrity(HEX_DIGEST),
    )

    text = render_deps_nix(build_document([record]))

    assert '"remote:evil.test/a\\"b-0.0.0" = {' in text
    assert 'url = "https://evil.test/\\${x}";' in text
    assert "\\\\\\" not in text


def test_render_empty_document_is_valid() -> None:
    text = render_deps_nix(build_document([]))

    assert "  sources = {\n  };\n" in text
    assert text.startswith(GENERATED_MARKER + "\n")


def test_write_deps_nix_replaces_file_atomically(tmp_path: Path) -> None:
    output = tmp_path / "deps.nix"
    output.write_text("old", encoding="utf-8")

    write_deps_nix("new\n", output)

    assert output.read_text(encoding="utf-8") == "new\n"
    assert sorted(path.name for path in tmp_path.iterdir()) == ["deps.nix"]


def test_write_deps_nix_reports_unwritable_path(tmp_path: Path) -> None:
    output = tmp_path / "missing-dir" / "deps.nix"

    with pytest.raises(ManifestIOError) as excinfo:
        write_deps_nix("text", output)

    assert excinfo.value.code == "E_IO"
    assert not output.exists()


def _npm_record(name: str, version: str) -> SourceRecord:
    return SourceRecord(
        family=SourceFamily.NPM,
        name=name,
        package_name=name,
        version=version,
        registry_path=f"registry.npmjs.org/{name}/{version}",
        url=f"https://registry.npmjs.org/{name}/-/{name}-{version}.tgz",
        integrity=decode_integrity("sha512-AAAA=="),
    )


def _remote_record() -> SourceRecord:
    record = SourceRecord(
        family=SourceFamily.REMOTE,
        name="remote:deno.land/mod.ts",
        package_name="remote:deno.land/mod.ts",
        version="0.167.0",
        registry_path="",
        url="https://deno.land/std@0.167.0/fs/mod.ts",
        integrity=decode_integrity(HEX_DIGEST),
    )
    assert record.integrity.value == HEX_DIGEST_BASE64
    return record
