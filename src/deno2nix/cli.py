"""Command line entry point.

Usage:
    deno2nix [deno.lock] [deps.nix]
    python -m deno2nix [deno.lock] [deps.nix]
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from deno2nix.config import DEFAULT_MIRROR_URL, DEFAULT_REGISTRY_URL, Config
from deno2nix.emit import write_deps_nix
from deno2nix.errors import Deno2NixError
from deno2nix.fetch import MirrorClient
from deno2nix.generate import generate
from deno2nix.lockfile import read_manifest

DEFAULT_LOCK_PATH = "deno.lock"
DEFAULT_OUTPUT_PATH = "deps.nix"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deno2nix",
        description="Generate a Nix fetchurl source set from a deno.lock (v5) file.",
    )
    parser.add_argument("lock", nargs="?", default=DEFAULT_LOCK_PATH, help="Input lock file")
    parser.add_argument("output", nargs="?", default=DEFAULT_OUTPUT_PATH, help="Output Nix file")
    parser.add_argument("--registry-url", default=DEFAULT_REGISTRY_URL, help="npm registry URL")
    parser.add_argument("--mirror-url", default=DEFAULT_MIRROR_URL, help="JSR npm mirror URL")
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=8,
        help="Maximum in-flight mirror lookups",
    )
    parser.add_argument(
        "--request-timeout",
        type=float,
        default=30.0,
        help="Per-lookup timeout in seconds",
    )
    parser.add_argument(
        "--deadline",
        type=float,
        default=300.0,
        help="Overall timeout for all mirror lookups in seconds",
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Do not contact the mirror; JSR packages are skipped",
    )
    parser.add_argument(
        "--conflict-policy",
        choices=("ignore", "warn", "error"),
        default="ignore",
        help="How to treat duplicate sources with different hashes",
    )
    parser.add_argument("--log-json", metavar="PATH", help="Write structured log records here")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity")
    return parser


def config_from_args(args: argparse.Namespace) -> Config:
    return Config(
        registry_url=args.registry_url,
        mirror_url=args.mirror_url,
        max_concurrency=args.max_concurrency,
        request_timeout=args.request_timeout,
        deadline=args.deadline,
        network_mode="offline" if args.offline else "online",
        conflict_policy=args.conflict_policy,
    )


def main(argv: Sequence[str] | None = None, *, client: MirrorClient | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = config_from_args(args).validate()
        print(f"Reading {args.lock}...")
        manifest = read_manifest(args.lock)
        print(f"Generating {args.output}...")
        result = generate(manifest, config=config, client=client)
        if args.log_json:
            result.report.logger.to_json_lines(args.log_json)
        write_deps_nix(result.text, args.output)
    except Deno2NixError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print("Done!")
    for line in result.report.summary_lines():
        print(line)
    warnings = result.report.warnings
    if warnings:
        print(f"  Warnings:     {len(warnings)}")
    return 0


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)


if __name__ == "__main__":
    sys.exit(main())
