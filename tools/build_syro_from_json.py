#!/usr/bin/env python3
"""Compile a JSON pattern spec into Volca Sample pattern files and a syro stream."""

from __future__ import annotations

import argparse
import hashlib
from pathlib import Path
import sys
from typing import Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from volca.errors import EncoderError, IOFailure, UnsupportedPlatform  # noqa: E402
from volca.export import export  # noqa: E402
from volca.json_build_spec import build_project, load_build_spec  # noqa: E402
from volca.layout import decode_pattern, encode_pattern  # noqa: E402


def _sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build Volca Sample pattern .dat files (and a syro .wav) from a JSON spec",
    )
    parser.add_argument(
        "spec",
        type=Path,
        help="Path to JSON build spec",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output base name; files become <base>_pNN.dat and <base>.wav (overrides spec.output)",
    )
    parser.add_argument(
        "--encoder",
        type=Path,
        default=None,
        help="Path to the syro_volcasample encoder (overrides spec.encoder)",
    )
    parser.add_argument(
        "--dat-only",
        action="store_true",
        help="Write the pattern .dat files but do not run the encoder",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for 'random' values (overrides spec.seed)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and encode without writing anything",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    try:
        spec = load_build_spec(args.spec)
        project = build_project(spec, seed=args.seed)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    numbers = project.list_modified_patterns()
    if args.dry_run:
        for number in numbers:
            data = encode_pattern(project.pattern(number))
            # Structural sanity check: the blob must decode back to the same state.
            if decode_pattern(data) != project.pattern(number):
                raise ValueError(f"pattern {number} failed encode/decode validation")
            print(f"  p{number:02d}: {len(data)}B sha1={_sha1(data)}")
        print(f"dry-run OK: patterns={numbers}")
        return 0

    out_base = args.output if args.output is not None else spec.output
    if out_base is None:
        parser.error("output base name required: set spec.output or pass --output")
    out_base = out_base.expanduser().resolve()
    encoder = args.encoder.expanduser().resolve() if args.encoder is not None else spec.encoder

    try:
        result = export(project, out_base, encoder=encoder, run_encoder=not args.dat_only)
    except (IOFailure, UnsupportedPlatform) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except EncoderError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    for number, path in result.files.items():
        print(f"Wrote p{number:02d} -> {path}")
    if result.stream is not None:
        print(f"Wrote syro stream -> {result.stream}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
