#!/usr/bin/env python3
"""Human-readable Volca Sample pattern inspector.

Decodes a single ``.dat`` pattern file (``VolcaSample_Pattern_Data``) and
prints, for every part that differs from the factory default, the sample,
step grid, function toggles, knob values and recorded motion.
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys
from typing import List, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from volca.layout import PATTERN_SIZE, decode_pattern  # noqa: E402
from volca.params import (  # noqa: E402
    DEFAULT_PARAMS,
    FUNCTION_NAMES,
    MOTION_LANE,
    PARAM_NAMES,
    STEP_COUNT,
    TWO_LANE_PARAMS,
    Function,
    motion_slots,
)
from volca.part import Part, Pattern  # noqa: E402
from volca.validate import unbias_motion  # noqa: E402


def step_grid(mask: int) -> str:
    cells = ["x" if mask & (1 << n) else "." for n in range(STEP_COUNT)]
    return " ".join("".join(cells[i : i + 4]) for i in range(0, STEP_COUNT, 4))


def describe_functions(flags: Function) -> str:
    names = [name for name in FUNCTION_NAMES if flags & Function[name.upper()]]
    return ", ".join(names) if names else "-"


def describe_motion(part: Part) -> List[str]:
    lines: List[str] = []
    for step in range(1, STEP_COUNT + 1):
        cells = []
        for name in MOTION_LANE:
            raw = [part.motion[slot] for slot in motion_slots(name, step)]
            if not any(raw):
                continue
            values = [unbias_motion(name, v) for v in raw]
            shown = "->".join("-" if v is None else str(v) for v in values)
            cells.append(f"{name}={shown}")
        if cells:
            lines.append(f"      step {step:2d}: " + " ".join(cells))
    return lines


def generate_report(path: Path, pattern: Pattern) -> str:
    lines = [f"File: {path}", f"Size: {PATTERN_SIZE} bytes"]
    default = Part()
    shown = 0
    for idx, part in enumerate(pattern.parts, start=1):
        if part == default:
            continue
        shown += 1
        lines.append(f"  Part {idx:2d}: sample={part.sample:2d}  steps=[{step_grid(part.step_mask)}]")
        lines.append(f"    functions: {describe_functions(part.functions)}")
        changed = [
            f"{name}={value}"
            for name, value, factory in zip(PARAM_NAMES, part.params, DEFAULT_PARAMS)
            if value != factory
        ]
        lines.append("    params: " + (" ".join(changed) if changed else "(defaults)"))
        motion = describe_motion(part)
        if motion:
            lines.append("    motion:")
            lines.extend(motion)
    if not shown:
        lines.append("  (all parts at factory defaults)")
    two_lane = ", ".join(sorted(TWO_LANE_PARAMS))
    lines.append(f"  [motion for {two_lane} shows start->end]")
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Inspect a single Volca Sample pattern .dat file."
    )
    parser.add_argument("path", type=Path, help="Path to the .dat file to inspect.")
    args = parser.parse_args(argv)

    try:
        pattern = decode_pattern(args.path.read_bytes())
    except (OSError, ValueError) as exc:
        print(f"error: {args.path}: {exc}", file=sys.stderr)
        return 1
    print(generate_report(args.path, pattern))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
