#!/usr/bin/env python3
"""Convert a MIDI drum groove into a Volca Sample JSON build spec.

Each bar (16 sixteenth-note steps) of the source becomes one pattern, up to
10 bars.  The most frequently used drum notes are assigned to parts 1-10 in
order of use; each note's part plays the sample given by ``--sample-map`` (or
the part index minus one when unmapped).

Examples
--------
    python tools/midi_to_volca.py groove.mid -o specs/groove.json
    python tools/midi_to_volca.py groove.mid --channel 10 --sample-map 36=0,38=4,42=9
    python tools/midi_to_volca.py groove.mid --velocity-motion --info
"""

from __future__ import annotations

import argparse
from collections import Counter
from dataclasses import dataclass
import json
from pathlib import Path
import sys
from typing import Dict, List, Optional, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import mido  # noqa: E402

from volca.json_build_spec import SUPPORTED_SPEC_VERSION, parse_build_spec  # noqa: E402
from volca.params import MOTION_MAX, MOTION_MIN, PART_COUNT, PATTERN_COUNT, STEP_COUNT  # noqa: E402

GM_DRUM_CHANNEL = 9  # 0-based; "channel 10" in MIDI parlance


@dataclass
class DrumHit:
    """A drum onset quantised to the 16th-note grid."""

    abs_step: int  # 0-based, counted from the start of the file
    note: int
    velocity: int


def extract_hits(mid: mido.MidiFile, *, channel: Optional[int] = GM_DRUM_CHANNEL) -> List[DrumHit]:
    """Return note-on events quantised to 16th steps (`channel` None = any)."""

    step_ticks = max(mid.ticks_per_beat // 4, 1)
    hits: List[DrumHit] = []
    for track in mid.tracks:
        abs_tick = 0
        for msg in track:
            abs_tick += msg.time
            if msg.type != "note_on" or msg.velocity == 0:
                continue
            if channel is not None and msg.channel != channel:
                continue
            abs_step = int(round(abs_tick / step_ticks))
            hits.append(DrumHit(abs_step=abs_step, note=msg.note, velocity=msg.velocity))
    hits.sort(key=lambda h: (h.abs_step, h.note))
    return hits


def assign_parts(hits: Sequence[DrumHit]) -> Dict[int, int]:
    """Map drum note -> part number (1-10), busiest note first."""

    counts = Counter(h.note for h in hits)
    ranked = sorted(counts, key=lambda note: (-counts[note], note))
    return {note: idx + 1 for idx, note in enumerate(ranked[:PART_COUNT])}


def parse_sample_map(raw: Optional[str]) -> Dict[int, int]:
    mapping: Dict[int, int] = {}
    if not raw:
        return mapping
    for item in raw.split(","):
        note_s, sep, sample_s = item.partition("=")
        if not sep:
            raise ValueError(f"bad --sample-map entry {item!r}; expected NOTE=SAMPLE")
        note, sample = int(note_s), int(sample_s)
        if not (0 <= note <= 127) or not (0 <= sample <= 99):
            raise ValueError(f"bad --sample-map entry {item!r}; note 0-127, sample 0-99")
        mapping[note] = sample
    return mapping


def _motion_level(velocity: int) -> int:
    return max(MOTION_MIN, min(MOTION_MAX, velocity))


def build_spec(
    hits: Sequence[DrumHit],
    *,
    sample_map: Dict[int, int],
    velocity_motion: bool = False,
    max_patterns: int = PATTERN_COUNT,
) -> dict:
    parts_for_note = assign_parts(hits)
    by_pattern: Dict[int, Dict[int, List[DrumHit]]] = {}
    for hit in hits:
        if hit.note not in parts_for_note:
            continue
        pattern = hit.abs_step // STEP_COUNT + 1
        if pattern > max_patterns:
            break
        by_pattern.setdefault(pattern, {}).setdefault(hit.note, []).append(hit)

    patterns = []
    for pattern in sorted(by_pattern):
        parts = []
        for note, note_hits in sorted(by_pattern[pattern].items(), key=lambda kv: parts_for_note[kv[0]]):
            part = parts_for_note[note]
            steps = sorted({h.abs_step % STEP_COUNT + 1 for h in note_hits})
            entry: Dict[str, object] = {
                "part": part,
                "sample": sample_map.get(note, part - 1),
                "step_list": steps,
            }
            if velocity_motion:
                entry["functions"] = ["motion"]
                seen: Dict[int, int] = {}
                for h in note_hits:
                    seen.setdefault(h.abs_step % STEP_COUNT + 1, h.velocity)
                entry["motion"] = [
                    {"step": step, "level": [_motion_level(vel), _motion_level(vel)]}
                    for step, vel in sorted(seen.items())
                ]
            parts.append(entry)
        patterns.append({"pattern": pattern, "parts": parts})
    return {"version": SUPPORTED_SPEC_VERSION, "patterns": patterns}


def describe(hits: Sequence[DrumHit]) -> List[str]:
    parts = assign_parts(hits)
    counts = Counter(h.note for h in hits)
    bars = (max(h.abs_step for h in hits) // STEP_COUNT + 1) if hits else 0
    lines = [f"hits={len(hits)} bars={bars} distinct_notes={len(counts)}"]
    for note, part in sorted(parts.items(), key=lambda kv: kv[1]):
        lines.append(f"  part {part:2d} <- note {note:3d} ({counts[note]} hits)")
    dropped = sorted(set(counts) - set(parts))
    if dropped:
        lines.append(f"  dropped notes (more than {PART_COUNT} in use): {dropped}")
    return lines


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Convert a MIDI drum file into a Volca Sample JSON spec")
    parser.add_argument("midi", type=Path, help="Input .mid file")
    parser.add_argument("-o", "--output", type=Path, default=None, help="Output JSON path (default: stdout)")
    parser.add_argument(
        "--channel",
        type=int,
        default=GM_DRUM_CHANNEL + 1,
        help="1-based MIDI channel to read; 0 reads every channel (default: 10)",
    )
    parser.add_argument("--sample-map", default=None, help="NOTE=SAMPLE pairs, e.g. 36=0,38=4")
    parser.add_argument(
        "--velocity-motion",
        action="store_true",
        help="Record hit velocities as level motion (turns the motion function on)",
    )
    parser.add_argument("--patterns", type=int, default=PATTERN_COUNT, help="Maximum patterns (1-10)")
    parser.add_argument("--info", action="store_true", help="Print analysis only")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    if not (1 <= args.patterns <= PATTERN_COUNT):
        parser.error(f"--patterns must be between 1 and {PATTERN_COUNT}")
    if not (0 <= args.channel <= 16):
        parser.error("--channel must be between 0 and 16")
    try:
        sample_map = parse_sample_map(args.sample_map)
    except ValueError as exc:
        parser.error(str(exc))

    mid = mido.MidiFile(str(args.midi))
    hits = extract_hits(mid, channel=args.channel - 1 if args.channel else None)
    if args.info:
        print("\n".join(describe(hits)))
        return 0
    if not hits:
        print(f"error: no drum hits found in {args.midi}", file=sys.stderr)
        return 1

    payload = build_spec(
        hits,
        sample_map=sample_map,
        velocity_motion=args.velocity_motion,
        max_patterns=args.patterns,
    )
    # Validate against the same parser the builder uses.
    parse_build_spec(payload, base_dir=Path.cwd())

    text = json.dumps(payload, indent=2) + "\n"
    if args.output is None:
        sys.stdout.write(text)
    else:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text, encoding="utf-8")
        print(f"Wrote {len(payload['patterns'])} pattern(s) -> {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
