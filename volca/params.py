"""Parameter registry for the Volca Sample part record.

The tables mirror the ``#define`` blocks in ``volcasample_pattern.h`` from the
Korg Syro SDK.  Knob indices address ``VolcaSample_Part_Data.Param[]``; motion
lane bases address the 14 x 16 ``Motion[]`` array.  ``level``, ``pan`` and
``speed`` record a start *and* an end value per step, so each of them owns two
adjacent lanes.
"""

from __future__ import annotations

from enum import IntFlag
from typing import Dict, Tuple

from .errors import UnknownFunction, UnknownParameter


STEP_COUNT = 16
PART_COUNT = 10
PATTERN_COUNT = 10
SAMPLE_MAX = 99
PARAM_COUNT = 11
MOTION_LANES = 14
MOTION_SLOTS = MOTION_LANES * STEP_COUNT  # 224

# Raw motion bytes with this bias mark a recorded knob position; speed is the
# one parameter whose motion bytes are stored as-is.
MOTION_BIAS = 128
MOTION_MIN = 1
MOTION_MAX = 127


class Function(IntFlag):
    """Per-part function toggles (``VolcaSample_Part_Data.FuncMemoryPart``)."""

    MOTION = 0x01
    LOOP = 0x02
    REVERB = 0x04
    REVERSE = 0x08
    MUTE = 0x10


FUNCTION_NAMES: Tuple[str, ...] = ("motion", "loop", "reverb", "reverse", "mute")

PARAM_INDEX: Dict[str, int] = {
    "level": 0,
    "pan": 1,
    "speed": 2,
    "amp_attack": 3,
    "amp_decay": 4,
    "pitch_int": 5,
    "pitch_attack": 6,
    "pitch_decay": 7,
    "start_point": 8,
    "length": 9,
    "hi_cut": 10,
}

PARAM_NAMES: Tuple[str, ...] = tuple(
    sorted(PARAM_INDEX, key=PARAM_INDEX.__getitem__)
)

MOTION_LANE: Dict[str, int] = {
    "level": 0,
    "pan": 2,
    "speed": 4,
    "amp_attack": 6,
    "amp_decay": 7,
    "pitch_int": 8,
    "pitch_attack": 9,
    "pitch_decay": 10,
    "start_point": 11,
    "length": 12,
    "hi_cut": 13,
}

TWO_LANE_PARAMS = frozenset({"level", "pan", "speed"})

# Inclusive knob ranges.  pan/pitch_int are centred on 64, speed spans
# -24..+24 semitones around 64.
_DEFAULT_RANGE = (0, 127)
PARAM_RANGE: Dict[str, Tuple[int, int]] = {
    name: _DEFAULT_RANGE for name in PARAM_INDEX
}
PARAM_RANGE.update(pan=(1, 127), pitch_int=(1, 127), speed=(40, 88))

DEFAULT_PARAMS: Tuple[int, ...] = (127, 64, 64, 0, 127, 64, 0, 127, 0, 127, 127)


def param_index(name: str) -> int:
    try:
        return PARAM_INDEX[name]
    except (KeyError, TypeError):
        raise UnknownParameter(f"unrecognised parameter name {name!r}") from None


def motion_lane(name: str) -> int:
    try:
        return MOTION_LANE[name]
    except (KeyError, TypeError):
        raise UnknownParameter(f"unrecognised parameter name {name!r}") from None


def param_range(name: str) -> Tuple[int, int]:
    param_index(name)
    return PARAM_RANGE[name]


def function_bit(name: str) -> Function:
    if not isinstance(name, str) or name not in FUNCTION_NAMES:
        raise UnknownFunction(f"unrecognised function name {name!r}")
    return Function[name.upper()]


def motion_slots(name: str, step: int) -> Tuple[int, ...]:
    """Return the motion array indices written for `name` on 1-based `step`.

    Two-lane parameters yield ``(start_slot, end_slot)``; all others a
    one-element tuple.
    """

    lane = motion_lane(name)
    first = lane * STEP_COUNT + (step - 1)
    if name in TWO_LANE_PARAMS:
        return first, first + STEP_COUNT
    return (first,)


def is_biased(name: str) -> bool:
    return name != "speed"


__all__ = [
    "DEFAULT_PARAMS",
    "FUNCTION_NAMES",
    "Function",
    "MOTION_BIAS",
    "MOTION_LANE",
    "MOTION_LANES",
    "MOTION_MAX",
    "MOTION_MIN",
    "MOTION_SLOTS",
    "PARAM_COUNT",
    "PARAM_INDEX",
    "PARAM_NAMES",
    "PARAM_RANGE",
    "PART_COUNT",
    "PATTERN_COUNT",
    "SAMPLE_MAX",
    "STEP_COUNT",
    "TWO_LANE_PARAMS",
    "function_bit",
    "is_biased",
    "motion_lane",
    "motion_slots",
    "param_index",
    "param_range",
]
