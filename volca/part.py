from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, List

from .params import (
    DEFAULT_PARAMS,
    MOTION_SLOTS,
    PARAM_COUNT,
    PART_COUNT,
    STEP_COUNT,
    Function,
)


# VolcaSample_Pattern_Data framing words (volcasample_pattern.h).
PATTERN_HEADER = 0x54535450  # "PTST"
PATTERN_FOOTER = 0x44455450  # "PTED"
DEVICE_CODE = 0x33B8
ACTIVE_STEP = 0xFFFF

# Fixed VolcaSample_Part_Data fields the firmware expects but we never edit.
PART_ACCENT = 0x0000
PART_RESERVED = (0xFF, 0x00)
PART_LEVEL = 0x7F


def _default_params() -> List[int]:
    return list(DEFAULT_PARAMS)


def _default_motion() -> List[int]:
    return [0] * MOTION_SLOTS


@dataclass
class Part:
    """Programmable state of one track (one of the 10 parts of a pattern).

    ``params`` and ``motion`` are fixed-length and only ever overwritten in
    place; their lengths are part of the binary record layout.
    """

    sample: int = 0
    step_mask: int = 0  # bit n -> step n+1
    functions: Function = Function(0)
    params: List[int] = field(default_factory=_default_params)
    motion: List[int] = field(default_factory=_default_motion)

    def __post_init__(self) -> None:
        self.functions = Function(self.functions)
        if len(self.params) != PARAM_COUNT:
            raise ValueError(f"part needs {PARAM_COUNT} params, got {len(self.params)}")
        if len(self.motion) != MOTION_SLOTS:
            raise ValueError(f"part needs {MOTION_SLOTS} motion slots, got {len(self.motion)}")

    def steps(self) -> List[int]:
        """Return the 1-based numbers of all active steps."""

        return [n + 1 for n in range(STEP_COUNT) if self.step_mask & (1 << n)]


@dataclass
class Pattern:
    """Ten parts plus the constant framing of ``VolcaSample_Pattern_Data``."""

    header: ClassVar[int] = PATTERN_HEADER
    device_code: ClassVar[int] = DEVICE_CODE
    active_step: ClassVar[int] = ACTIVE_STEP
    footer: ClassVar[int] = PATTERN_FOOTER

    parts: List[Part] = field(default_factory=lambda: [Part() for _ in range(PART_COUNT)])

    def __post_init__(self) -> None:
        if len(self.parts) != PART_COUNT:
            raise ValueError(f"pattern needs {PART_COUNT} parts, got {len(self.parts)}")


__all__ = [
    "ACTIVE_STEP",
    "DEVICE_CODE",
    "PART_ACCENT",
    "PART_LEVEL",
    "PART_RESERVED",
    "PATTERN_FOOTER",
    "PATTERN_HEADER",
    "Part",
    "Pattern",
]
