"""Byte layouts of ``VolcaSample_Part_Data`` and ``VolcaSample_Pattern_Data``.

Both structs are described as ordered field lists.  The ``struct`` format
string, each field's byte offset and the record size are derived from those
lists, so the tables below are the single source of truth for the layout.

Part record (256 bytes, little-endian)::

    0x00  sample      u16
    0x02  step_on     u16    bit n -> step n+1
    0x04  accent      u16    always 0
    0x06  reserved    u8[2]  always FF 00
    0x08  level       u8     always 0x7F
    0x09  params      u8[11]
    0x14  func        u8
    0x15  padding     11 bytes
    0x20  motion      u8[224]

Pattern blob (2624 bytes)::

    0x000  header      u32    "PTST"
    0x004  dev_code    u16    0x33B8
    0x006  padding     2 bytes
    0x008  active_step u16    0xFFFF
    0x00A  padding     22 bytes
    0x020  parts       10 x 256 bytes
    0xA20  padding     28 bytes
    0xA3C  footer      u32    "PTED"
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .params import MOTION_SLOTS, PARAM_COUNT, PART_COUNT, Function
from .part import (
    ACTIVE_STEP,
    DEVICE_CODE,
    PART_ACCENT,
    PART_LEVEL,
    PART_RESERVED,
    PATTERN_FOOTER,
    PATTERN_HEADER,
    Part,
    Pattern,
)


@dataclass(frozen=True)
class Field:
    name: str
    code: str  # struct code: "B", "H", "I", "x" (pad) or "s" (blob)
    count: int = 1
    const: object = None  # fixed value emitted on encode, checked on decode

    @property
    def format(self) -> str:
        if self.count == 1 and self.code not in ("x", "s"):
            return self.code
        return f"{self.count}{self.code}"

    @property
    def values(self) -> int:
        """Number of Python values this field packs/unpacks."""
        if self.code == "x":
            return 0
        if self.code == "s":
            return 1
        return self.count


class Layout:
    """Ordered field list compiled into a little-endian ``struct.Struct``."""

    def __init__(self, name: str, fields: Sequence[Field]) -> None:
        self.name = name
        self.fields: Tuple[Field, ...] = tuple(fields)
        self.struct = struct.Struct("<" + "".join(f.format for f in self.fields))
        self.offsets: Dict[str, int] = {}
        pos = 0
        for f in self.fields:
            if f.code != "x":
                self.offsets[f.name] = pos
            pos += struct.calcsize("<" + f.format)
        assert pos == self.struct.size

    @property
    def size(self) -> int:
        return self.struct.size

    def pack(self, values: Dict[str, object]) -> bytes:
        flat: List[object] = []
        for f in self.fields:
            if f.values == 0:
                continue
            value = f.const if f.const is not None else values[f.name]
            if f.values == 1:
                flat.append(value)
            else:
                assert len(value) == f.count, f"{self.name}.{f.name}: expected {f.count} values"  # type: ignore[arg-type]
                flat.extend(value)  # type: ignore[arg-type]
        return self.struct.pack(*flat)

    def unpack(self, data: bytes) -> Dict[str, object]:
        if len(data) != self.size:
            raise ValueError(f"{self.name} must be {self.size} bytes, got {len(data)}")
        flat = self.struct.unpack(data)
        out: Dict[str, object] = {}
        pos = 0
        for f in self.fields:
            if f.values == 0:
                continue
            if f.values == 1:
                out[f.name] = flat[pos]
            else:
                out[f.name] = tuple(flat[pos : pos + f.values])
            pos += f.values
        return out

    def check_constants(self, values: Dict[str, object]) -> Optional[str]:
        """Return the name of the first constant field that does not match."""
        for f in self.fields:
            if f.const is not None and values.get(f.name) != f.const:
                return f.name
        return None


PART_LAYOUT = Layout(
    "VolcaSample_Part_Data",
    [
        Field("sample", "H"),
        Field("step_on", "H"),
        Field("accent", "H", const=PART_ACCENT),
        Field("reserved", "B", 2, const=PART_RESERVED),
        Field("level", "B", const=PART_LEVEL),
        Field("params", "B", PARAM_COUNT),
        Field("func", "B"),
        Field("padding", "x", 11),
        Field("motion", "B", MOTION_SLOTS),
    ],
)

PART_SIZE = PART_LAYOUT.size  # 256
PARTS_CAPACITY = PART_SIZE * PART_COUNT  # 2560

PATTERN_LAYOUT = Layout(
    "VolcaSample_Pattern_Data",
    [
        Field("header", "I", const=PATTERN_HEADER),
        Field("dev_code", "H", const=DEVICE_CODE),
        Field("padding0", "x", 2),
        Field("active_step", "H", const=ACTIVE_STEP),
        Field("padding1", "x", 22),
        # "s" zero-pads or truncates the blob to its declared capacity.
        Field("parts", "s", PARTS_CAPACITY),
        Field("padding2", "x", 28),
        Field("footer", "I", const=PATTERN_FOOTER),
    ],
)

PATTERN_SIZE = PATTERN_LAYOUT.size  # 2624


def encode_part(part: Part) -> bytes:
    assert len(part.params) == PARAM_COUNT, "part params length corrupted"
    assert len(part.motion) == MOTION_SLOTS, "part motion length corrupted"
    return PART_LAYOUT.pack(
        {
            "sample": part.sample,
            "step_on": part.step_mask,
            "params": part.params,
            "func": int(part.functions),
            "motion": part.motion,
        }
    )


def encode_pattern(pattern: Pattern) -> bytes:
    blob = b"".join(encode_part(part) for part in pattern.parts)
    return PATTERN_LAYOUT.pack({"parts": blob})


def decode_part(data: bytes) -> Part:
    values = PART_LAYOUT.unpack(bytes(data))
    bad = PART_LAYOUT.check_constants(values)
    if bad is not None:
        raise ValueError(f"unexpected {bad} field in part record: {values[bad]!r}")
    return Part(
        sample=values["sample"],  # type: ignore[arg-type]
        step_mask=values["step_on"],  # type: ignore[arg-type]
        functions=Function(values["func"]),  # type: ignore[arg-type]
        params=list(values["params"]),  # type: ignore[arg-type]
        motion=list(values["motion"]),  # type: ignore[arg-type]
    )


def decode_pattern(data: bytes) -> Pattern:
    values = PATTERN_LAYOUT.unpack(bytes(data))
    bad = PATTERN_LAYOUT.check_constants(values)
    if bad is not None:
        raise ValueError(f"bad {bad} in pattern data: 0x{values[bad]:X}")
    blob: bytes = values["parts"]  # type: ignore[assignment]
    parts = [
        decode_part(blob[idx * PART_SIZE : (idx + 1) * PART_SIZE])
        for idx in range(PART_COUNT)
    ]
    return Pattern(parts=parts)


__all__ = [
    "Field",
    "Layout",
    "PARTS_CAPACITY",
    "PART_LAYOUT",
    "PART_SIZE",
    "PATTERN_LAYOUT",
    "PATTERN_SIZE",
    "decode_part",
    "decode_pattern",
    "encode_part",
    "encode_pattern",
]
