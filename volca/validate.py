"""Input validation and "random" value resolution.

Every public mutator accepts either an ``int`` or the :data:`RANDOM` sentinel.
The symbolic strings ``"random"`` and ``"rand"`` are converted to the sentinel by
:func:`coerce_value` at the API edge; strings never reach the part records.
Random values are drawn eagerly, before any field is written, so a rejected call
leaves the part untouched.
"""

from __future__ import annotations

import random
from typing import List, Sequence, Tuple, Union

from .errors import InvalidSelector, MalformedMotionInput, OutOfRange
from .params import (
    FUNCTION_NAMES,
    MOTION_BIAS,
    MOTION_MAX,
    MOTION_MIN,
    SAMPLE_MAX,
    TWO_LANE_PARAMS,
    function_bit,
    is_biased,
    param_index,
    param_range,
)


class Random:
    """Marker for "draw a policy-correct random value for this slot"."""

    _instance: "Random | None" = None

    def __new__(cls) -> "Random":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "RANDOM"

    def __reduce__(self):
        return (Random, ())


RANDOM = Random()

Value = Union[int, Random]

RANDOM_TOKENS = frozenset({"random", "rand"})


def coerce_value(value: object, *, where: str = "value") -> Value:
    """Normalise a user-supplied value to ``int`` or :data:`RANDOM`."""

    if value is RANDOM:
        return RANDOM
    if isinstance(value, str):
        if value.lower() in RANDOM_TOKENS:
            return RANDOM
        raise OutOfRange(f"{where} must be an integer or 'random', got {value!r}")
    if isinstance(value, bool) or not isinstance(value, int):
        raise OutOfRange(f"{where} must be an integer or 'random', got {value!r}")
    return value


def validate_selector(value: object, low: int, high: int, *, name: str = "selector") -> Value:
    try:
        value = coerce_value(value, where=name)
    except OutOfRange as exc:
        raise InvalidSelector(str(exc)) from None
    if value is RANDOM:
        return value
    if not (low <= value <= high):
        raise InvalidSelector(f"{name} {value} out of bounds (should be between {low} & {high})")
    return value


def validate_step(step: object) -> int:
    """Steps are addressed by number only; 'random' makes no sense here."""

    if step is RANDOM or isinstance(step, str):
        raise InvalidSelector(f"step number must be an integer, got {step!r}")
    return validate_selector(step, 1, 16, name="step number")  # type: ignore[return-value]


def validate_sample(value: object) -> Value:
    value = coerce_value(value, where="sample number")
    if value is not RANDOM and not (0 <= value <= SAMPLE_MAX):
        raise OutOfRange(f"sample number {value} out of bounds (should be between 0 & {SAMPLE_MAX})")
    return value


def validate_param_name(name: object) -> str:
    param_index(name)  # type: ignore[arg-type]
    return name  # type: ignore[return-value]


def validate_function_name(name: object) -> str:
    function_bit(name)  # type: ignore[arg-type]
    return name  # type: ignore[return-value]


def validate_knob_value(param: str, value: object) -> Value:
    low, high = param_range(param)
    value = coerce_value(value, where=f"{param!r} parameter value")
    if value is RANDOM:
        return value
    if not (low <= value <= high):
        raise OutOfRange(
            f"{param!r} parameter value {value} is out of range (should be between {low} & {high})"
        )
    return value


def validate_motion_value(param: str, values: object) -> Tuple[Value, ...]:
    """Check a motion value list and return it with symbolic entries coerced.

    level, pan and speed take exactly two entries (start, end); every other
    parameter takes exactly one.
    """

    validate_param_name(param)
    if isinstance(values, (str, bytes)) or not isinstance(values, (list, tuple)):
        raise MalformedMotionInput(f"{param!r} motion values must be a list, got {values!r}")
    if not values:
        raise MalformedMotionInput(f"no motion values given for {param!r}")
    expected = 2 if param in TWO_LANE_PARAMS else 1
    if len(values) != expected:
        raise MalformedMotionInput(
            f"{param!r} motion parameter takes {expected} value(s), got {len(values)}"
        )

    out: List[Value] = []
    for raw in values:
        value = coerce_value(raw, where=f"{param!r} motion value")
        if value is not RANDOM and not (MOTION_MIN <= value <= MOTION_MAX):
            raise OutOfRange(
                f"{param!r} motion parameter value {value} is out of range "
                f"(should be between {MOTION_MIN} & {MOTION_MAX})"
            )
        out.append(value)
    return tuple(out)


def validate_step_flags(flags: object) -> Tuple[int, ...]:
    if isinstance(flags, (str, bytes)) or not isinstance(flags, Sequence):
        raise InvalidSelector(f"steps must be a list of 0/1 flags, got {flags!r}")
    if len(flags) > 16:
        raise InvalidSelector(f"at most 16 step flags allowed, got {len(flags)}")
    out = []
    for idx, flag in enumerate(flags):
        if flag not in (0, 1):
            raise OutOfRange(f"step flag {idx + 1} must be 0 or 1, got {flag!r}")
        out.append(int(flag))
    return tuple(out)


def resolve_random_knob(param: str, rng: random.Random) -> int:
    low, high = param_range(param)
    return rng.randint(low, high)


def resolve_random_motion(param: str, rng: random.Random) -> int:
    """Return an already-biased raw motion byte."""

    value = rng.randint(MOTION_MIN, MOTION_MAX)
    return value + MOTION_BIAS if is_biased(param) else value


def resolve_random_sample(rng: random.Random) -> int:
    return rng.randint(0, SAMPLE_MAX)


def bias_motion(param: str, value: int) -> int:
    return value + MOTION_BIAS if is_biased(param) else value


def unbias_motion(param: str, raw: int) -> int | None:
    if raw == 0:
        return None
    return raw - MOTION_BIAS if is_biased(param) else raw


__all__ = [
    "FUNCTION_NAMES",
    "RANDOM",
    "Random",
    "Value",
    "bias_motion",
    "coerce_value",
    "resolve_random_knob",
    "resolve_random_motion",
    "resolve_random_sample",
    "unbias_motion",
    "validate_function_name",
    "validate_knob_value",
    "validate_motion_value",
    "validate_param_name",
    "validate_sample",
    "validate_selector",
    "validate_step",
    "validate_step_flags",
]
