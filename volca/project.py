"""Ten-pattern Volca Sample project with a cursor API and explicit part handles.

Two ways of addressing a part are offered:

* the cursor API (``select_pattern`` / ``select_part`` followed by
  ``set_*`` / ``get_*`` calls on the project), which mirrors how the device
  itself is programmed, and
* :class:`PartHandle` objects returned by :meth:`Project.part`, which carry
  their own ``(pattern, part)`` address and do not touch the cursor.

Both paths share the same validation and bump the same per-pattern dirty
counter.  Every mutator validates all of its input (and draws any random
values) before writing, so a rejected call changes nothing.
"""

from __future__ import annotations

import random
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from .export import ExportResult, export as export_project
from .params import (
    PART_COUNT,
    PATTERN_COUNT,
    Function,
    TWO_LANE_PARAMS,
    function_bit,
    motion_slots,
    param_index,
)
from .part import Part, Pattern
from .validate import (
    RANDOM,
    Value,
    bias_motion,
    resolve_random_knob,
    resolve_random_motion,
    resolve_random_sample,
    unbias_motion,
    validate_function_name,
    validate_knob_value,
    validate_motion_value,
    validate_param_name,
    validate_sample,
    validate_selector,
    validate_step,
    validate_step_flags,
)


MotionRead = Union[Optional[int], Tuple[Optional[int], Optional[int]]]


class PartHandle:
    """Mutators and accessors bound to one ``(pattern, part)`` address."""

    def __init__(self, project: "Project", pattern: int, part: int) -> None:
        # 0-based internally
        self._project = project
        self._pattern = pattern
        self._part = part

    def __repr__(self) -> str:
        return f"PartHandle(pattern={self.pattern}, part={self.part})"

    @property
    def pattern(self) -> int:
        return self._pattern + 1

    @property
    def part(self) -> int:
        return self._part + 1

    @property
    def state(self) -> Part:
        return self._project.patterns[self._pattern].parts[self._part]

    def _touch(self) -> None:
        self._project.modified[self._pattern] += 1

    # -- mutators ----------------------------------------------------------

    def set_sample(self, sample: Value | str) -> None:
        value = validate_sample(sample)
        if value is RANDOM:
            value = resolve_random_sample(self._project.rng)
        self.state.sample = value
        self._touch()

    def set_function(self, *names: str) -> None:
        if not names:
            raise TypeError("set_function() needs at least one function name")
        bits = Function(0)
        for name in names:
            bits |= function_bit(validate_function_name(name))
        self.state.functions |= bits
        self._touch()

    def clear_function(self, *names: str) -> None:
        if not names:
            raise TypeError("clear_function() needs at least one function name")
        bits = Function(0)
        for name in names:
            bits |= function_bit(validate_function_name(name))
        self.state.functions &= ~bits
        self._touch()

    def set_step(self, step: int) -> None:
        step = validate_step(step)
        self.state.step_mask |= 1 << (step - 1)
        self._touch()

    def clear_step(self, step: int) -> None:
        step = validate_step(step)
        self.state.step_mask &= ~(1 << (step - 1)) & 0xFFFF
        self._touch()

    def set_steps(self, flags: Sequence[int]) -> None:
        """Turn on every step whose flag is 1; 0 flags leave a step as it was."""

        mask = 0
        for idx, flag in enumerate(validate_step_flags(flags)):
            if flag:
                mask |= 1 << idx
        self.state.step_mask |= mask
        self._touch()

    def set_params(self, **values: Value | str) -> None:
        if not values:
            raise TypeError("set_params() needs at least one name=value pair")
        rng = self._project.rng
        resolved: Dict[int, int] = {}
        for name, raw in values.items():
            validate_param_name(name)
            value = validate_knob_value(name, raw)
            if value is RANDOM:
                value = resolve_random_knob(name, rng)
            resolved[param_index(name)] = value
        params = self.state.params
        for idx, value in resolved.items():
            params[idx] = value
        self._touch()

    def set_motion_params(self, step: int, **values: Sequence[Value | str]) -> None:
        """Record knob motion for one step.

        ``level``, ``pan`` and ``speed`` take ``[start, end]``; every other
        parameter takes ``[value]``.  Values are knob positions 1-127 or
        ``RANDOM``; they are stored with the hardware's +128 motion bias
        (except ``speed``).
        """

        step = validate_step(step)
        if not values:
            raise TypeError("set_motion_params() needs at least one name=[values] pair")
        rng = self._project.rng
        writes: List[Tuple[int, int]] = []
        for name, raw in values.items():
            entries = validate_motion_value(name, raw)
            for slot, value in zip(motion_slots(name, step), entries):
                if value is RANDOM:
                    stored = resolve_random_motion(name, rng)
                else:
                    stored = bias_motion(name, value)
                writes.append((slot, stored))
        motion = self.state.motion
        for slot, stored in writes:
            motion[slot] = stored
        self._touch()

    # -- accessors ---------------------------------------------------------

    def get_sample(self) -> int:
        return self.state.sample

    def step_is_on(self, step: int) -> bool:
        step = validate_step(step)
        return bool(self.state.step_mask & (1 << (step - 1)))

    def function_is_on(self, name: str) -> bool:
        return bool(self.state.functions & function_bit(name))

    def get_param(self, name: str) -> int:
        return self.state.params[param_index(name)]

    def get_raw_motion(self, step: int, name: str) -> int | Tuple[int, int]:
        """Return the stored motion byte(s), bias included."""

        step = validate_step(step)
        raw = tuple(self.state.motion[slot] for slot in motion_slots(name, step))
        if name in TWO_LANE_PARAMS:
            return raw  # type: ignore[return-value]
        return raw[0]

    def get_motion_param(self, step: int, name: str) -> MotionRead:
        """Return the knob position(s) recorded for `step`, ``None`` where unset."""

        raw = self.get_raw_motion(step, name)
        if isinstance(raw, tuple):
            return unbias_motion(name, raw[0]), unbias_motion(name, raw[1])
        return unbias_motion(name, raw)


class Project:
    """Ten patterns of ten parts plus per-pattern modification counters."""

    def __init__(self, *, seed: int | None = None, rng: random.Random | None = None) -> None:
        if rng is not None and seed is not None:
            raise ValueError("pass either seed or rng, not both")
        self.rng = rng if rng is not None else random.Random(seed)
        self.patterns: List[Pattern] = [Pattern() for _ in range(PATTERN_COUNT)]
        self.modified: List[int] = [0] * PATTERN_COUNT
        self._pattern = 0
        self._part = 0

    # -- addressing --------------------------------------------------------

    def part(self, pattern: int, part: int) -> PartHandle:
        pattern = validate_selector(pattern, 1, PATTERN_COUNT, name="pattern number")  # type: ignore[assignment]
        part = validate_selector(part, 1, PART_COUNT, name="part number")  # type: ignore[assignment]
        if pattern is RANDOM:
            pattern = self.rng.randint(1, PATTERN_COUNT)
        if part is RANDOM:
            part = self.rng.randint(1, PART_COUNT)
        return PartHandle(self, pattern - 1, part - 1)

    def iter_parts(self, pattern: int) -> Iterator[PartHandle]:
        for part in range(1, PART_COUNT + 1):
            yield self.part(pattern, part)

    def pattern(self, number: int) -> Pattern:
        number = validate_selector(number, 1, PATTERN_COUNT, name="pattern number")  # type: ignore[assignment]
        if number is RANDOM:
            raise ValueError("pattern lookup needs a concrete number")
        return self.patterns[number - 1]

    def select_pattern(self, number: int | str) -> None:
        number = validate_selector(number, 1, PATTERN_COUNT, name="pattern number")
        if number is RANDOM:
            number = self.rng.randint(1, PATTERN_COUNT)
        self._pattern = number - 1  # type: ignore[operator]

    def select_part(self, number: int | str) -> None:
        number = validate_selector(number, 1, PART_COUNT, name="part number")
        if number is RANDOM:
            number = self.rng.randint(1, PART_COUNT)
        self._part = number - 1  # type: ignore[operator]

    def get_pattern(self) -> int:
        return self._pattern + 1

    def get_part(self) -> int:
        return self._part + 1

    def current(self) -> PartHandle:
        return PartHandle(self, self._pattern, self._part)

    # -- cursor API --------------------------------------------------------

    def set_sample(self, sample: Value | str) -> None:
        self.current().set_sample(sample)

    def set_function(self, *names: str) -> None:
        self.current().set_function(*names)

    def clear_function(self, *names: str) -> None:
        self.current().clear_function(*names)

    def set_step(self, step: int) -> None:
        self.current().set_step(step)

    def clear_step(self, step: int) -> None:
        self.current().clear_step(step)

    def set_steps(self, flags: Sequence[int]) -> None:
        self.current().set_steps(flags)

    def set_params(self, **values: Value | str) -> None:
        self.current().set_params(**values)

    def set_motion_params(self, step: int, **values: Sequence[Value | str]) -> None:
        self.current().set_motion_params(step, **values)

    def get_sample(self) -> int:
        return self.current().get_sample()

    def step_is_on(self, step: int) -> bool:
        return self.current().step_is_on(step)

    def function_is_on(self, name: str) -> bool:
        return self.current().function_is_on(name)

    def get_param(self, name: str) -> int:
        return self.current().get_param(name)

    def get_motion_param(self, step: int, name: str) -> MotionRead:
        return self.current().get_motion_param(step, name)

    def get_raw_motion(self, step: int, name: str) -> int | Tuple[int, int]:
        return self.current().get_raw_motion(step, name)

    # -- export ------------------------------------------------------------

    def list_modified_patterns(self) -> List[int]:
        return [idx + 1 for idx, count in enumerate(self.modified) if count]

    def export(
        self,
        base_name: Path | str,
        *,
        encoder: Path | str | None = None,
        run_encoder: bool = True,
    ) -> ExportResult:
        return export_project(self, base_name, encoder=encoder, run_encoder=run_encoder)


__all__ = ["PartHandle", "Project"]
