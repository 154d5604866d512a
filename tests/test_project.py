"""Tests for the cursor API, part handles and dirty tracking."""

from pathlib import Path
import sys

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from volca.errors import (  # noqa: E402
    InvalidSelector,
    MalformedMotionInput,
    OutOfRange,
    UnknownFunction,
    UnknownParameter,
)
from volca.params import DEFAULT_PARAMS, FUNCTION_NAMES, PARAM_NAMES, PARAM_RANGE  # noqa: E402
from volca.part import Part  # noqa: E402
from volca.project import Project  # noqa: E402
from volca.validate import RANDOM  # noqa: E402


@pytest.fixture
def project() -> Project:
    return Project(seed=42)


# ── selection ─────────────────────────────────────────────────────────


def test_cursor_defaults_to_first_part(project: Project) -> None:
    assert project.get_pattern() == 1
    assert project.get_part() == 1


@pytest.mark.parametrize("pattern", range(1, 11))
@pytest.mark.parametrize("part", range(1, 11))
def test_select_round_trip(project: Project, pattern: int, part: int) -> None:
    project.select_pattern(pattern)
    project.select_part(part)
    assert project.get_pattern() == pattern
    assert project.get_part() == part


@pytest.mark.parametrize("bad", [0, 11, -3])
def test_select_out_of_bounds(project: Project, bad: int) -> None:
    with pytest.raises(InvalidSelector):
        project.select_pattern(bad)
    with pytest.raises(InvalidSelector):
        project.select_part(bad)
    assert project.get_pattern() == 1
    assert project.get_part() == 1


def test_select_random_lands_in_range(project: Project) -> None:
    for _ in range(50):
        project.select_pattern("random")
        project.select_part(RANDOM)
        assert 1 <= project.get_pattern() <= 10
        assert 1 <= project.get_part() <= 10


def test_selection_does_not_mark_dirty(project: Project) -> None:
    project.select_pattern(4)
    project.select_part(7)
    assert project.list_modified_patterns() == []


# ── sample ────────────────────────────────────────────────────────────


def test_set_sample(project: Project) -> None:
    project.set_sample(42)
    assert project.get_sample() == 42
    project.set_sample(0)
    assert project.get_sample() == 0
    project.set_sample(99)
    assert project.get_sample() == 99


@pytest.mark.parametrize("bad", [-1, 100])
def test_set_sample_out_of_range(project: Project, bad: int) -> None:
    with pytest.raises(OutOfRange):
        project.set_sample(bad)
    assert project.get_sample() == 0
    assert project.list_modified_patterns() == []


def test_set_sample_random(project: Project) -> None:
    project.set_sample("random")
    assert 0 <= project.get_sample() <= 99


# ── steps ─────────────────────────────────────────────────────────────


def test_set_step_turns_only_that_step_on(project: Project) -> None:
    project.set_step(5)
    assert project.step_is_on(5) is True
    for step in range(1, 17):
        if step != 5:
            assert project.step_is_on(step) is False


@pytest.mark.parametrize("bad", [0, 17])
def test_set_step_bounds(project: Project, bad: int) -> None:
    with pytest.raises(InvalidSelector):
        project.set_step(bad)
    with pytest.raises(InvalidSelector):
        project.step_is_on(bad)


def test_set_step_rejects_random(project: Project) -> None:
    with pytest.raises(InvalidSelector):
        project.set_step("random")  # type: ignore[arg-type]


def test_set_steps_four_on_the_floor(project: Project) -> None:
    project.set_steps([1, 0, 0, 0, 1, 0, 0, 0, 1, 0, 0, 0, 1, 0, 0, 0])
    on = [step for step in range(1, 17) if project.step_is_on(step)]
    assert on == [1, 5, 9, 13]


def test_set_steps_is_or_only(project: Project) -> None:
    project.set_step(2)
    project.set_steps([1, 0, 0])
    assert project.step_is_on(1)
    assert project.step_is_on(2)


def test_set_steps_short_list(project: Project) -> None:
    project.set_steps([0, 0, 1])
    assert project.current().state.step_mask == 0b100


def test_set_steps_rejects_long_or_bad_lists(project: Project) -> None:
    with pytest.raises(InvalidSelector):
        project.set_steps([1] * 17)
    with pytest.raises(OutOfRange):
        project.set_steps([1, 3])
    assert project.current().state.step_mask == 0


def test_clear_step(project: Project) -> None:
    project.set_steps([1, 1, 1])
    project.clear_step(2)
    assert [project.step_is_on(s) for s in (1, 2, 3)] == [True, False, True]


# ── functions ─────────────────────────────────────────────────────────


def test_set_function_reverb_only(project: Project) -> None:
    project.set_function("reverb")
    assert project.function_is_on("reverb") is True
    for name in FUNCTION_NAMES:
        if name != "reverb":
            assert project.function_is_on(name) is False


def test_set_function_idempotent_and_multiple(project: Project) -> None:
    project.set_function("reverb", "reverse")
    project.set_function("reverb")
    assert int(project.current().state.functions) == 0x04 | 0x08


def test_set_function_loop_is_accepted(project: Project) -> None:
    project.set_function("loop")
    assert project.function_is_on("loop")


def test_set_function_unknown_name_is_atomic(project: Project) -> None:
    with pytest.raises(UnknownFunction):
        project.set_function("mute", "accent")
    assert not project.function_is_on("mute")
    with pytest.raises(UnknownFunction):
        project.function_is_on("accent")


def test_clear_function(project: Project) -> None:
    project.set_function("mute", "motion")
    project.clear_function("mute")
    assert not project.function_is_on("mute")
    assert project.function_is_on("motion")


# ── params ────────────────────────────────────────────────────────────


def test_fresh_part_has_factory_params(project: Project) -> None:
    assert [project.get_param(name) for name in PARAM_NAMES] == list(DEFAULT_PARAMS)


@pytest.mark.parametrize("name", PARAM_NAMES)
def test_set_params_round_trip(project: Project, name: str) -> None:
    low, high = PARAM_RANGE[name]
    for value in (low, (low + high) // 2, high):
        project.set_params(**{name: value})
        assert project.get_param(name) == value


def test_pan_bounds(project: Project) -> None:
    with pytest.raises(OutOfRange):
        project.set_params(pan=0)
    with pytest.raises(OutOfRange):
        project.set_params(pan=128)
    project.set_params(pan=64)
    assert project.get_param("pan") == 64


def test_set_params_rejects_without_partial_write(project: Project) -> None:
    with pytest.raises(OutOfRange):
        project.set_params(level=10, speed=20)
    assert project.get_param("level") == 127
    with pytest.raises(UnknownParameter):
        project.set_params(level=10, cutoff=3)
    assert project.get_param("level") == 127
    assert project.list_modified_patterns() == []


def test_set_params_random(project: Project) -> None:
    project.set_params(pan="random", speed="rand", level=RANDOM)
    assert 1 <= project.get_param("pan") <= 127
    assert 40 <= project.get_param("speed") <= 88
    assert 0 <= project.get_param("level") <= 127


def test_get_param_unknown(project: Project) -> None:
    with pytest.raises(UnknownParameter):
        project.get_param("cutoff")


# ── motion ────────────────────────────────────────────────────────────


def test_motion_round_trip_two_lane(project: Project) -> None:
    project.set_motion_params(3, pan=[1, 127])
    assert project.get_motion_param(3, "pan") == (1, 127)
    assert project.get_raw_motion(3, "pan") == (129, 255)


def test_motion_round_trip_single_lane(project: Project) -> None:
    project.set_motion_params(1, hi_cut=[90])
    assert project.get_motion_param(1, "hi_cut") == 90
    assert project.get_raw_motion(1, "hi_cut") == 218


def test_speed_motion_is_unbiased(project: Project) -> None:
    project.set_motion_params(16, speed=[40, 88])
    assert project.get_raw_motion(16, "speed") == (40, 88)
    assert project.get_motion_param(16, "speed") == (40, 88)


def test_unset_motion_reads_none(project: Project) -> None:
    assert project.get_motion_param(2, "level") == (None, None)
    assert project.get_motion_param(2, "length") is None


def test_motion_writes_expected_slots(project: Project) -> None:
    project.set_motion_params(2, level=[10, 20], amp_decay=[30])
    motion = project.current().state.motion
    assert motion[0 * 16 + 1] == 138
    assert motion[1 * 16 + 1] == 148
    assert motion[7 * 16 + 1] == 158
    assert sum(1 for v in motion if v) == 3


def test_motion_multiple_params_one_call(project: Project) -> None:
    project.set_motion_params(1, pan=[127, 1], hi_cut=[90])
    assert project.get_motion_param(1, "pan") == (127, 1)
    assert project.get_motion_param(1, "hi_cut") == 90
    assert project.modified[0] == 1


def test_motion_random_values(project: Project) -> None:
    project.set_motion_params(4, pan=["random", "random"], speed=[RANDOM, 64])
    start, end = project.get_motion_param(4, "pan")
    assert 1 <= start <= 127 and 1 <= end <= 127
    raw_speed = project.get_raw_motion(4, "speed")
    assert 1 <= raw_speed[0] <= 127
    assert raw_speed[1] == 64


def test_motion_malformed_input_is_atomic(project: Project) -> None:
    with pytest.raises(MalformedMotionInput):
        project.set_motion_params(1, hi_cut=[90], pan=[64])
    with pytest.raises(OutOfRange):
        project.set_motion_params(1, hi_cut=[90], length=[0])
    assert not any(project.current().state.motion)
    assert project.list_modified_patterns() == []


def test_motion_step_bounds(project: Project) -> None:
    with pytest.raises(InvalidSelector):
        project.set_motion_params(17, hi_cut=[90])
    with pytest.raises(InvalidSelector):
        project.get_motion_param(0, "hi_cut")


# ── dirty tracking ────────────────────────────────────────────────────


def test_fresh_project_has_no_modified_patterns(project: Project) -> None:
    assert project.list_modified_patterns() == []
    assert project.modified == [0] * 10


def test_single_mutation_marks_only_its_pattern(project: Project) -> None:
    project.select_pattern(4)
    project.set_step(1)
    assert project.list_modified_patterns() == [4]


def test_every_mutator_counts(project: Project) -> None:
    project.select_pattern(2)
    project.set_sample(1)
    project.set_function("mute")
    project.set_step(1)
    project.set_steps([1])
    project.set_params(level=1)
    project.set_motion_params(1, hi_cut=[1])
    assert project.modified[1] == 6


def test_modified_patterns_sorted(project: Project) -> None:
    for number in (9, 3, 10, 3):
        project.select_pattern(number)
        project.set_step(1)
    assert project.list_modified_patterns() == [3, 9, 10]


# ── handles ───────────────────────────────────────────────────────────


def test_handle_addresses_part_without_cursor(project: Project) -> None:
    handle = project.part(7, 3)
    handle.set_sample(12)
    handle.set_step(16)
    assert handle.pattern == 7 and handle.part == 3
    assert project.get_pattern() == 1 and project.get_part() == 1
    assert project.patterns[6].parts[2].sample == 12
    assert project.list_modified_patterns() == [7]

    project.select_pattern(7)
    project.select_part(3)
    assert project.get_sample() == 12
    assert project.step_is_on(16)


def test_handles_share_state(project: Project) -> None:
    project.part(1, 1).set_params(level=5)
    assert project.part(1, 1).get_param("level") == 5
    assert project.part(1, 2).get_param("level") == 127


def test_handle_bounds(project: Project) -> None:
    with pytest.raises(InvalidSelector):
        project.part(11, 1)
    with pytest.raises(InvalidSelector):
        project.part(1, 0)


def test_parts_are_independent(project: Project) -> None:
    project.part(1, 1).set_step(1)
    assert project.patterns[0].parts[1] == Part()
    assert project.patterns[1].parts[0] == Part()


def test_seeded_projects_are_reproducible() -> None:
    a, b = Project(seed=7), Project(seed=7)
    for proj in (a, b):
        proj.set_sample("random")
        proj.set_params(pan="random", pitch_int="random")
        proj.set_motion_params(1, level=["random", "random"])
    assert a.patterns == b.patterns


def test_project_rejects_seed_and_rng() -> None:
    import random

    with pytest.raises(ValueError):
        Project(seed=1, rng=random.Random(1))
