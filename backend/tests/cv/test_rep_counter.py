"""Tests for the per-exercise repetition state machines."""

import pytest

from builders import J, lunge_points, make_frame, pushup_points, squat_points
from formcoach.cv.exercise import ExerciseMode, ExerciseThresholds
from formcoach.cv.rep_counter import (
    LungeStateMachine,
    PushUpStateMachine,
    RepPhase,
    SquatStateMachine,
    create_rep_state_machine,
)


def feed(machine, frames):
    return [machine.update(frame) for frame in frames]


class TestPushUps:
    def test_counts_on_return_to_up(self):
        machine = PushUpStateMachine()
        updates = feed(machine, [make_frame(pushup_points(a)) for a in [170, 170, 80, 80, 170]])

        assert [u.counted for u in updates] == [False, False, False, False, True]
        assert updates[2].phase is RepPhase.DOWN and updates[2].phase_changed
        assert not updates[3].phase_changed
        assert machine.count == 1
        assert machine.phase is RepPhase.UP

    def test_hysteresis_band_never_counts(self):
        machine = PushUpStateMachine()
        feed(machine, [make_frame(pushup_points(a)) for a in [170, 120, 170, 120]])
        assert machine.count == 0
        assert machine.phase is RepPhase.UP

    def test_partial_press_stays_down(self):
        machine = PushUpStateMachine()
        feed(machine, [make_frame(pushup_points(a)) for a in [80, 150, 120]])
        assert machine.phase is RepPhase.DOWN
        assert machine.count == 0

    def test_reports_elbow_angle(self):
        update = PushUpStateMachine().update(make_frame(pushup_points(120)))
        assert update.angle == pytest.approx(120.0, abs=0.01)

    def test_missing_wrist_skips_frame(self):
        machine = PushUpStateMachine()
        update = machine.update(make_frame(pushup_points(80), hidden=[J.RIGHT_WRIST]))
        assert update.skipped
        assert machine.phase is RepPhase.UP

    def test_custom_thresholds(self):
        machine = PushUpStateMachine(ExerciseThresholds(pushup_elbow_angle_down=130.0))
        feed(machine, [make_frame(pushup_points(a)) for a in [120, 170]])
        assert machine.count == 1

    def test_reset(self):
        machine = PushUpStateMachine()
        feed(machine, [make_frame(pushup_points(a)) for a in [80, 170, 80]])
        machine.reset()
        assert (machine.count, machine.phase) == (0, RepPhase.UP)


class TestSquats:
    def test_counts_on_reaching_depth(self):
        machine = SquatStateMachine()
        updates = feed(machine, [make_frame(squat_points(y)) for y in [0.50, 0.75, 0.78, 0.60]])

        assert [u.counted for u in updates] == [False, True, False, False]
        assert machine.count == 1
        assert machine.phase is RepPhase.UP

    def test_hips_level_with_knees_holds_phase(self):
        machine = SquatStateMachine()
        feed(machine, [make_frame(squat_points(0.70))])
        assert machine.phase is RepPhase.UP

        feed(machine, [make_frame(squat_points(0.75)), make_frame(squat_points(0.70))])
        assert machine.phase is RepPhase.DOWN

    def test_two_reps(self):
        machine = SquatStateMachine()
        feed(machine, [make_frame(squat_points(y)) for y in [0.50, 0.75, 0.50, 0.75, 0.50]])
        assert machine.count == 2

    def test_missing_knee_skips_frame(self):
        machine = SquatStateMachine()
        assert machine.update(make_frame(squat_points(0.75), hidden=[J.LEFT_KNEE])).skipped
        assert machine.count == 0


class TestLunges:
    def test_counts_on_entering_lunge(self):
        machine = LungeStateMachine()
        updates = feed(
            machine,
            [make_frame(lunge_points(l, r)) for l, r in [(170, 170), (80, 170), (75, 165), (170, 170)]],
        )
        assert [u.counted for u in updates] == [False, True, False, False]
        assert updates[3].phase is RepPhase.UP and updates[3].phase_changed
        assert machine.count == 1

    def test_front_leg_is_more_bent_knee(self):
        machine = LungeStateMachine()
        update = machine.update(make_frame(lunge_points(170, 80)))
        assert update.counted
        assert update.angle == pytest.approx(80.0, abs=0.01)

    def test_back_knee_alone_enters_lunge(self):
        # Front knee just above its threshold, back knee under its own
        machine = LungeStateMachine()
        assert machine.update(make_frame(lunge_points(87, 89))).counted

    def test_partial_stand_does_not_rearm(self):
        machine = LungeStateMachine()
        feed(
            machine,
            [make_frame(lunge_points(l, r)) for l, r in [(80, 170), (150, 170), (80, 170)]],
        )
        assert machine.count == 1
        assert machine.phase is RepPhase.DOWN

    def test_missing_ankle_skips_frame(self):
        machine = LungeStateMachine()
        assert machine.update(make_frame(lunge_points(80, 170), hidden=[J.LEFT_ANKLE])).skipped


@pytest.mark.parametrize(
    "mode, machine_cls",
    [
        (ExerciseMode.PUSH_UPS, PushUpStateMachine),
        (ExerciseMode.SQUATS, SquatStateMachine),
        (ExerciseMode.LUNGES, LungeStateMachine),
    ],
)
def test_factory(mode, machine_cls):
    assert isinstance(create_rep_state_machine(mode), machine_cls)


def test_factory_has_no_machine_for_plank():
    assert create_rep_state_machine(ExerciseMode.PLANK) is None


def test_squat_reports_knee_angle_when_ankles_visible():
    machine = SquatStateMachine()
    assert machine.update(make_frame(squat_points(0.50))).angle == pytest.approx(180.0, abs=0.01)

    update = machine.update(make_frame(squat_points(0.75), hidden=[J.LEFT_ANKLE]))
    assert update.counted
    assert update.angle is None
