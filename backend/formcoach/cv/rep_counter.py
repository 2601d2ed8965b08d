"""
Repetition counting state machines.

Every counted exercise uses the same two phases, UP (start / standing) and
DOWN (bottom position). What differs is the signal that moves between them
and the transition that counts:

1. PUSH-UPS: average elbow angle with a hysteresis band. Counted on the
   way back UP, so a rep is a full lower-and-press cycle.
2. SQUATS: hip line against knee line. Counted on entering DOWN.
3. LUNGES: front/back knee angles or hip below front knee. Counted on
   entering DOWN; both legs must straighten before the next rep.

Plank has no phases and is timed by HoldTimer instead.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import logging

from formcoach.cv.exercise import ExerciseMode, ExerciseThresholds
from formcoach.cv.geometry import angle_at
from formcoach.cv.landmarks import ANKLES, ELBOWS, HIPS, KNEES, SHOULDERS, WRISTS, BodyJoint, LandmarkFrame

logger = logging.getLogger(__name__)


class RepPhase(Enum):
    """Phase of the current repetition."""
    UP = "up"
    DOWN = "down"


@dataclass
class RepCounterState:
    phase: RepPhase = RepPhase.UP
    count: int = 0


@dataclass
class RepUpdate:
    """Outcome of feeding one frame to a state machine."""
    phase: RepPhase
    count: int
    counted: bool = False
    phase_changed: bool = False
    angle: Optional[float] = None  # Driving angle for this frame, if any
    skipped: bool = False  # Frame lacked joints the machine needs


class RepStateMachine:
    """Base two-phase counter. Subclasses decide when to move and when to count."""

    exercise: ExerciseMode
    required_joints: Tuple[BodyJoint, ...] = ()

    def __init__(self, thresholds: Optional[ExerciseThresholds] = None):
        self.thresholds = thresholds or ExerciseThresholds()
        self.state = RepCounterState()

    @property
    def phase(self) -> RepPhase:
        return self.state.phase

    @property
    def count(self) -> int:
        return self.state.count

    def reset(self):
        self.state = RepCounterState()

    def update(self, frame: LandmarkFrame) -> RepUpdate:
        if not frame.all_tracked(self.required_joints):
            return RepUpdate(phase=self.state.phase, count=self.state.count, skipped=True)
        return self._step(frame)

    def _step(self, frame: LandmarkFrame) -> RepUpdate:
        raise NotImplementedError

    def _transition(self, phase: RepPhase, count: bool, angle: Optional[float] = None) -> RepUpdate:
        self.state.phase = phase
        if count:
            self.state.count += 1
            logger.info(f"{self.exercise.value}: rep #{self.state.count} counted")
        else:
            logger.debug(f"{self.exercise.value}: -> {phase.value}")
        return RepUpdate(
            phase=phase,
            count=self.state.count,
            counted=count,
            phase_changed=True,
            angle=angle,
        )

    def _hold(self, angle: Optional[float] = None) -> RepUpdate:
        return RepUpdate(phase=self.state.phase, count=self.state.count, angle=angle)


def _knee_angles(frame: LandmarkFrame) -> Tuple[float, float]:
    """(left, right) hip-knee-ankle angles."""
    left = angle_at(
        frame.point(BodyJoint.LEFT_HIP),
        frame.point(BodyJoint.LEFT_KNEE),
        frame.point(BodyJoint.LEFT_ANKLE),
    )
    right = angle_at(
        frame.point(BodyJoint.RIGHT_HIP),
        frame.point(BodyJoint.RIGHT_KNEE),
        frame.point(BodyJoint.RIGHT_ANKLE),
    )
    return left, right


class PushUpStateMachine(RepStateMachine):
    """
    Push-up counter on the average elbow angle.

    Between ELBOW_ANGLE_DOWN and ELBOW_ANGLE_UP nothing happens, so jitter
    around either threshold cannot double count.
    """

    exercise = ExerciseMode.PUSH_UPS
    required_joints = SHOULDERS + ELBOWS + WRISTS

    def _step(self, frame: LandmarkFrame) -> RepUpdate:
        left = angle_at(
            frame.point(BodyJoint.LEFT_SHOULDER),
            frame.point(BodyJoint.LEFT_ELBOW),
            frame.point(BodyJoint.LEFT_WRIST),
        )
        right = angle_at(
            frame.point(BodyJoint.RIGHT_SHOULDER),
            frame.point(BodyJoint.RIGHT_ELBOW),
            frame.point(BodyJoint.RIGHT_WRIST),
        )
        elbow_angle = (left + right) / 2

        logger.debug(
            f"Elbow angle: {elbow_angle:.1f}, state={self.state.phase.value}, count={self.state.count}"
        )

        cfg = self.thresholds
        if self.state.phase is RepPhase.UP and elbow_angle < cfg.pushup_elbow_angle_down:
            return self._transition(RepPhase.DOWN, count=False, angle=elbow_angle)
        if self.state.phase is RepPhase.DOWN and elbow_angle > cfg.pushup_elbow_angle_up:
            return self._transition(RepPhase.UP, count=True, angle=elbow_angle)
        return self._hold(elbow_angle)


class SquatStateMachine(RepStateMachine):
    """
    Squat counter on hip height relative to the knees.

    Image y grows downward, so hips "below" the knees means hip_y > knee_y.
    The rep counts as soon as depth is reached.
    """

    exercise = ExerciseMode.SQUATS
    required_joints = HIPS + KNEES

    def _step(self, frame: LandmarkFrame) -> RepUpdate:
        hip_y = frame.center(HIPS)[1]
        knee_y = frame.center(KNEES)[1]

        # Knee angle is reported only; ankles are not required for counting
        knee_angle = None
        if frame.all_tracked(ANKLES):
            knee_angle = sum(_knee_angles(frame)) / 2
            cfg = self.thresholds
            logger.debug(
                f"Squat knee angle: {knee_angle:.1f} "
                f"(deep={knee_angle <= cfg.squat_knee_angle_down}, "
                f"straight={knee_angle >= cfg.squat_knee_angle_up})"
            )

        if self.state.phase is RepPhase.UP and hip_y > knee_y:
            return self._transition(RepPhase.DOWN, count=True, angle=knee_angle)
        if self.state.phase is RepPhase.DOWN and hip_y < knee_y:
            return self._transition(RepPhase.UP, count=False, angle=knee_angle)
        return self._hold(knee_angle)


class LungeStateMachine(RepStateMachine):
    """
    Lunge counter.

    The front leg is whichever knee is more bent. Reaching the lunge is
    deliberately lenient (any one of three cues); standing back up is strict
    (both knees straight).
    """

    exercise = ExerciseMode.LUNGES
    required_joints = HIPS + KNEES + ANKLES

    def _step(self, frame: LandmarkFrame) -> RepUpdate:
        left_angle, right_angle = _knee_angles(frame)
        if left_angle < right_angle:
            front_angle, back_angle = left_angle, right_angle
            front_knee = BodyJoint.LEFT_KNEE
        else:
            front_angle, back_angle = right_angle, left_angle
            front_knee = BodyJoint.RIGHT_KNEE

        hip_y = frame.center(HIPS)[1]
        hip_below_front_knee = hip_y > frame.point(front_knee)[1]

        cfg = self.thresholds
        in_lunge = (
            front_angle <= cfg.lunge_front_knee_angle_down
            or back_angle <= cfg.lunge_back_knee_angle_down
            or hip_below_front_knee
        )
        standing = (
            front_angle >= cfg.lunge_front_knee_angle_up
            and back_angle >= cfg.lunge_back_knee_angle_up
        )

        if self.state.phase is RepPhase.UP and in_lunge:
            return self._transition(RepPhase.DOWN, count=True, angle=front_angle)
        if self.state.phase is RepPhase.DOWN and standing:
            return self._transition(RepPhase.UP, count=False, angle=front_angle)
        return self._hold(front_angle)


_MACHINES = {
    ExerciseMode.PUSH_UPS: PushUpStateMachine,
    ExerciseMode.SQUATS: SquatStateMachine,
    ExerciseMode.LUNGES: LungeStateMachine,
}


def create_rep_state_machine(
    mode: ExerciseMode,
    thresholds: Optional[ExerciseThresholds] = None,
) -> Optional[RepStateMachine]:
    """State machine for a counted exercise, or None for timed ones (plank)."""
    machine_cls = _MACHINES.get(mode)
    if machine_cls is None:
        return None
    return machine_cls(thresholds)
