"""
Rule-based posture classification.

Each exercise has its own notion of "good form":
- Push-ups: shoulders, hips and ankles (or knees) on one straight line
- Plank: the same straight line, held roughly horizontal, with straight knees
- Squats / Lunges: not judged by default; rep detection alone drives feedback

A frame where a required joint is not tracked cannot be judged. The
classifier then says so instead of guessing, and callers treat it as
"unknown" rather than "bad".
"""

from enum import Enum
from typing import Optional

import logging

from formcoach.cv.exercise import ExerciseMode, ExerciseThresholds
from formcoach.cv.geometry import abs_cosine, angle_at, is_near_horizontal, tilt_from_vertical_deg, vector
from formcoach.cv.landmarks import ANKLES, HIPS, KNEES, SHOULDERS, BodyJoint, LandmarkFrame

logger = logging.getLogger(__name__)


class PostureStatus(Enum):
    """Posture as reported to listeners."""
    CORRECT = "correct"
    INCORRECT = "incorrect"
    UNKNOWN = "unknown"


class PostureVerdict(Enum):
    """Result of evaluating a single frame."""
    CORRECT = "correct"
    INCORRECT = "incorrect"
    NOT_EVALUABLE = "not_evaluable"

    @property
    def status(self) -> PostureStatus:
        if self is PostureVerdict.CORRECT:
            return PostureStatus.CORRECT
        if self is PostureVerdict.INCORRECT:
            return PostureStatus.INCORRECT
        return PostureStatus.UNKNOWN


# Joints that must be tracked before body alignment can be judged
BODY_LINE_JOINTS = SHOULDERS + HIPS + KNEES


class PostureClassifier:
    """Stateless per-frame posture judge for every exercise mode."""

    def __init__(self, thresholds: Optional[ExerciseThresholds] = None):
        self.thresholds = thresholds or ExerciseThresholds()

    def evaluate(self, frame: LandmarkFrame, mode: ExerciseMode) -> PostureVerdict:
        if mode is ExerciseMode.PLANK:
            verdict = self._evaluate_plank(frame)
        elif mode is ExerciseMode.SQUATS:
            verdict = self._evaluate_squat(frame)
        elif mode is ExerciseMode.LUNGES:
            verdict = PostureVerdict.CORRECT
        else:
            verdict = self._evaluate_pushup(frame)

        logger.debug(f"Posture({mode.value}): {verdict.value}")
        return verdict

    def _body_line_cosine(self, frame: LandmarkFrame) -> float:
        """
        How straight the shoulder-hip-feet line is, as |cos| of the angle
        between hip->shoulder and hip->ankles (knees when ankles are hidden).
        """
        shoulder_center = frame.center(SHOULDERS)
        hip_center = frame.center(HIPS)
        if frame.all_tracked(ANKLES):
            target = frame.center(ANKLES)
        else:
            target = frame.center(KNEES)

        return abs_cosine(vector(hip_center, shoulder_center), vector(hip_center, target))

    def _evaluate_pushup(self, frame: LandmarkFrame) -> PostureVerdict:
        if not frame.all_tracked(BODY_LINE_JOINTS):
            return PostureVerdict.NOT_EVALUABLE

        straight = self._body_line_cosine(frame) >= self.thresholds.pushup_straight_abs_cos_min
        return PostureVerdict.CORRECT if straight else PostureVerdict.INCORRECT

    def _evaluate_plank(self, frame: LandmarkFrame) -> PostureVerdict:
        if not frame.all_tracked(BODY_LINE_JOINTS):
            return PostureVerdict.NOT_EVALUABLE

        cfg = self.thresholds
        straight = self._body_line_cosine(frame) >= cfg.plank_straight_abs_cos_min

        torso = vector(frame.center(HIPS), frame.center(SHOULDERS))
        horizontal = is_near_horizontal(torso, cfg.plank_horizontal_max_deg)

        # Sagging or bent knees only show when the ankles are in view
        knees_ok = True
        if frame.all_tracked(ANKLES):
            left_knee = angle_at(
                frame.point(BodyJoint.LEFT_HIP),
                frame.point(BodyJoint.LEFT_KNEE),
                frame.point(BodyJoint.LEFT_ANKLE),
            )
            right_knee = angle_at(
                frame.point(BodyJoint.RIGHT_HIP),
                frame.point(BodyJoint.RIGHT_KNEE),
                frame.point(BodyJoint.RIGHT_ANKLE),
            )
            knees_ok = left_knee >= cfg.plank_knee_min_deg and right_knee >= cfg.plank_knee_min_deg

        if straight and horizontal and knees_ok:
            return PostureVerdict.CORRECT
        return PostureVerdict.INCORRECT

    def _evaluate_squat(self, frame: LandmarkFrame) -> PostureVerdict:
        cfg = self.thresholds
        if not cfg.squat_strict_posture:
            return PostureVerdict.CORRECT

        if not frame.all_tracked(BODY_LINE_JOINTS):
            return PostureVerdict.NOT_EVALUABLE

        hip_left = angle_at(
            frame.point(BodyJoint.LEFT_SHOULDER),
            frame.point(BodyJoint.LEFT_HIP),
            frame.point(BodyJoint.LEFT_KNEE),
        )
        hip_right = angle_at(
            frame.point(BodyJoint.RIGHT_SHOULDER),
            frame.point(BodyJoint.RIGHT_HIP),
            frame.point(BodyJoint.RIGHT_KNEE),
        )
        hip_angle = (hip_left + hip_right) / 2

        torso = vector(frame.center(HIPS), frame.center(SHOULDERS))
        tilt = tilt_from_vertical_deg(torso)

        if hip_angle >= cfg.squat_hip_angle_min_deg and tilt <= cfg.squat_torso_tilt_max_deg:
            return PostureVerdict.CORRECT
        return PostureVerdict.INCORRECT
