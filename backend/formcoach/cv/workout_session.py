"""
Frame orchestration for one workout segment.

A WorkoutSession is created by the caller for each exercise segment and fed
one landmark frame at a time. Per frame it:

1. Handles tracking loss (no body in view)
2. Classifies posture for the active exercise
3. Notifies listeners when the posture status changes
4. On bad or unreadable posture: pauses the plank timer, withholds rep
   counting and issues rate-limited form warnings
5. On good posture: ticks the plank timer or advances the rep counter

Nothing here blocks or performs I/O; listeners are called synchronously and
a failing listener never aborts frame processing.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import logging

from formcoach.cv.events import (
    CallbackListener,
    FeedbackSeverity,
    FormFeedback,
    HoldTimeUpdated,
    PostureChanged,
    RepCounted,
    WorkoutListener,
)
from formcoach.cv.exercise import ExerciseMode, ExerciseThresholds
from formcoach.cv.hold_timer import HoldTimer
from formcoach.cv.landmarks import LandmarkFrame
from formcoach.cv.posture import PostureClassifier, PostureStatus, PostureVerdict
from formcoach.cv.rep_counter import RepPhase, RepStateMachine, RepUpdate, create_rep_state_machine

logger = logging.getLogger(__name__)

BAD_POSTURE_MESSAGE = "Dangerous posture - straighten your back!"
NOT_VISIBLE_MESSAGE = "Move into frame so your whole body is visible"
PUSHUP_DOWN_MESSAGE = "Good down position!"

REP_MESSAGES = {
    ExerciseMode.PUSH_UPS: "Perfect push-up! Count: {count}",
    ExerciseMode.SQUATS: "Squat {count}",
    ExerciseMode.LUNGES: "Lunge {count}",
}


def _wall_clock_ms() -> float:
    return time.time() * 1000


@dataclass
class PostureState:
    status: PostureStatus = PostureStatus.UNKNOWN
    last_change_at: Optional[float] = None


@dataclass
class WarningCooldown:
    last_warning_at: Optional[float] = None

    def ready(self, now_ms: float, cooldown_ms: float) -> bool:
        return self.last_warning_at is None or now_ms - self.last_warning_at > cooldown_ms


@dataclass
class WorkoutStats:
    """Snapshot of a session."""
    mode: ExerciseMode
    count: int
    phase: RepPhase
    posture: PostureStatus
    elapsed_seconds: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "count": self.count,
            "phase": self.phase.value,
            "posture": self.posture.value,
            "elapsed_seconds": self.elapsed_seconds,
        }


FrameInput = Union[LandmarkFrame, Sequence[Any], None]


class WorkoutSession:
    """
    Rep counter, posture monitor and hold timer for one workout segment.

    Args:
        mode: Exercise to track (ExerciseMode or its name)
        thresholds: Angle/cooldown configuration (defaults when None)
        clock: Returns the current time in milliseconds; used when a frame
            arrives without its own timestamp
    """

    def __init__(
        self,
        mode: Union[ExerciseMode, str] = ExerciseMode.PUSH_UPS,
        thresholds: Optional[ExerciseThresholds] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.thresholds = thresholds or ExerciseThresholds()
        self.classifier = PostureClassifier(self.thresholds)
        self._clock = clock or _wall_clock_ms
        self._listeners: List[WorkoutListener] = []

        self.mode = ExerciseMode.parse(mode)
        self.posture = PostureState()
        self.hold_timer = HoldTimer()
        self.cooldown = WarningCooldown()
        self.rep_machine: Optional[RepStateMachine] = create_rep_state_machine(self.mode, self.thresholds)
        self.last_frame_at: Optional[float] = None  # Time base of the frames seen so far

        logger.info(f"WorkoutSession created: mode={self.mode.value}")

    # ------------------------------------------------------------------
    # Listener registration
    # ------------------------------------------------------------------

    def add_listener(self, listener: WorkoutListener) -> WorkoutListener:
        self._listeners.append(listener)
        return listener

    def remove_listener(self, listener: WorkoutListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def set_callbacks(self, **callbacks) -> CallbackListener:
        """Register plain callables (see CallbackListener for signatures)."""
        return self.add_listener(CallbackListener(**callbacks))

    def _emit(self, handler: str, event):
        for listener in list(self._listeners):
            try:
                getattr(listener, handler)(event)
            except Exception:
                logger.exception(f"Listener {listener!r} failed handling {event.type.value}")

    # ------------------------------------------------------------------
    # Control surface
    # ------------------------------------------------------------------

    def set_exercise_mode(self, mode: Union[ExerciseMode, str]):
        """Switch exercise. All counters, timers and posture state start over."""
        new_mode = ExerciseMode.parse(mode)
        logger.info(f"Exercise mode: {self.mode.value} -> {new_mode.value}")
        self.mode = new_mode
        self.rep_machine = create_rep_state_machine(self.mode, self.thresholds)
        self.reset()

    def reset(self):
        """Zero counts and timers, forget posture; keep the current mode."""
        if self.rep_machine is not None:
            self.rep_machine.reset()
        self.hold_timer.reset()
        self.posture = PostureState()
        self.cooldown = WarningCooldown()

    def get_stats(self, now_ms: Optional[float] = None) -> WorkoutStats:
        """
        Snapshot at now_ms.

        When omitted, the time of the last processed frame is used so hold
        time stays on the same time base as the frame timestamps. The
        session clock is only used before any frame has arrived.
        """
        if now_ms is not None:
            now = now_ms
        elif self.last_frame_at is not None:
            now = self.last_frame_at
        else:
            now = self._clock()
        machine = self.rep_machine
        return WorkoutStats(
            mode=self.mode,
            count=machine.count if machine else 0,
            phase=machine.phase if machine else RepPhase.UP,
            posture=self.posture.status,
            elapsed_seconds=self.hold_timer.elapsed_seconds(now),
        )

    # ------------------------------------------------------------------
    # Frame processing
    # ------------------------------------------------------------------

    def process_frame(self, frame: FrameInput, timestamp_ms: Optional[float] = None):
        """
        Feed one frame from the pose estimator.

        Args:
            frame: LandmarkFrame, a raw 33-entry landmark list, or None when
                the estimator lost the body
            timestamp_ms: Capture time; the session clock is used when omitted
        """
        now = self._clock() if timestamp_ms is None else timestamp_ms
        self.last_frame_at = now

        if frame is not None and not isinstance(frame, LandmarkFrame):
            try:
                frame = LandmarkFrame.from_sequence(
                    frame, visibility_threshold=self.thresholds.visibility_threshold
                )
            except ValueError as e:
                logger.warning(f"Skipping malformed frame: {e}")
                return

        if frame is None or frame.is_empty:
            self._on_tracking_lost(now)
            return

        verdict = self.classifier.evaluate(frame, self.mode)
        self._update_posture(verdict.status, frame, now)

        if verdict is not PostureVerdict.CORRECT:
            self._on_bad_posture(verdict, now)
            return

        if self.mode is ExerciseMode.PLANK:
            elapsed = self.hold_timer.tick(True, now)
            self._emit("on_hold_time_updated", HoldTimeUpdated(elapsed_seconds=elapsed))
            return

        update = self.rep_machine.update(frame)
        self._on_rep_update(update, now)

    def _on_tracking_lost(self, now: float):
        logger.debug("No landmarks in frame")
        self._update_posture(PostureStatus.UNKNOWN, None, now)
        self._pause_hold(now)

    def _update_posture(self, status: PostureStatus, frame: Optional[LandmarkFrame], now: float):
        if status is self.posture.status:
            return
        logger.info(f"Posture {self.posture.status.value} -> {status.value}")
        self.posture = PostureState(status=status, last_change_at=now)
        self._emit("on_posture_changed", PostureChanged(status=status, frame=frame))

    def _pause_hold(self, now: float):
        elapsed = self.hold_timer.pause(now)
        if elapsed is not None:
            self._emit("on_hold_time_updated", HoldTimeUpdated(elapsed_seconds=elapsed))

    def _on_bad_posture(self, verdict: PostureVerdict, now: float):
        cooldown_ms = self.thresholds.warning_cooldown_ms(self.mode)
        if self.cooldown.ready(now, cooldown_ms):
            self.cooldown.last_warning_at = now
            if verdict is PostureVerdict.INCORRECT:
                self._feedback(BAD_POSTURE_MESSAGE, FeedbackSeverity.WARNING, now)
            else:
                self._feedback(NOT_VISIBLE_MESSAGE, FeedbackSeverity.INFO, now)

        if self.mode is ExerciseMode.PLANK:
            self._pause_hold(now)

    def _on_rep_update(self, update: RepUpdate, now: float):
        if update.counted:
            self._emit("on_rep_counted", RepCounted(total_count=update.count))
            message = REP_MESSAGES[self.mode].format(count=update.count)
            self._feedback(message, FeedbackSeverity.SUCCESS, now)
        elif (
            update.phase_changed
            and update.phase is RepPhase.DOWN
            and self.mode is ExerciseMode.PUSH_UPS
        ):
            self._feedback(PUSHUP_DOWN_MESSAGE, FeedbackSeverity.SUCCESS, now)

    def _feedback(self, message: str, severity: FeedbackSeverity, now: float):
        self._emit(
            "on_form_feedback",
            FormFeedback(message=message, severity=severity, timestamp_ms=now),
        )
