"""
Landmark processing for real-time workout tracking.

PIPELINE COMPONENTS:
1. geometry: Joint angles and body-line vector math
2. LandmarkFrame: One frame of landmarks addressed by BodyJoint role
3. PostureClassifier: Per-exercise correct / incorrect / not evaluable
4. RepStateMachine: UP/DOWN counters for push-ups, squats and lunges
5. HoldTimer: Accrual clock for planks
6. WorkoutSession: Per-frame orchestration and event emission

Usage:
    from formcoach.cv import WorkoutSession, ExerciseMode

    session = WorkoutSession(ExerciseMode.SQUATS)
    session.set_callbacks(on_rep_counted=lambda total: print(f"Rep {total}"))
    for landmarks in frames:
        session.process_frame(landmarks)
"""

from formcoach.cv.geometry import angle_at, abs_cosine, midpoint
from formcoach.cv.landmarks import (
    BodyJoint, Landmark, LandmarkFrame, MEDIAPIPE_INDEX, LANDMARK_COUNT
)
from formcoach.cv.exercise import ExerciseMode, ExerciseThresholds
from formcoach.cv.posture import PostureClassifier, PostureStatus, PostureVerdict
from formcoach.cv.rep_counter import (
    RepPhase,
    RepCounterState,
    RepUpdate,
    RepStateMachine,
    PushUpStateMachine,
    SquatStateMachine,
    LungeStateMachine,
    create_rep_state_machine,
)
from formcoach.cv.hold_timer import HoldTimer, HoldTimerState
from formcoach.cv.events import (
    EventType,
    FeedbackSeverity,
    RepCounted,
    PostureChanged,
    FormFeedback,
    HoldTimeUpdated,
    WorkoutListener,
    EventCollector,
    CallbackListener,
)
from formcoach.cv.workout_session import WorkoutSession, WorkoutStats

__all__ = [
    # Geometry
    "angle_at",
    "abs_cosine",
    "midpoint",

    # Landmarks
    "BodyJoint",
    "Landmark",
    "LandmarkFrame",
    "MEDIAPIPE_INDEX",
    "LANDMARK_COUNT",

    # Exercise configuration
    "ExerciseMode",
    "ExerciseThresholds",

    # Posture
    "PostureClassifier",
    "PostureStatus",
    "PostureVerdict",

    # Rep counting
    "RepPhase",
    "RepCounterState",
    "RepUpdate",
    "RepStateMachine",
    "PushUpStateMachine",
    "SquatStateMachine",
    "LungeStateMachine",
    "create_rep_state_machine",

    # Hold timer
    "HoldTimer",
    "HoldTimerState",

    # Events
    "EventType",
    "FeedbackSeverity",
    "RepCounted",
    "PostureChanged",
    "FormFeedback",
    "HoldTimeUpdated",
    "WorkoutListener",
    "EventCollector",
    "CallbackListener",

    # Orchestration
    "WorkoutSession",
    "WorkoutStats",
]
