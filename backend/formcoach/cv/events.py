"""Events emitted by a workout session and the listeners that receive them."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from formcoach.cv.landmarks import LandmarkFrame
from formcoach.cv.posture import PostureStatus


class EventType(str, Enum):
    REP_COUNTED = "rep_counted"
    POSTURE_CHANGED = "posture_changed"
    FORM_FEEDBACK = "form_feedback"
    HOLD_TIME_UPDATED = "hold_time_updated"


class FeedbackSeverity(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    INFO = "info"


@dataclass
class RepCounted:
    total_count: int
    type: EventType = EventType.REP_COUNTED

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "total_count": self.total_count}


@dataclass
class PostureChanged:
    status: PostureStatus
    frame: Optional[LandmarkFrame] = None
    type: EventType = EventType.POSTURE_CHANGED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "status": self.status.value,
            "landmarks": self.frame.to_dict() if self.frame is not None else None,
        }


@dataclass
class FormFeedback:
    message: str
    severity: FeedbackSeverity
    timestamp_ms: float
    type: EventType = EventType.FORM_FEEDBACK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "message": self.message,
            "severity": self.severity.value,
            "timestamp_ms": self.timestamp_ms,
        }


@dataclass
class HoldTimeUpdated:
    elapsed_seconds: int
    type: EventType = EventType.HOLD_TIME_UPDATED

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "elapsed_seconds": self.elapsed_seconds}


class WorkoutListener:
    """Receives session events. Override only what you need."""

    def on_rep_counted(self, event: RepCounted):
        pass

    def on_posture_changed(self, event: PostureChanged):
        pass

    def on_form_feedback(self, event: FormFeedback):
        pass

    def on_hold_time_updated(self, event: HoldTimeUpdated):
        pass


@dataclass
class EventCollector(WorkoutListener):
    """Buffers events in arrival order until drained."""
    events: List[Any] = field(default_factory=list)

    def on_rep_counted(self, event: RepCounted):
        self.events.append(event)

    def on_posture_changed(self, event: PostureChanged):
        self.events.append(event)

    def on_form_feedback(self, event: FormFeedback):
        self.events.append(event)

    def on_hold_time_updated(self, event: HoldTimeUpdated):
        self.events.append(event)

    def drain(self) -> List[Any]:
        events, self.events = self.events, []
        return events


class CallbackListener(WorkoutListener):
    """
    Adapts plain callables to the listener interface.

    Callbacks receive the bare payload rather than the event object:
    on_rep_counted(total), on_posture_changed(status, frame),
    on_form_feedback(message, severity, timestamp_ms),
    on_hold_time_updated(elapsed_seconds).
    """

    def __init__(
        self,
        on_rep_counted: Optional[Callable[[int], None]] = None,
        on_posture_changed: Optional[Callable[[PostureStatus, Optional[LandmarkFrame]], None]] = None,
        on_form_feedback: Optional[Callable[[str, FeedbackSeverity, float], None]] = None,
        on_hold_time_updated: Optional[Callable[[int], None]] = None,
    ):
        self._on_rep_counted = on_rep_counted
        self._on_posture_changed = on_posture_changed
        self._on_form_feedback = on_form_feedback
        self._on_hold_time_updated = on_hold_time_updated

    def on_rep_counted(self, event: RepCounted):
        if self._on_rep_counted:
            self._on_rep_counted(event.total_count)

    def on_posture_changed(self, event: PostureChanged):
        if self._on_posture_changed:
            self._on_posture_changed(event.status, event.frame)

    def on_form_feedback(self, event: FormFeedback):
        if self._on_form_feedback:
            self._on_form_feedback(event.message, event.severity, event.timestamp_ms)

    def on_hold_time_updated(self, event: HoldTimeUpdated):
        if self._on_hold_time_updated:
            self._on_hold_time_updated(event.elapsed_seconds)
