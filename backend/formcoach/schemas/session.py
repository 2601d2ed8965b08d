"""Workout session schemas."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from formcoach.cv.exercise import ExerciseMode
from formcoach.cv.landmarks import LANDMARK_COUNT


def _validate_mode(v: str) -> str:
    try:
        return ExerciseMode.parse(v).value
    except ValueError:
        raise ValueError(f"mode must be one of: {ExerciseMode.all()}")


class SessionCreate(BaseModel):
    """Schema for starting a workout segment."""
    mode: str = Field(ExerciseMode.PUSH_UPS.value, description="pushups, squats, lunges or plank")

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, v: str) -> str:
        return _validate_mode(v)


class ModeUpdate(BaseModel):
    """Schema for switching exercise (resets the session)."""
    mode: str

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, v: str) -> str:
        return _validate_mode(v)


class LandmarkIn(BaseModel):
    """One landmark as reported by the pose estimator."""
    x: float
    y: float
    visibility: Optional[float] = None


class FrameIn(BaseModel):
    """
    One video frame of landmarks.

    landmarks is null (or empty) when the estimator found no body. Entries
    follow the 33-point MediaPipe Pose numbering.
    """
    landmarks: Optional[List[Optional[LandmarkIn]]] = Field(None, max_length=LANDMARK_COUNT)
    timestamp_ms: Optional[float] = None

    def landmark_dicts(self) -> Optional[List[Optional[Dict[str, Any]]]]:
        if self.landmarks is None:
            return None
        return [lm.model_dump() if lm is not None else None for lm in self.landmarks]


class SessionStats(BaseModel):
    """Snapshot of a session."""
    mode: str
    count: int
    phase: str
    posture: str
    elapsed_seconds: int


class SessionResponse(BaseModel):
    """Schema for a newly created session."""
    session_id: str
    stats: SessionStats


class FrameResult(BaseModel):
    """Events produced by one frame plus the resulting stats."""
    events: List[Dict[str, Any]]
    stats: SessionStats
