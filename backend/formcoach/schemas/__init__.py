"""Pydantic schemas for API request/response models."""

from formcoach.schemas.session import (
    SessionCreate,
    ModeUpdate,
    LandmarkIn,
    FrameIn,
    SessionStats,
    SessionResponse,
    FrameResult,
)

__all__ = [
    "SessionCreate",
    "ModeUpdate",
    "LandmarkIn",
    "FrameIn",
    "SessionStats",
    "SessionResponse",
    "FrameResult",
]
