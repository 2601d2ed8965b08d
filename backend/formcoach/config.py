"""Application configuration."""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "FormCoach"
    debug: bool = False
    api_prefix: str = "/api"
    cors_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Live sessions kept in memory at once
    max_active_sessions: int = 100
    session_idle_timeout_seconds: float = 600.0  # Untouched sessions are evicted after this

    # Pose input
    visibility_threshold: float = 0.5  # Landmarks at or below this are untracked

    # Push-ups
    pushup_elbow_angle_down: float = 90.0  # Below this = bottom of the rep
    pushup_elbow_angle_up: float = 160.0   # Above this = arms locked out
    pushup_straight_abs_cos_min: float = 0.90  # Shoulder-hip-ankle straightness
    pushup_warning_cooldown_ms: int = 2000

    # Squats
    squat_knee_angle_down: float = 80.0   # Reported depth cue; counting follows the hip line
    squat_knee_angle_up: float = 165.0
    squat_strict_posture: bool = False  # Off = squats are never flagged
    squat_hip_angle_min_deg: float = 150.0
    squat_torso_tilt_max_deg: float = 45.0

    # Lunges
    lunge_front_knee_angle_down: float = 85.0
    lunge_front_knee_angle_up: float = 160.0
    lunge_back_knee_angle_down: float = 90.0
    lunge_back_knee_angle_up: float = 150.0

    # Plank
    plank_straight_abs_cos_min: float = 0.90
    plank_horizontal_max_deg: float = 35.0  # Torso tilt allowed from horizontal
    plank_knee_min_deg: float = 150.0       # Rejects bent-knee planks
    plank_warning_cooldown_ms: int = 2000

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
