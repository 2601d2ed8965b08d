"""Exercise modes and the thresholds that drive posture and rep detection."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Union

from formcoach.config import Settings


class ExerciseMode(Enum):
    """Supported exercises."""
    PUSH_UPS = "pushups"
    SQUATS = "squats"
    LUNGES = "lunges"
    PLANK = "plank"

    @classmethod
    def all(cls) -> List[str]:
        return [mode.value for mode in cls]

    @classmethod
    def parse(cls, value: Union["ExerciseMode", str]) -> "ExerciseMode":
        """
        Resolve a mode from its name, tolerating common spellings.

        Raises:
            ValueError: For names that match no exercise
        """
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower().replace("-", "").replace("_", "").replace(" ", "")
        mode = _ALIASES.get(key)
        if mode is None:
            raise ValueError(f"Unknown exercise mode {value!r}. Must be one of: {cls.all()}")
        return mode

    @property
    def counts_reps(self) -> bool:
        """Plank is timed, everything else is counted."""
        return self is not ExerciseMode.PLANK


_ALIASES = {
    "pushups": ExerciseMode.PUSH_UPS,
    "pushup": ExerciseMode.PUSH_UPS,
    "squats": ExerciseMode.SQUATS,
    "squat": ExerciseMode.SQUATS,
    "lunges": ExerciseMode.LUNGES,
    "lunge": ExerciseMode.LUNGES,
    "plank": ExerciseMode.PLANK,
    "planks": ExerciseMode.PLANK,
}


@dataclass
class ExerciseThresholds:
    """
    Tunable angles (degrees), ratios and cooldowns for every exercise.

    Defaults match Settings so a session built without configuration behaves
    the same as one built from an empty environment.
    """
    visibility_threshold: float = 0.5

    # Push-ups
    pushup_elbow_angle_down: float = 90.0
    pushup_elbow_angle_up: float = 160.0
    pushup_straight_abs_cos_min: float = 0.90
    pushup_warning_cooldown_ms: int = 2000

    # Squats
    squat_knee_angle_down: float = 80.0
    squat_knee_angle_up: float = 165.0
    squat_strict_posture: bool = False
    squat_hip_angle_min_deg: float = 150.0
    squat_torso_tilt_max_deg: float = 45.0

    # Lunges
    lunge_front_knee_angle_down: float = 85.0
    lunge_front_knee_angle_up: float = 160.0
    lunge_back_knee_angle_down: float = 90.0
    lunge_back_knee_angle_up: float = 150.0

    # Plank
    plank_straight_abs_cos_min: float = 0.90
    plank_horizontal_max_deg: float = 35.0
    plank_knee_min_deg: float = 150.0
    plank_warning_cooldown_ms: int = 2000

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExerciseThresholds":
        """Copy every matching field from application settings."""
        return cls(**{
            name: getattr(settings, name)
            for name in cls.__dataclass_fields__
        })

    def warning_cooldown_ms(self, mode: ExerciseMode) -> int:
        if mode is ExerciseMode.PLANK:
            return self.plank_warning_cooldown_ms
        return self.pushup_warning_cooldown_ms
