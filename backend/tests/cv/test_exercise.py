"""Tests for exercise modes and threshold configuration."""

import pytest

from formcoach.config import Settings
from formcoach.cv.exercise import ExerciseMode, ExerciseThresholds


@pytest.mark.parametrize(
    "name, expected",
    [
        ("pushups", ExerciseMode.PUSH_UPS),
        ("Push-Ups", ExerciseMode.PUSH_UPS),
        ("push_up", ExerciseMode.PUSH_UPS),
        ("squat", ExerciseMode.SQUATS),
        ("SQUATS", ExerciseMode.SQUATS),
        ("lunge", ExerciseMode.LUNGES),
        (" plank ", ExerciseMode.PLANK),
        (ExerciseMode.LUNGES, ExerciseMode.LUNGES),
    ],
)
def test_parse_accepts_aliases(name, expected):
    assert ExerciseMode.parse(name) is expected


@pytest.mark.parametrize("name", ["burpees", "", None])
def test_parse_rejects_unknown(name):
    with pytest.raises(ValueError):
        ExerciseMode.parse(name)


def test_only_plank_is_timed():
    assert not ExerciseMode.PLANK.counts_reps
    assert all(mode.counts_reps for mode in ExerciseMode if mode is not ExerciseMode.PLANK)


def test_thresholds_match_settings_defaults():
    assert ExerciseThresholds.from_settings(Settings()) == ExerciseThresholds()


def test_thresholds_follow_settings_overrides():
    settings = Settings(pushup_elbow_angle_down=100.0, plank_warning_cooldown_ms=5000)
    thresholds = ExerciseThresholds.from_settings(settings)
    assert thresholds.pushup_elbow_angle_down == 100.0
    assert thresholds.warning_cooldown_ms(ExerciseMode.PLANK) == 5000
    assert thresholds.warning_cooldown_ms(ExerciseMode.PUSH_UPS) == 2000


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("LUNGE_BACK_KNEE_ANGLE_UP", "140")
    assert Settings().lunge_back_knee_angle_up == 140.0


def test_squat_knee_angles_are_configurable(monkeypatch):
    monkeypatch.setenv("SQUAT_KNEE_ANGLE_DOWN", "75")
    thresholds = ExerciseThresholds.from_settings(Settings())
    assert thresholds.squat_knee_angle_down == 75.0
    assert thresholds.squat_knee_angle_up == 165.0
