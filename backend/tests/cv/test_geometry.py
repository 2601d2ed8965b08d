"""Tests for angle and vector helpers."""

import math

import numpy as np
import pytest

from formcoach.cv.geometry import (
    abs_cosine,
    angle_at,
    is_near_horizontal,
    midpoint,
    orientation_deg,
    tilt_from_vertical_deg,
)


@pytest.mark.parametrize(
    "a, b, c, expected",
    [
        ((1.0, 0.0), (0.0, 0.0), (0.0, 1.0), 90.0),
        ((1.0, 0.0), (0.0, 0.0), (-1.0, 0.0), 180.0),
        ((1.0, 0.0), (0.0, 0.0), (2.0, 0.0), 0.0),
        ((0.0, -1.0), (0.0, 0.0), (math.sin(math.radians(45)), -math.cos(math.radians(45))), 45.0),
    ],
)
def test_angle_at_known_values(a, b, c, expected):
    assert angle_at(a, b, c) == pytest.approx(expected, abs=1e-6)


def test_angle_at_folds_reflex_angles():
    # Bearings -135 and 135: raw difference is 270 degrees
    a = (-1.0, -1.0)
    b = (0.0, 0.0)
    c = (-1.0, 1.0)
    assert angle_at(a, b, c) == pytest.approx(90.0)
    assert angle_at((-1.0, -0.1), b, (-1.0, 0.1)) < 20.0


def test_angle_at_range_and_symmetry():
    rng = np.random.default_rng(7)
    for _ in range(200):
        a, b, c = (tuple(rng.uniform(0, 1, size=2)) for _ in range(3))
        forward = angle_at(a, b, c)
        assert 0.0 <= forward <= 180.0
        assert forward == pytest.approx(angle_at(c, b, a), abs=1e-9)


def test_angle_at_degenerate_points_are_finite():
    assert math.isfinite(angle_at((0.5, 0.5), (0.5, 0.5), (0.5, 0.5)))


def test_midpoint():
    assert midpoint((0.2, 0.4), (0.4, 0.8)) == pytest.approx((0.3, 0.6))


def test_abs_cosine_is_sign_agnostic():
    u = np.array([1.0, 0.0])
    assert abs_cosine(u, np.array([-3.0, 0.0])) == pytest.approx(1.0)
    assert abs_cosine(u, np.array([0.0, 2.0])) == pytest.approx(0.0)


def test_abs_cosine_zero_vector():
    assert abs_cosine(np.array([0.0, 0.0]), np.array([1.0, 0.0])) == 0.0


def test_orientation_and_horizontal():
    assert orientation_deg(np.array([1.0, 0.0])) == pytest.approx(0.0)
    assert orientation_deg(np.array([-1.0, 0.0])) == pytest.approx(180.0)
    assert is_near_horizontal(np.array([-1.0, 0.3]), 35.0)
    assert not is_near_horizontal(np.array([0.0, -1.0]), 35.0)


def test_tilt_from_vertical():
    assert tilt_from_vertical_deg(np.array([0.0, -1.0])) == pytest.approx(0.0)
    assert tilt_from_vertical_deg(np.array([1.0, -1.0])) == pytest.approx(45.0)
