"""
Planar geometry helpers for landmark analysis.

All points are (x, y) in normalized image coordinates, with y increasing
downward. Functions here are pure and never raise on degenerate input:
coincident points produce a finite (if meaningless) value.
"""

from typing import Tuple

import numpy as np

Point = Tuple[float, float]


def angle_at(a: Point, b: Point, c: Point) -> float:
    """
    Interior angle at vertex b formed by rays b->a and b->c.

    Uses the difference of the two atan2 bearings, folded into [0, 180].

    Returns:
        Angle in degrees (0-180)
    """
    radians = np.arctan2(c[1] - b[1], c[0] - b[0]) - np.arctan2(a[1] - b[1], a[0] - b[0])
    angle = abs(float(np.degrees(radians)))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def midpoint(p: Point, q: Point) -> Point:
    """Center of two points."""
    return ((p[0] + q[0]) / 2, (p[1] + q[1]) / 2)


def vector(start: Point, end: Point) -> np.ndarray:
    """Vector from start to end."""
    return np.array([end[0] - start[0], end[1] - start[1]], dtype=float)


def abs_cosine(u: np.ndarray, v: np.ndarray) -> float:
    """
    Absolute cosine similarity of two vectors.

    Sign-agnostic so that a straight body line scores 1.0 whichever way the
    athlete faces. Zero-length vectors are treated as unit length.
    """
    mag_u = float(np.hypot(u[0], u[1])) or 1.0
    mag_v = float(np.hypot(v[0], v[1])) or 1.0
    cos_sim = float(np.dot(u, v)) / (mag_u * mag_v)
    return abs(float(np.clip(cos_sim, -1.0, 1.0)))


def orientation_deg(v: np.ndarray) -> float:
    """Absolute bearing of a vector relative to the +x axis, in [0, 180]."""
    return abs(float(np.degrees(np.arctan2(v[1], v[0]))))


def is_near_horizontal(v: np.ndarray, max_deg: float) -> bool:
    """True if the vector lies within max_deg of the horizontal axis (either direction)."""
    orient = orientation_deg(v)
    return orient <= max_deg or orient >= 180.0 - max_deg


def tilt_from_vertical_deg(v: np.ndarray) -> float:
    """
    Lean of a bottom-to-top vector away from straight up, in degrees.

    0 = perfectly upright (image y decreases going up).
    """
    return abs(float(np.degrees(np.arctan2(v[0], -v[1]))))
