"""
Landmark frames delivered by the upstream pose estimator.

The estimator itself runs outside this service (in the browser). What
arrives here is one ordered list of 33 normalized landmarks per video frame,
following the MediaPipe Pose numbering. That numbering is confined to
MEDIAPIPE_INDEX; everything downstream addresses joints by BodyJoint role.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from formcoach.cv.geometry import Point, midpoint

# Upstream frames always carry this many entries
LANDMARK_COUNT = 33

DEFAULT_VISIBILITY_THRESHOLD = 0.5


class BodyJoint(Enum):
    """Joint roles used by posture and rep analysis."""
    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"
    LEFT_ELBOW = "left_elbow"
    RIGHT_ELBOW = "right_elbow"
    LEFT_WRIST = "left_wrist"
    RIGHT_WRIST = "right_wrist"
    LEFT_HIP = "left_hip"
    RIGHT_HIP = "right_hip"
    LEFT_KNEE = "left_knee"
    RIGHT_KNEE = "right_knee"
    LEFT_ANKLE = "left_ankle"
    RIGHT_ANKLE = "right_ankle"


# MediaPipe Pose landmark indices for the joints we use
MEDIAPIPE_INDEX: Dict[BodyJoint, int] = {
    BodyJoint.LEFT_SHOULDER: 11,
    BodyJoint.RIGHT_SHOULDER: 12,
    BodyJoint.LEFT_ELBOW: 13,
    BodyJoint.RIGHT_ELBOW: 14,
    BodyJoint.LEFT_WRIST: 15,
    BodyJoint.RIGHT_WRIST: 16,
    BodyJoint.LEFT_HIP: 23,
    BodyJoint.RIGHT_HIP: 24,
    BodyJoint.LEFT_KNEE: 25,
    BodyJoint.RIGHT_KNEE: 26,
    BodyJoint.LEFT_ANKLE: 27,
    BodyJoint.RIGHT_ANKLE: 28,
}

SHOULDERS = (BodyJoint.LEFT_SHOULDER, BodyJoint.RIGHT_SHOULDER)
ELBOWS = (BodyJoint.LEFT_ELBOW, BodyJoint.RIGHT_ELBOW)
WRISTS = (BodyJoint.LEFT_WRIST, BodyJoint.RIGHT_WRIST)
HIPS = (BodyJoint.LEFT_HIP, BodyJoint.RIGHT_HIP)
KNEES = (BodyJoint.LEFT_KNEE, BodyJoint.RIGHT_KNEE)
ANKLES = (BodyJoint.LEFT_ANKLE, BodyJoint.RIGHT_ANKLE)


@dataclass(frozen=True)
class Landmark:
    """Single landmark in normalized image space."""
    x: float  # Normalized x coordinate (0-1)
    y: float  # Normalized y coordinate (0-1), grows downward
    visibility: Optional[float] = None  # Confidence (0-1), None if not reported

    def is_tracked(self, threshold: float = DEFAULT_VISIBILITY_THRESHOLD) -> bool:
        """A landmark without a visibility score is trusted."""
        return self.visibility is None or self.visibility > threshold

    @property
    def point(self) -> Point:
        return (self.x, self.y)


def _coerce_landmark(raw: Any) -> Optional[Landmark]:
    """Accept a Landmark, a mapping or any object exposing x/y/visibility."""
    if raw is None or isinstance(raw, Landmark):
        return raw
    if isinstance(raw, Mapping):
        if raw.get("x") is None or raw.get("y") is None:
            return None
        vis = raw.get("visibility")
        return Landmark(
            x=float(raw["x"]),
            y=float(raw["y"]),
            visibility=None if vis is None else float(vis),
        )
    vis = getattr(raw, "visibility", None)
    return Landmark(
        x=float(raw.x),
        y=float(raw.y),
        visibility=None if vis is None else float(vis),
    )


@dataclass
class LandmarkFrame:
    """
    All landmarks for one video frame, addressed by joint role.

    Joints absent from the frame are simply untracked; it is up to the
    consumer to decide whether it can work without them.
    """
    landmarks: Dict[BodyJoint, Landmark] = field(default_factory=dict)
    visibility_threshold: float = DEFAULT_VISIBILITY_THRESHOLD

    @classmethod
    def from_sequence(
        cls,
        entries: Sequence[Any],
        index_map: Optional[Mapping[BodyJoint, int]] = None,
        visibility_threshold: float = DEFAULT_VISIBILITY_THRESHOLD,
    ) -> "LandmarkFrame":
        """
        Build a frame from the upstream ordered landmark list.

        Args:
            entries: Up to 33 landmarks (dicts, objects with x/y/visibility, or None)
            index_map: Joint role -> position in entries (MediaPipe numbering by default)
            visibility_threshold: Minimum visibility for a joint to count as tracked

        Raises:
            ValueError: If more than LANDMARK_COUNT entries are supplied
        """
        if len(entries) > LANDMARK_COUNT:
            raise ValueError(
                f"Expected at most {LANDMARK_COUNT} landmarks, got {len(entries)}"
            )
        index_map = index_map or MEDIAPIPE_INDEX

        landmarks: Dict[BodyJoint, Landmark] = {}
        for joint, index in index_map.items():
            if 0 <= index < len(entries):
                landmark = _coerce_landmark(entries[index])
                if landmark is not None:
                    landmarks[joint] = landmark

        return cls(landmarks=landmarks, visibility_threshold=visibility_threshold)

    @property
    def is_empty(self) -> bool:
        """True when the estimator reported no body at all."""
        return not self.landmarks

    def get(self, joint: BodyJoint) -> Optional[Landmark]:
        return self.landmarks.get(joint)

    def is_tracked(self, joint: BodyJoint) -> bool:
        landmark = self.landmarks.get(joint)
        return landmark is not None and landmark.is_tracked(self.visibility_threshold)

    def all_tracked(self, joints: Iterable[BodyJoint]) -> bool:
        return all(self.is_tracked(joint) for joint in joints)

    def point(self, joint: BodyJoint) -> Point:
        """Coordinates of a joint. Callers check tracking first."""
        return self.landmarks[joint].point

    def center(self, pair: Tuple[BodyJoint, BodyJoint]) -> Point:
        """Midpoint of a left/right joint pair."""
        return midpoint(self.point(pair[0]), self.point(pair[1]))

    def to_dict(self) -> Dict[str, Dict[str, Optional[float]]]:
        """Serialize to a JSON-friendly mapping keyed by joint role."""
        return {
            joint.value: {"x": lm.x, "y": lm.y, "visibility": lm.visibility}
            for joint, lm in self.landmarks.items()
        }
