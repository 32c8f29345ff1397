"""
Keypoints and poses in image coordinates (pixel), plus adapters from the
output layouts of common pose estimators. No inference happens here: the
estimator is an external collaborator that hands us one pose per frame.
"""
from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping, NamedTuple, Optional, Sequence


class KeypointName:
    """COCO / MoveNet keypoint names."""
    NOSE = "nose"
    LEFT_EYE = "left_eye"
    RIGHT_EYE = "right_eye"
    LEFT_EAR = "left_ear"
    RIGHT_EAR = "right_ear"
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


# MoveNet SinglePose output order (17 keypoints).
MOVENET_ORDER: tuple[str, ...] = (
    KeypointName.NOSE,
    KeypointName.LEFT_EYE,
    KeypointName.RIGHT_EYE,
    KeypointName.LEFT_EAR,
    KeypointName.RIGHT_EAR,
    KeypointName.LEFT_SHOULDER,
    KeypointName.RIGHT_SHOULDER,
    KeypointName.LEFT_ELBOW,
    KeypointName.RIGHT_ELBOW,
    KeypointName.LEFT_WRIST,
    KeypointName.RIGHT_WRIST,
    KeypointName.LEFT_HIP,
    KeypointName.RIGHT_HIP,
    KeypointName.LEFT_KNEE,
    KeypointName.RIGHT_KNEE,
    KeypointName.LEFT_ANKLE,
    KeypointName.RIGHT_ANKLE,
)

# MediaPipe Pose landmark indices (same as PoseLandmark) for the names we use.
MEDIAPIPE_INDEX: dict[str, int] = {
    KeypointName.NOSE: 0,
    KeypointName.LEFT_EYE: 2,
    KeypointName.RIGHT_EYE: 5,
    KeypointName.LEFT_EAR: 7,
    KeypointName.RIGHT_EAR: 8,
    KeypointName.LEFT_SHOULDER: 11,
    KeypointName.RIGHT_SHOULDER: 12,
    KeypointName.LEFT_ELBOW: 13,
    KeypointName.RIGHT_ELBOW: 14,
    KeypointName.LEFT_WRIST: 15,
    KeypointName.RIGHT_WRIST: 16,
    KeypointName.LEFT_HIP: 23,
    KeypointName.RIGHT_HIP: 24,
    KeypointName.LEFT_KNEE: 25,
    KeypointName.RIGHT_KNEE: 26,
    KeypointName.LEFT_ANKLE: 27,
    KeypointName.RIGHT_ANKLE: 28,
}


class Keypoint(NamedTuple):
    name: str
    x: float
    y: float
    score: float

    @property
    def xy(self) -> tuple[float, float]:
        return (self.x, self.y)


class Pose:
    """
    Keypoints for one video frame, keyed by name (at most one per name).
    May be empty when the estimator found no subject.
    """

    __slots__ = ("_keypoints",)

    def __init__(self, keypoints: Iterable[Keypoint] = ()):
        self._keypoints: dict[str, Keypoint] = {}
        for kp in keypoints:
            self._keypoints[kp.name] = kp

    def get(self, name: str) -> Optional[Keypoint]:
        return self._keypoints.get(name)

    def confident(self, name: str, min_score: float) -> Optional[Keypoint]:
        """Keypoint if present with score >= min_score, else None."""
        kp = self._keypoints.get(name)
        if kp is None or kp.score < min_score:
            return None
        return kp

    def __contains__(self, name: object) -> bool:
        return name in self._keypoints

    def __iter__(self) -> Iterator[Keypoint]:
        return iter(self._keypoints.values())

    def __len__(self) -> int:
        return len(self._keypoints)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pose):
            return NotImplemented
        return self._keypoints == other._keypoints

    def __repr__(self) -> str:
        return f"Pose({sorted(self._keypoints)})"


def pose_from_movenet(rows: Sequence[Sequence[float]]) -> Pose:
    """
    Build a pose from MoveNet-ordered rows of (x, y, score) in pixels.
    Extra rows beyond the 17 named keypoints are ignored.
    """
    return Pose(
        Keypoint(name, float(row[0]), float(row[1]), float(row[2]))
        for name, row in zip(MOVENET_ORDER, rows)
    )


def pose_from_mediapipe(
    landmarks: Sequence[Any],
    width: int,
    height: int,
) -> Pose:
    """
    Build a pose from MediaPipe's 33 normalized landmarks.
    Each landmark is either an object with x, y, visibility attributes or an
    (x, y, visibility) sequence; x/y are scaled to pixels.
    """
    keypoints = []
    for name, idx in MEDIAPIPE_INDEX.items():
        if idx >= len(landmarks):
            continue
        lm = landmarks[idx]
        if hasattr(lm, "x"):
            x, y, vis = lm.x, lm.y, getattr(lm, "visibility", 1.0)
        else:
            x, y, vis = lm[0], lm[1], (lm[2] if len(lm) > 2 else 1.0)
        keypoints.append(Keypoint(name, float(x) * width, float(y) * height, float(vis)))
    return Pose(keypoints)


def pose_from_dict(mapping: Mapping[str, Sequence[float]]) -> Pose:
    """Build a pose from {name: (x, y, score)}; a missing score means 1.0."""
    keypoints = []
    for name, values in mapping.items():
        score = float(values[2]) if len(values) > 2 else 1.0
        keypoints.append(Keypoint(name, float(values[0]), float(values[1]), score))
    return Pose(keypoints)


def smooth_pose_ema(
    current: Pose,
    previous: Optional[Pose],
    alpha: float = 0.4,
) -> Pose:
    """
    One-step EMA smoothing of keypoint positions.
    Scores are taken from the current frame; keypoints absent from the
    previous pose pass through unchanged.
    """
    if previous is None:
        return current
    smoothed = []
    for kp in current:
        prev = previous.get(kp.name)
        if prev is None:
            smoothed.append(kp)
            continue
        smoothed.append(
            Keypoint(
                kp.name,
                alpha * kp.x + (1 - alpha) * prev.x,
                alpha * kp.y + (1 - alpha) * prev.y,
                kp.score,
            )
        )
    return Pose(smoothed)
