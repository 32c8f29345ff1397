"""Synthetic pose builders for the tests (image coords, y grows downward)."""
from __future__ import annotations

import math
from typing import Optional

from repsense.geometry import midpoint
from repsense.pose import Keypoint, Pose

SCORE = 0.9
_SAME = object()


def _limb_end(vertex: tuple[float, float], angle: float, length: float, mirror: bool = False) -> tuple[float, float]:
    # The proximal segment always points straight up from the vertex, so the
    # distal end at `angle` degrees from it gives a joint angle of exactly `angle`.
    rad = math.radians(angle)
    dx = length * math.sin(rad)
    if mirror:
        dx = -dx
    return (vertex[0] + dx, vertex[1] - length * math.cos(rad))


def leg_pose(
    left_angle: Optional[float],
    right_angle=_SAME,
    left_score: float = SCORE,
    right_score: float = SCORE,
) -> Pose:
    """Both legs with the given knee angles; None omits that leg."""
    if right_angle is _SAME:
        right_angle = left_angle
    kps = []
    if left_angle is not None:
        knee = (300.0, 400.0)
        kps += [
            Keypoint("left_hip", 300.0, 300.0, left_score),
            Keypoint("left_knee", *knee, left_score),
            Keypoint("left_ankle", *_limb_end(knee, left_angle, 100.0), left_score),
        ]
    if right_angle is not None:
        knee = (400.0, 400.0)
        kps += [
            Keypoint("right_hip", 400.0, 300.0, right_score),
            Keypoint("right_knee", *knee, right_score),
            Keypoint("right_ankle", *_limb_end(knee, right_angle, 100.0, mirror=True), right_score),
        ]
    return Pose(kps)


def arm_pose(
    left_angle: Optional[float],
    right_angle=_SAME,
    left_score: float = SCORE,
    right_score: float = SCORE,
) -> Pose:
    """Both arms with the given elbow angles; None omits that arm."""
    if right_angle is _SAME:
        right_angle = left_angle
    kps = []
    if left_angle is not None:
        elbow = (300.0, 300.0)
        kps += [
            Keypoint("left_shoulder", 300.0, 200.0, left_score),
            Keypoint("left_elbow", *elbow, left_score),
            Keypoint("left_wrist", *_limb_end(elbow, left_angle, 80.0), left_score),
        ]
    if right_angle is not None:
        elbow = (400.0, 300.0)
        kps += [
            Keypoint("right_shoulder", 400.0, 200.0, right_score),
            Keypoint("right_elbow", *elbow, right_score),
            Keypoint("right_wrist", *_limb_end(elbow, right_angle, 80.0, mirror=True), right_score),
        ]
    return Pose(kps)


def pushup_pose(elbow_angle: float, torso_drop: float = 20.0, score: float = SCORE) -> Pose:
    """Side view, body horizontal when torso_drop is small."""
    elbow = (150.0, 300.0)
    return Pose([
        Keypoint("nose", 100.0, 250.0, score),
        Keypoint("left_shoulder", 150.0, 200.0, score),
        Keypoint("left_elbow", *elbow, score),
        Keypoint("left_wrist", *_limb_end(elbow, elbow_angle, 80.0), score),
        Keypoint("left_hip", 400.0, 250.0 + torso_drop, score),
    ])


def jack_pose(open_: Optional[bool], score: float = SCORE, elbow_score: Optional[float] = None) -> Pose:
    """Open (arms up, feet apart), closed (arms down, feet together) or None for in-between."""
    if elbow_score is None:
        elbow_score = score
    kps = [
        Keypoint("left_shoulder", 280.0, 200.0, score),
        Keypoint("right_shoulder", 360.0, 200.0, score),
        Keypoint("left_hip", 290.0, 350.0, score),
        Keypoint("right_hip", 350.0, 350.0, score),
    ]
    if open_ is True:
        wrists, ankles = ((250.0, 100.0), (390.0, 100.0)), ((230.0, 550.0), (410.0, 550.0))
    elif open_ is False:
        wrists, ankles = ((270.0, 330.0), (370.0, 330.0)), ((305.0, 550.0), (335.0, 550.0))
    else:
        # Arms up, feet together.
        wrists, ankles = ((250.0, 100.0), (390.0, 100.0)), ((305.0, 550.0), (335.0, 550.0))
    shoulders = ((280.0, 200.0), (360.0, 200.0))
    elbows = [midpoint(s, w) for s, w in zip(shoulders, wrists)]
    kps += [
        Keypoint("left_elbow", *elbows[0], elbow_score),
        Keypoint("right_elbow", *elbows[1], elbow_score),
        Keypoint("left_wrist", *wrists[0], score),
        Keypoint("right_wrist", *wrists[1], score),
        Keypoint("left_ankle", *ankles[0], score),
        Keypoint("right_ankle", *ankles[1], score),
    ]
    return Pose(kps)


def ankle_pose(y: float, score: float = SCORE) -> Pose:
    return Pose([
        Keypoint("left_ankle", 300.0, y, score),
        Keypoint("right_ankle", 340.0, y, score),
    ])


def timed(poses, start_ms: float = 0.0, step_ms: float = 33.0):
    """[(timestamp_ms, pose), ...] at a fixed frame interval."""
    return [(start_ms + i * step_ms, p) for i, p in enumerate(poses)]
