#!/usr/bin/env python3
"""
Replay recorded keypoints through a rep counter.
Usage:
  python run.py --keypoints path/to/keypoints.json --exercise squat [--fps 30]
                [--smooth-alpha 0.4] [--output outputs/replay.json]
"""
from __future__ import annotations

import argparse
import dataclasses
import enum
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from repsense.config import Settings, load_settings
from repsense.exercises import get_exercise
from repsense.pose import Pose, pose_from_dict, pose_from_movenet, smooth_pose_ema
from repsense.reps import RepCounter, RepetitionEvent
from repsense.tracking import InMemoryTracker, forward_reps

logger = logging.getLogger(__name__)

DEFAULT_FPS = 30.0


def _frame_pose(raw: Any) -> Optional[Pose]:
    if not raw:
        return None
    if isinstance(raw, dict):
        return pose_from_dict(raw)
    return pose_from_movenet(raw)


def load_keypoint_frames(
    keypoints_path: str,
    fps: Optional[float] = None,
) -> list[tuple[float, Optional[Pose]]]:
    """
    Load {"fps": N, "frames": [{"frame": i, "timestamp_ms": t?, "keypoints": ...}]}.
    keypoints is {name: [x, y, score]} or MoveNet-ordered [[x, y, score], ...].
    Frames without timestamp_ms are timed from their index and fps.
    """
    if not os.path.isfile(keypoints_path):
        raise FileNotFoundError(f"Keypoints file not found: {keypoints_path}")
    with open(keypoints_path) as f:
        data = json.load(f)
    if not isinstance(data, dict) or not isinstance(data.get("frames"), list):
        raise ValueError(f"{keypoints_path}: expected an object with a 'frames' list")
    fps = fps or data.get("fps") or DEFAULT_FPS
    if fps <= 0:
        raise ValueError(f"fps must be positive, got {fps}")
    frames = []
    for i, frame in enumerate(data["frames"]):
        if not isinstance(frame, dict):
            raise ValueError(f"{keypoints_path}: frame {i} must be an object")
        idx = frame.get("frame", i)
        ts = frame.get("timestamp_ms")
        if ts is None:
            ts = idx / fps * 1000.0
        frames.append((float(ts), _frame_pose(frame.get("keypoints"))))
    return frames


def _event_to_dict(ev: RepetitionEvent) -> dict[str, Any]:
    out: dict[str, Any] = {"type": type(ev).__name__}
    for key, value in dataclasses.asdict(ev).items():
        out[key] = value.value if isinstance(value, enum.Enum) else value
    return out


def run_replay(
    keypoints_path: str,
    exercise: str,
    settings: Optional[Settings] = None,
    fps: Optional[float] = None,
    smooth_alpha: Optional[float] = None,
    output_path: Optional[str] = None,
) -> dict[str, Any]:
    """Replay a keypoints file; returns (and optionally writes) a summary."""
    settings = settings or Settings()
    config = get_exercise(exercise, settings)
    frames = load_keypoint_frames(keypoints_path, fps)
    counter = RepCounter(config)
    tracker = InMemoryTracker()
    events: list[RepetitionEvent] = []
    prev_pose: Optional[Pose] = None
    for ts, pose in frames:
        if pose is not None and smooth_alpha is not None:
            pose = smooth_pose_ema(pose, prev_pose, smooth_alpha)
            prev_pose = pose
        frame_events = counter.push(pose, ts)
        forward_reps(frame_events, tracker, config.display_name)
        events.extend(frame_events)

    logger.info("replay: %s frames, %s reps (%s)", len(frames), counter.count, config.name)
    summary = {
        "exercise": config.name,
        "rep_count": counter.count,
        "tracked": sum(r.repetitions for r in tracker.records()),
        "frames": len(frames),
        "events": [_event_to_dict(ev) for ev in events],
    }
    if output_path:
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(summary, f, indent=2)
    return summary


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Count reps from recorded pose keypoints")
    ap.add_argument("--keypoints", type=str, required=True, help="Path to keypoints JSON")
    ap.add_argument("--exercise", type=str, required=True, help="squat, pushup, biceps, jumping_jack, vertical_jump")
    ap.add_argument("--fps", type=float, default=None, help="Frame rate when frames carry no timestamps")
    ap.add_argument("--smooth-alpha", type=float, default=None, help="EMA keypoint smoothing (0..1)")
    ap.add_argument("--output", type=str, default=None, help="Write events and summary JSON here")
    args = ap.parse_args(argv)

    load_dotenv()
    load_dotenv(Path(__file__).resolve().parent / ".env")
    try:
        settings = load_settings()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.smooth_alpha is not None and not 0.0 < args.smooth_alpha <= 1.0:
        print("Error: --smooth-alpha must be in (0, 1]", file=sys.stderr)
        return 1
    try:
        summary = run_replay(
            args.keypoints,
            args.exercise,
            settings=settings,
            fps=args.fps,
            smooth_alpha=args.smooth_alpha,
            output_path=args.output,
        )
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"Replay done. Exercise: {summary['exercise']}. Reps: {summary['rep_count']}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
