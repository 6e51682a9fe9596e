"""
Orientation data model shared by the motion monitor and posture sequencer.

Attitude angles arrive already computed by the headphone sensor, in radians.
No filtering, smoothing or fusion is applied anywhere in this package.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ConnectionState(Enum):
    """Headphone connectivity as observed by the monitor."""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


@dataclass(frozen=True)
class OrientationSample:
    """Head attitude at a single instant"""
    pitch: float           # Head tilt up/down (radians)
    roll: float            # Head tilt sideways (radians)
    yaw: float             # Head turn left/right (radians)
    timestamp: float       # Arrival time (monotonic seconds)

    @classmethod
    def from_motion(cls, motion: Any, timestamp: Optional[float] = None) -> "OrientationSample":
        """
        Build a sample from a sensor motion record.

        Accepts records exposing ``attitude.pitch/roll/yaw`` (DeviceMotion),
        flat ``pitch/roll/yaw`` attributes, or a mapping with those keys.

        Raises:
            ValueError: If the record is missing attitude fields or carries
                non-finite angles.
        """
        if motion is None:
            raise ValueError("empty motion record")

        source = getattr(motion, "attitude", motion)
        try:
            if isinstance(source, dict):
                pitch, roll, yaw = source["pitch"], source["roll"], source["yaw"]
            else:
                pitch, roll, yaw = source.pitch, source.roll, source.yaw
            pitch, roll, yaw = float(pitch), float(roll), float(yaw)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"malformed motion record: {exc}") from exc

        if not all(math.isfinite(v) for v in (pitch, roll, yaw)):
            raise ValueError("non-finite attitude values")

        if timestamp is None:
            timestamp = time.monotonic()
        return cls(pitch=pitch, roll=roll, yaw=yaw, timestamp=timestamp)
