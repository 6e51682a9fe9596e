"""
Headphone motion source contract.

This module defines the boundary between the platform sensor subsystem and
the OrientationMonitor. A motion source mirrors the shape of a headphone
motion manager:

- Availability query (can this device deliver headphone motion at all?)
- A delegate receiving discrete connect / disconnect signals
- A handler receiving ``(motion, error)`` pairs for every attitude update
- Start / stop of the update stream

Implementations:
- MockMotionSource (core.hardware.mock_motion_source): synthetic, replay and
  static modes for development without headphones

Usage:
    source = MockMotionSource(config)
    source.set_delegate(monitor)
    source.start_device_motion_updates(monitor.on_motion)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol


@dataclass(frozen=True)
class Attitude:
    """Attitude angles in radians."""
    pitch: float
    roll: float
    yaw: float


@dataclass(frozen=True)
class DeviceMotion:
    """Single motion record delivered by a source."""
    attitude: Attitude
    timestamp: float


MotionHandler = Callable[[Optional[DeviceMotion], Optional[Exception]], None]


class MotionSourceDelegate(Protocol):
    def on_headphone_connected(self) -> None: ...

    def on_headphone_disconnected(self) -> None: ...


class MotionSource:
    """Base class for headphone motion providers."""

    def is_device_motion_available(self) -> bool:
        raise NotImplementedError

    def set_delegate(self, delegate: Optional[MotionSourceDelegate]) -> None:
        raise NotImplementedError

    def start_device_motion_updates(self, handler: MotionHandler) -> None:
        """Begin delivering motion records to ``handler``."""
        raise NotImplementedError

    def stop_device_motion_updates(self) -> None:
        """
        Stop delivering motion records.

        No handler call may start after this method returns.
        """
        raise NotImplementedError
