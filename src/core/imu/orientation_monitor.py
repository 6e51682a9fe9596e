"""
Headphone orientation monitoring and connectivity tracking.

This module wraps a headphone motion source and turns its callbacks into a
clean stream of OrientationSample objects plus connectivity-changed
notifications. It performs no filtering of the attitude values.

Features:
- Idempotent start (single subscription to the motion source)
- Explicit connect / disconnect signals update ConnectionState
- Implicit connect when data arrives while disconnected
- Null or malformed motion records are dropped silently
- Inert after stop: late records and signals are ignored
- Thread-safe latest-attitude accessors for UI display

Usage:
    monitor = OrientationMonitor(source)
    monitor.add_sample_listener(sequencer_callback)
    monitor.add_connection_listener(lambda state: print(state))
    monitor.start()
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from core.hardware.motion_source import MotionSource
from core.imu.orientation_state import ConnectionState, OrientationSample

log = logging.getLogger("posture.motion")

SampleListener = Callable[[OrientationSample], None]
ConnectionListener = Callable[[ConnectionState], None]


class SensorUnavailable(RuntimeError):
    """Headphone motion is not available on this device."""


class OrientationMonitor:
    """Tracks headphone connectivity and forwards attitude samples."""

    def __init__(self, source: MotionSource) -> None:
        self.source = source
        self.is_device_supported = bool(source.is_device_motion_available())

        self._lock = threading.Lock()
        self._active = False
        self.connection_state = ConnectionState.DISCONNECTED

        # Latest attitude (for UI display)
        self.pitch = 0.0
        self.roll = 0.0
        self.yaw = 0.0
        self.has_data = False

        self._sample_listeners: List[SampleListener] = []
        self._connection_listeners: List[ConnectionListener] = []

        # Statistics
        self.samples_received = 0
        self.samples_dropped = 0
        self.start_time: Optional[float] = None

    # ------------------------------------------------------------------
    # listeners
    # ------------------------------------------------------------------

    def add_sample_listener(self, listener: SampleListener) -> None:
        self._sample_listeners.append(listener)

    def add_connection_listener(self, listener: ConnectionListener) -> None:
        self._connection_listeners.append(listener)

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_connected(self) -> bool:
        return self.connection_state == ConnectionState.CONNECTED

    def start(self) -> None:
        """
        Begin receiving motion updates.

        Raises:
            SensorUnavailable: If the source cannot deliver headphone motion.
        """
        with self._lock:
            if self._active:
                log.debug("[MONITOR] start() ignored, already active")
                return
            if not self.source.is_device_motion_available():
                self.is_device_supported = False
                log.warning("[MONITOR] Headphone motion is not available on this device")
                raise SensorUnavailable("Headphone motion is not available on this device")
            self._active = True
            self.start_time = time.monotonic()

        self.source.set_delegate(self)
        self.source.start_device_motion_updates(self.on_motion)
        log.info("[MONITOR] Motion updates started")

    def stop(self) -> None:
        """Stop receiving motion updates; no callbacks fire after return."""
        with self._lock:
            if not self._active:
                return
            self._active = False
            self.has_data = False
            # Inert monitors report disconnected; listeners are not notified
            self.connection_state = ConnectionState.DISCONNECTED

        self.source.stop_device_motion_updates()
        self.source.set_delegate(None)
        log.info("[MONITOR] Motion updates stopped")

    # ------------------------------------------------------------------
    # source callbacks
    # ------------------------------------------------------------------

    def on_headphone_connected(self) -> None:
        if not self._active:
            return
        log.info("[MONITOR] Headphones connected")
        self._set_connection_state(ConnectionState.CONNECTED)

    def on_headphone_disconnected(self) -> None:
        if not self._active:
            return
        log.info("[MONITOR] Headphones disconnected")
        self._set_connection_state(ConnectionState.DISCONNECTED)

    def on_motion(self, motion: Any, error: Optional[Exception] = None) -> None:
        """
        Handle a motion record from the source.

        Args:
            motion: DeviceMotion-like record, or None
            error: Error reported alongside the record, if any
        """
        if not self._active:
            return

        if error is not None or motion is None:
            self.samples_dropped += 1
            log.debug("[MONITOR] Dropped empty motion record (error=%s)", error)
            return

        try:
            sample = OrientationSample.from_motion(motion)
        except ValueError as exc:
            self.samples_dropped += 1
            log.debug("[MONITOR] Dropped malformed motion record: %s", exc)
            return

        # Receiving data implies the headphones are connected
        if self.connection_state != ConnectionState.CONNECTED:
            self._set_connection_state(ConnectionState.CONNECTED)

        with self._lock:
            self.pitch = sample.pitch
            self.roll = sample.roll
            self.yaw = sample.yaw
            self.has_data = True
            self.samples_received += 1

        for listener in list(self._sample_listeners):
            listener(sample)

    def _set_connection_state(self, state: ConnectionState) -> None:
        with self._lock:
            if self.connection_state == state:
                return
            self.connection_state = state

        for listener in list(self._connection_listeners):
            listener(state)

    # ------------------------------------------------------------------
    # PUBLIC API - Thread-safe access methods
    # ------------------------------------------------------------------

    def get_latest_attitude(self) -> Dict[str, float]:
        with self._lock:
            return {"pitch": self.pitch, "roll": self.roll, "yaw": self.yaw}

    def get_system_stats(self) -> Dict[str, Any]:
        uptime = time.monotonic() - self.start_time if self.start_time else 0.0
        with self._lock:
            return {
                "active": self._active,
                "connection_state": self.connection_state.value,
                "device_supported": self.is_device_supported,
                "samples_received": self.samples_received,
                "samples_dropped": self.samples_dropped,
                "uptime_seconds": uptime,
                "sample_rate_hz": self.samples_received / uptime if uptime > 0 else 0.0,
            }
