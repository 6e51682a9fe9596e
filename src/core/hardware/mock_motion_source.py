#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Mock headphone motion source for testing without physical headphones.

This module provides a drop-in replacement for a platform headphone motion
manager that enables development and testing without motion-capable
headphones by providing:
1. Synthetic head nodding (pitch sine wave with Gaussian noise)
2. Replay of recorded attitude samples (JSONL or CSV) in loop
3. A static attitude

Operating modes:
- 'synthetic': pitch = amplitude * sin(2*pi*t / period) + noise
- 'replay': Replays a JSONL ({"pitch":..,"roll":..,"yaw":..} per line) or CSV
  (header pitch,roll,yaw) recording
- 'static': Returns a constant attitude

Usage:
    # Synthetic mode (default)
    source = MockMotionSource(MockMotionConfig(mode='synthetic'))

    # Replay mode
    source = MockMotionSource(MockMotionConfig(mode='replay', replay_path='data/session.jsonl'))
"""

from __future__ import annotations

import csv
import json
import logging
import threading
import time
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from core.hardware.motion_source import (
    Attitude,
    DeviceMotion,
    MotionHandler,
    MotionSource,
    MotionSourceDelegate,
)
from utils.config_sections import MockMotionConfig, load_mock_motion_config

log = logging.getLogger("posture.motion")

AttitudeTuple = Tuple[float, float, float]


def load_attitude_recording(path: str) -> List[AttitudeTuple]:
    """
    Load a recorded attitude sequence.

    Args:
        path: .jsonl/.json lines file or .csv file with pitch, roll, yaw columns

    Returns:
        List of (pitch, roll, yaw) tuples in file order

    Raises:
        ValueError: If the file is missing or holds no usable rows
    """
    file_path = Path(path)
    if not file_path.exists():
        raise ValueError(f"Recording not found: {path}")

    rows: List[AttitudeTuple] = []
    if file_path.suffix.lower() == ".csv":
        with open(file_path, newline="") as f:
            for record in csv.DictReader(f):
                try:
                    rows.append((float(record["pitch"]), float(record["roll"]), float(record["yaw"])))
                except (KeyError, TypeError, ValueError):
                    continue
    else:
        with open(file_path, "r") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    record = json.loads(line)
                    rows.append((float(record["pitch"]), float(record["roll"]), float(record["yaw"])))
                except (json.JSONDecodeError, KeyError, TypeError, ValueError):
                    continue

    if not rows:
        raise ValueError(f"No attitude samples in recording: {path}")
    return rows


class MockMotionSource(MotionSource):
    """
    Mock headphone motion manager for development without hardware.

    Operating modes:
    - 'synthetic': Generates a nodding head attitude
    - 'replay': Replays a recording in loop
    - 'static': Constant attitude

    See module docstring for usage examples.
    """

    def __init__(self, config: Optional[MockMotionConfig] = None) -> None:
        self.config = config or load_mock_motion_config()
        self.mode = self.config.mode
        self.interval = 1.0 / max(1e-3, float(self.config.sample_rate_hz))

        self._delegate: Optional[MotionSourceDelegate] = None
        self._handler: Optional[MotionHandler] = None
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self.running = False
        self.sample_index = 0
        self.start_time: Optional[float] = None
        self._rng = np.random.default_rng(self.config.random_seed)
        self._recording: List[AttitudeTuple] = []

        self._init_mode()

        log.info(
            "[MockMotionSource] Initialized in '%s' mode @ %.1f Hz",
            self.mode,
            self.config.sample_rate_hz,
        )

    def _init_mode(self) -> None:
        """Initialize resources based on selected mode."""
        if self.mode == "replay":
            if not self.config.replay_path:
                raise ValueError("Replay mode requires a recording path")
            self._recording = load_attitude_recording(self.config.replay_path)
            log.info(
                "[MockMotionSource] Loaded %d samples from %s",
                len(self._recording),
                self.config.replay_path,
            )
        elif self.mode == "static":
            if len(self.config.static_attitude) != 3:
                raise ValueError("Static attitude must be (pitch, roll, yaw)")
        elif self.mode != "synthetic":
            raise ValueError(f"Unknown mode: {self.mode}")

    # ------------------------------------------------------------------
    # MotionSource API
    # ------------------------------------------------------------------

    def is_device_motion_available(self) -> bool:
        return bool(self.config.device_available)

    def set_delegate(self, delegate: Optional[MotionSourceDelegate]) -> None:
        self._delegate = delegate

    def start_device_motion_updates(self, handler: MotionHandler) -> None:
        """Start sample generation on a background thread."""
        with self._lock:
            if self.running:
                log.debug("[MockMotionSource] Already running")
                return
            self._handler = handler
            self.running = True
            self.start_time = time.monotonic()
            self.sample_index = 0
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._generate_samples, name="MockMotionSource", daemon=True
            )
            self._thread.start()

        if self.config.announce_connection:
            self.simulate_connect()
        log.info("[MockMotionSource] Started motion updates")

    def stop_device_motion_updates(self) -> None:
        """Stop sample generation; no handler call starts after return."""
        with self._lock:
            if not self.running:
                return
            self.running = False
            self._stop_event.set()
            thread = self._thread
            self._thread = None

        if thread and thread is not threading.current_thread():
            thread.join(timeout=2.0)
        self._handler = None
        log.info("[MockMotionSource] Stopped motion updates")

    # ------------------------------------------------------------------
    # Connectivity simulation
    # ------------------------------------------------------------------

    def simulate_connect(self) -> None:
        if self._delegate is not None:
            self._delegate.on_headphone_connected()

    def simulate_disconnect(self) -> None:
        if self._delegate is not None:
            self._delegate.on_headphone_disconnected()

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def next_attitude(self) -> AttitudeTuple:
        """Produce the attitude for the current sample index and advance it."""
        index = self.sample_index
        self.sample_index += 1

        if self.mode == "replay":
            if index >= len(self._recording):
                if not self.config.replay_loop:
                    raise StopIteration
                index %= len(self._recording)
            return self._recording[index]

        if self.mode == "static":
            pitch, roll, yaw = self.config.static_attitude
            return float(pitch), float(roll), float(yaw)

        t = index * self.interval
        period = max(1e-3, float(self.config.pitch_period))
        phase = 2.0 * np.pi * t / period
        noise = self._rng.normal(0.0, self.config.noise_std, size=3) if self.config.noise_std > 0 else np.zeros(3)
        pitch = self.config.pitch_amplitude * np.sin(phase) + noise[0]
        roll = self.config.roll_amplitude * np.sin(phase / 2.0) + noise[1]
        yaw = noise[2]
        return float(pitch), float(roll), float(yaw)

    def _generate_samples(self) -> None:
        """Worker thread: deliver one motion record per interval."""
        next_deadline = time.monotonic()
        while not self._stop_event.is_set():
            try:
                pitch, roll, yaw = self.next_attitude()
            except StopIteration:
                log.info("[MockMotionSource] Recording finished")
                break

            motion = DeviceMotion(
                attitude=Attitude(pitch=pitch, roll=roll, yaw=yaw),
                timestamp=time.monotonic(),
            )
            handler = self._handler
            if handler is not None and not self._stop_event.is_set():
                try:
                    handler(motion, None)
                except Exception as exc:
                    log.warning("[MockMotionSource] Handler error: %s", exc)

            next_deadline += self.interval
            delay = next_deadline - time.monotonic()
            if delay > 0:
                self._stop_event.wait(delay)
            else:
                next_deadline = time.monotonic()

    def get_stats(self) -> dict:
        uptime = time.monotonic() - self.start_time if self.start_time else 0.0
        return {
            "mode": self.mode,
            "running": self.running,
            "samples": self.sample_index,
            "uptime_seconds": uptime,
            "rate_hz": self.sample_index / uptime if uptime > 0 else 0.0,
        }
