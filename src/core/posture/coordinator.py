#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations
"""
Posture Coordinator - AirPosture

Wires the orientation monitor, posture sequencer and audio session together
and exposes the user-facing controls: start/stop monitoring, threshold and
volume settings, and a status snapshot for display.

Data Flow:
    MotionSource → OrientationMonitor → (monitoring?) → PostureSequencer
        → PostureAudioRouter → AudioSession (duck / restore / speak)

Lifecycle:
- startup(): router, monitor and silent keepalive loop come up
- start_monitoring(): only when the sensor is available and connected
- stop_monitoring(): a final restore is delivered if audio was ducked
- shutdown(): stop monitoring, drain the router, stop the monitor, close audio
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

from core.imu.orientation_monitor import OrientationMonitor, SensorUnavailable
from core.imu.orientation_state import ConnectionState, OrientationSample
from core.posture.posture_commands import CommandKind, PostureCommand
from core.posture.posture_sequencer import PostureSequencer
from utils.config_sections import PostureConfig, clamp_posture_config

log = logging.getLogger("posture.sequencer")


@dataclass(frozen=True)
class PostureStatus:
    """Snapshot of everything the UI shows."""

    connected: bool
    monitor_active: bool
    monitoring: bool
    monitoring_available: bool
    device_supported: bool
    pitch: float
    roll: float
    yaw: float
    is_ducked: bool
    is_bad_posture: bool
    threshold: float
    volume: float


class PostureCoordinator:
    """
    Orchestrates monitor, sequencer and audio output.

    Receives pre-built components via dependency injection (see Builder) and
    only coordinates them. Samples reach the sequencer only while monitoring
    is on; the monitor itself keeps running so the display stays live.

    Attributes:
        monitor: OrientationMonitor delivering samples and connectivity
        sequencer: PostureSequencer deciding duck/restore/speak
        audio_session: AudioSession applying commands
        audio_router: PostureAudioRouter, or None for synchronous dispatch
        telemetry: Optional TelemetryLogger
    """

    def __init__(
        self,
        monitor: OrientationMonitor,
        sequencer: PostureSequencer,
        audio_session,
        audio_router=None,
        telemetry=None,
        silent_loop_enabled: bool = True,
    ) -> None:
        self.monitor = monitor
        self.sequencer = sequencer
        self.audio_session = audio_session
        self.audio_router = audio_router
        self.telemetry = telemetry
        self.silent_loop_enabled = silent_loop_enabled

        self.config: PostureConfig = sequencer.config
        self.monitoring = False
        self.monitoring_available = monitor.is_device_supported
        self._lock = threading.Lock()

        if self.audio_router is not None:
            self.sequencer.add_command_listener(self.audio_router.enqueue)
        else:
            self.sequencer.add_command_listener(self._dispatch_direct)

        self.monitor.add_sample_listener(self._on_sample)
        self.monitor.add_connection_listener(self._on_connection_changed)

        print("[INFO] PostureCoordinator initialized")
        print(f"  - Monitor: {type(self.monitor).__name__}")
        print(f"  - Audio: {type(self.audio_session).__name__}")
        print(f"  - Router: {type(self.audio_router).__name__ if self.audio_router else 'None'}")

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    def startup(self) -> None:
        """
        Bring up audio routing, motion updates and the keepalive loop.

        Raises:
            SensorUnavailable: Headphone motion is not supported here.
        """
        if self.audio_router is not None:
            self.audio_router.start()

        try:
            self.monitor.start()
        except SensorUnavailable as exc:
            self.monitoring_available = False
            if self.telemetry:
                self.telemetry.log_error("sensor_unavailable", str(exc))
            raise

        self.monitoring_available = True
        if self.silent_loop_enabled:
            self.audio_session.start_silent_loop()

    def start_monitoring(self) -> bool:
        """Start evaluating posture. Requires a supported and connected sensor."""
        with self._lock:
            if self.monitoring:
                return True
            if not self.monitoring_available:
                log.warning("Cannot start monitoring: headphone motion unavailable")
                return False
            if not self.monitor.is_connected:
                log.warning("Cannot start monitoring: headphones not connected")
                return False
            self.monitoring = True

        self.audio_session.start_background_task()
        log.info("Monitoring started")
        if self.telemetry:
            self.telemetry.log_event("monitoring_started")
        return True

    def stop_monitoring(self) -> None:
        with self._lock:
            if not self.monitoring:
                return
            self.monitoring = False
            # Under the sample lock so no evaluation can land after the final restore
            self.sequencer.stop()

        log.info("Monitoring stopped")
        if self.telemetry:
            self.telemetry.log_event("monitoring_stopped")

    def toggle_monitoring(self) -> bool:
        """Flip monitoring on/off; returns the new monitoring state."""
        if self.monitoring:
            self.stop_monitoring()
        else:
            self.start_monitoring()
        return self.monitoring

    def update_config(
        self,
        threshold: Optional[float] = None,
        volume: Optional[float] = None,
    ) -> PostureConfig:
        """Apply user settings, clamped to their allowed ranges."""
        config = clamp_posture_config(threshold=threshold, volume=volume, base=self.config)
        self.config = config
        self.sequencer.update_config(config)
        if self.telemetry:
            self.telemetry.log_event(
                "config_changed",
                threshold=config.bad_posture_threshold,
                volume=config.warning_volume,
            )
        return config

    def shutdown(self) -> None:
        print("[INFO] Shutting down PostureCoordinator...")
        self.stop_monitoring()

        if self.audio_router is not None:
            try:
                self.audio_router.stop()
            except Exception as err:
                print(f"  [WARN] Audio router shutdown error: {err}")

        try:
            self.monitor.stop()
        except Exception as err:
            print(f"  [WARN] Monitor shutdown error: {err}")

        try:
            self.audio_session.close()
        except Exception as err:
            print(f"  [WARN] Audio session close error: {err}")

        print("[INFO] PostureCoordinator shutdown complete")

    # ------------------------------------------------------------------
    # monitor callbacks
    # ------------------------------------------------------------------

    def _on_sample(self, sample: OrientationSample) -> None:
        with self._lock:
            if not self.monitoring:
                return
            config = self.config
            self.sequencer.on_sample(sample, config)

        if self.telemetry:
            self.telemetry.log_sample(
                pitch=sample.pitch,
                roll=sample.roll,
                yaw=sample.yaw,
                is_bad=self.sequencer.is_bad_posture(sample.pitch, config),
            )

    def _on_connection_changed(self, state: ConnectionState) -> None:
        print(f"[HEADPHONES] {state.value}")
        if self.telemetry:
            self.telemetry.log_connectivity(state.value)

    def _dispatch_direct(self, command: PostureCommand) -> None:
        if command.kind == CommandKind.DUCK:
            self.audio_session.duck()
        elif command.kind == CommandKind.RESTORE:
            self.audio_session.restore()
        elif command.kind == CommandKind.SPEAK_WARNING:
            self.audio_session.speak_warning(command.volume if command.volume is not None else 1.0)

    # ------------------------------------------------------------------
    # status
    # ------------------------------------------------------------------

    def get_status(self) -> PostureStatus:
        attitude = self.monitor.get_latest_attitude()
        return PostureStatus(
            connected=self.monitor.is_connected,
            monitor_active=self.monitor.is_active,
            monitoring=self.monitoring,
            monitoring_available=self.monitoring_available,
            device_supported=self.monitor.is_device_supported,
            pitch=attitude["pitch"],
            roll=attitude["roll"],
            yaw=attitude["yaw"],
            is_ducked=self.sequencer.is_ducked,
            is_bad_posture=self.sequencer.is_bad_posture(attitude["pitch"], self.config),
            threshold=self.config.bad_posture_threshold,
            volume=self.config.warning_volume,
        )

    def get_stats(self) -> Dict[str, Any]:
        stats: Dict[str, Any] = {
            "monitor": self.monitor.get_system_stats(),
            "sequencer": self.sequencer.get_state_summary(),
        }
        if self.audio_router is not None:
            stats["router"] = self.audio_router.get_metrics()
        return stats

    def print_stats(self) -> None:
        stats = self.get_stats()
        monitor = stats["monitor"]
        sequencer = stats["sequencer"]
        print("\n[COORDINATOR STATS]")
        print(f"  Samples received: {monitor['samples_received']} (dropped {monitor['samples_dropped']})")
        print(f"  Samples evaluated: {sequencer['samples_evaluated']}")
        print(f"  Ducks: {sequencer['duck_count']}, Restores: {sequencer['restore_count']}")
        if "router" in stats:
            router = stats["router"]
            print(
                f"  Audio commands: {router['commands_dispatched']} dispatched, "
                f"{router['commands_failed']} failed, {router['commands_dropped']} dropped"
            )
