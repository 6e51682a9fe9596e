"""
🏗️ Simple Builder Pattern - AirPosture
"""

from typing import Optional

from core.audio.audio_session import AudioSession
from core.audio.posture_audio_router import PostureAudioRouter
from core.hardware.mock_motion_source import MockMotionSource
from core.hardware.motion_source import MotionSource
from core.imu.orientation_monitor import OrientationMonitor
from core.posture.coordinator import PostureCoordinator
from core.posture.posture_sequencer import PostureSequencer
from core.telemetry.loggers.telemetry_logger import TelemetryLogger
from utils.config_sections import (
    PostureConfig,
    clamp_posture_config,
    load_audio_session_config,
    load_mock_motion_config,
)


class Builder:
    """Creates every component of the posture system from Config."""

    def build_motion_source(
        self,
        mode: Optional[str] = None,
        replay_path: Optional[str] = None,
        sample_rate_hz: Optional[float] = None,
    ) -> MotionSource:
        print("  📦 Building MotionSource...")
        config = load_mock_motion_config()
        if mode is not None:
            config.mode = mode
        if replay_path is not None:
            config.replay_path = replay_path
        if sample_rate_hz is not None:
            config.sample_rate_hz = sample_rate_hz
        return MockMotionSource(config)

    def build_orientation_monitor(self, source: MotionSource) -> OrientationMonitor:
        print("  📦 Building OrientationMonitor...")
        return OrientationMonitor(source)

    def build_sequencer(self, config: Optional[PostureConfig] = None) -> PostureSequencer:
        print("  📦 Building PostureSequencer...")
        return PostureSequencer(config)

    def build_audio_session(self, silent_loop_enabled: Optional[bool] = None) -> AudioSession:
        print("  📦 Building AudioSession...")
        config = load_audio_session_config()
        if silent_loop_enabled is not None:
            config.silent_loop_enabled = silent_loop_enabled
        return AudioSession(config)

    def build_audio_router(
        self,
        audio_session: AudioSession,
        telemetry: Optional[TelemetryLogger] = None,
    ) -> PostureAudioRouter:
        print("  📦 Building PostureAudioRouter...")
        return PostureAudioRouter(audio_session, telemetry)

    def build_coordinator(
        self,
        monitor: OrientationMonitor,
        sequencer: PostureSequencer,
        audio_session: AudioSession,
        audio_router: Optional[PostureAudioRouter] = None,
        telemetry: Optional[TelemetryLogger] = None,
    ) -> PostureCoordinator:
        print("  📦 Building PostureCoordinator...")
        return PostureCoordinator(
            monitor=monitor,
            sequencer=sequencer,
            audio_session=audio_session,
            audio_router=audio_router,
            telemetry=telemetry,
            silent_loop_enabled=audio_session.config.silent_loop_enabled,
        )

    def build_full_system(
        self,
        source: Optional[MotionSource] = None,
        mode: Optional[str] = None,
        replay_path: Optional[str] = None,
        threshold: Optional[float] = None,
        volume: Optional[float] = None,
        silent_loop_enabled: Optional[bool] = None,
        telemetry: Optional[TelemetryLogger] = None,
    ) -> PostureCoordinator:
        """
        Build the complete system with its dependencies injected.

        Args:
            source: Pre-built MotionSource (MockMotionSource from Config if None)
            mode: Mock mode override (synthetic / replay / static)
            replay_path: Recording used by replay mode
            threshold: Bad posture threshold, clamped to its range
            volume: Warning volume, clamped to its range
            silent_loop_enabled: Overrides Config.SILENT_LOOP_ENABLED
            telemetry: Optional TelemetryLogger

        Returns:
            PostureCoordinator: System ready for startup()
        """
        print("🏗️ Building full system...")

        if source is None:
            source = self.build_motion_source(mode=mode, replay_path=replay_path)
        monitor = self.build_orientation_monitor(source)
        sequencer = self.build_sequencer(clamp_posture_config(threshold=threshold, volume=volume))
        audio_session = self.build_audio_session(silent_loop_enabled=silent_loop_enabled)
        audio_router = self.build_audio_router(audio_session, telemetry)

        coordinator = self.build_coordinator(
            monitor=monitor,
            sequencer=sequencer,
            audio_session=audio_session,
            audio_router=audio_router,
            telemetry=telemetry,
        )

        print("✅ Full system built!")
        return coordinator


def build_posture_system(**kwargs) -> PostureCoordinator:
    """Convenience function returning a fully wired coordinator."""
    builder = Builder()
    return builder.build_full_system(**kwargs)
