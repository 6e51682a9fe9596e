"""
Typed configuration sections for AirPosture.

This module provides strongly-typed configuration sections to replace
scattered getattr(Config, ...) calls with proper type hints and defaults.

Benefits:
- Type safety: IDE autocomplete and type checking
- Discoverability: All config options visible in one place
- Default values: Centralized and documented
- Better testing: Can mock entire config sections
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class PostureConfig:
    """User-tunable posture settings (owned by the UI layer)."""

    # Pitch magnitude (radians) above which posture is bad
    bad_posture_threshold: float = 0.6

    # Volume of the spoken warning (0.0 to 1.0)
    warning_volume: float = 1.0


@dataclass
class AudioSessionConfig:
    """Configuration for ducking, speech warning and keepalive loop."""

    duck_level: float = 0.3  # Multiplier applied to output volume while ducked
    command_timeout: float = 2.0  # seconds

    warning_phrase: str = "Posture"
    tts_rate_say: int = 175
    tts_rate_pyttsx3: int = 150

    silent_loop_enabled: bool = True
    silent_loop_sample_rate: int = 44100
    silent_loop_seconds: float = 1.0


@dataclass
class AudioRouterConfig:
    """Configuration for the audio command queue."""

    queue_size: int = 16
    stop_timeout: float = 1.0  # seconds to wait for the worker on stop
    restore_put_timeout: float = 1.0  # seconds a Restore may wait for queue space


@dataclass
class MockMotionConfig:
    """Configuration for the mock headphone motion source."""

    mode: str = "synthetic"  # synthetic | replay | static
    sample_rate_hz: float = 25.0
    announce_connection: bool = True
    device_available: bool = True

    pitch_amplitude: float = 0.9
    pitch_period: float = 12.0
    roll_amplitude: float = 0.1
    noise_std: float = 0.02
    random_seed: Optional[int] = None

    replay_path: Optional[str] = None
    replay_loop: bool = True
    static_attitude: Tuple[float, float, float] = (0.0, 0.0, 0.0)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, float(value)))


def clamp_posture_config(
    threshold: Optional[float] = None,
    volume: Optional[float] = None,
    base: Optional[PostureConfig] = None,
) -> PostureConfig:
    """
    Build a PostureConfig with values clamped to their declared ranges.

    This is the UI-boundary validation step; downstream components trust
    the returned values.

    Args:
        threshold: New bad posture threshold, or None to keep the base value
        volume: New warning volume, or None to keep the base value
        base: Config to start from (defaults from Config if None)

    Returns:
        PostureConfig with both fields inside their ranges
    """
    from utils.config import Config

    current = base or load_posture_config()
    if threshold is None:
        threshold = current.bad_posture_threshold
    if volume is None:
        volume = current.warning_volume

    return PostureConfig(
        bad_posture_threshold=_clamp(
            threshold,
            getattr(Config, "POSTURE_THRESHOLD_MIN", 0.1),
            getattr(Config, "POSTURE_THRESHOLD_MAX", 1.5),
        ),
        warning_volume=_clamp(
            volume,
            getattr(Config, "WARNING_VOLUME_MIN", 0.0),
            getattr(Config, "WARNING_VOLUME_MAX", 1.0),
        ),
    )


def load_posture_config() -> PostureConfig:
    """
    Load posture configuration from Config with fallback defaults.

    Returns:
        PostureConfig with values from Config or defaults
    """
    from utils.config import Config

    return PostureConfig(
        bad_posture_threshold=getattr(Config, "POSTURE_THRESHOLD_DEFAULT", 0.6),
        warning_volume=getattr(Config, "WARNING_VOLUME_DEFAULT", 1.0),
    )


def load_audio_session_config() -> AudioSessionConfig:
    """
    Load audio session configuration from Config with fallback defaults.

    Returns:
        AudioSessionConfig with values from Config or defaults
    """
    from utils.config import Config

    return AudioSessionConfig(
        duck_level=getattr(Config, "DUCK_LEVEL", 0.3),
        command_timeout=getattr(Config, "VOLUME_COMMAND_TIMEOUT", 2.0),
        warning_phrase=getattr(Config, "WARNING_PHRASE", "Posture"),
        tts_rate_say=getattr(Config, "TTS_RATE_SAY", 175),
        tts_rate_pyttsx3=getattr(Config, "TTS_RATE_PYTTSX3", 150),
        silent_loop_enabled=getattr(Config, "SILENT_LOOP_ENABLED", True),
        silent_loop_sample_rate=getattr(Config, "SILENT_LOOP_SAMPLE_RATE", 44100),
        silent_loop_seconds=getattr(Config, "SILENT_LOOP_SECONDS", 1.0),
    )


def load_audio_router_config() -> AudioRouterConfig:
    """
    Load audio router configuration from Config with fallback defaults.

    Returns:
        AudioRouterConfig with values from Config or defaults
    """
    from utils.config import Config

    return AudioRouterConfig(
        queue_size=getattr(Config, "AUDIO_ROUTER_QUEUE_SIZE", 16),
        stop_timeout=getattr(Config, "AUDIO_ROUTER_STOP_TIMEOUT", 1.0),
        restore_put_timeout=getattr(Config, "AUDIO_ROUTER_RESTORE_PUT_TIMEOUT", 1.0),
    )


def load_mock_motion_config() -> MockMotionConfig:
    """
    Load mock motion source configuration from Config with fallback defaults.

    Returns:
        MockMotionConfig with values from Config or defaults
    """
    from utils.config import Config

    return MockMotionConfig(
        mode=getattr(Config, "MOTION_SOURCE", "synthetic"),
        sample_rate_hz=getattr(Config, "MOCK_SAMPLE_RATE_HZ", 25.0),
        announce_connection=getattr(Config, "MOCK_ANNOUNCE_CONNECTION", True),
        device_available=getattr(Config, "MOCK_DEVICE_AVAILABLE", True),
        pitch_amplitude=getattr(Config, "MOCK_PITCH_AMPLITUDE", 0.9),
        pitch_period=getattr(Config, "MOCK_PITCH_PERIOD", 12.0),
        roll_amplitude=getattr(Config, "MOCK_ROLL_AMPLITUDE", 0.1),
        noise_std=getattr(Config, "MOCK_NOISE_STD", 0.02),
        random_seed=getattr(Config, "MOCK_RANDOM_SEED", None),
        replay_path=getattr(Config, "MOCK_REPLAY_PATH", None),
        replay_loop=getattr(Config, "MOCK_REPLAY_LOOP", True),
        static_attitude=tuple(getattr(Config, "MOCK_STATIC_ATTITUDE", (0.0, 0.0, 0.0))),
    )
