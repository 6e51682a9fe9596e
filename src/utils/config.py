"""
Centralized configuration for the AirPosture monitor.

This module provides all configuration constants and runtime settings for:
- Posture evaluation (bad posture threshold and warning volume ranges)
- Audio session (ducking level, speech warning, silent keepalive loop)
- Audio command routing (queue size, shutdown timeout)
- Motion sources (mock synthetic/replay/static generation)
- Session logging and telemetry output

The Config class contains all constants as class attributes, making them
accessible throughout the application without instantiation.

Usage:
    from utils.config import Config

    threshold = Config.POSTURE_THRESHOLD_DEFAULT
    if Config.SILENT_LOOP_ENABLED:
        # Keep the audio route alive in the background
"""

import logging

log = logging.getLogger(__name__)


class Config:
    """System configuration constants for AirPosture."""

    # ==========================================================================
    # POSTURE: Threshold & Warning Volume (radians / linear gain)
    # ==========================================================================

    POSTURE_THRESHOLD_DEFAULT = 0.6
    POSTURE_THRESHOLD_MIN = 0.1
    POSTURE_THRESHOLD_MAX = 1.5

    WARNING_VOLUME_DEFAULT = 1.0
    WARNING_VOLUME_MIN = 0.0
    WARNING_VOLUME_MAX = 1.0

    # ==========================================================================
    # AUDIO SESSION: Ducking, Speech & Keepalive
    # ==========================================================================

    # Output volume multiplier applied while ducked
    DUCK_LEVEL = 0.3

    # Timeout for mixer commands (osascript / pactl)
    VOLUME_COMMAND_TIMEOUT = 2.0

    # Spoken warning
    WARNING_PHRASE = "Posture"
    TTS_RATE_SAY = 175              # words per minute for macOS 'say'
    TTS_RATE_PYTTSX3 = 150          # espeak-ng is fast by default

    # Silent loop that keeps the audio route alive while monitoring
    SILENT_LOOP_ENABLED = True
    SILENT_LOOP_SAMPLE_RATE = 44100
    SILENT_LOOP_SECONDS = 1.0

    # ==========================================================================
    # AUDIO ROUTER: Command queue
    # ==========================================================================

    AUDIO_ROUTER_QUEUE_SIZE = 16
    AUDIO_ROUTER_STOP_TIMEOUT = 1.0
    AUDIO_ROUTER_RESTORE_PUT_TIMEOUT = 1.0

    # ==========================================================================
    # MOTION SOURCES: Mock headphone motion
    # ==========================================================================

    MOTION_SOURCE = "synthetic"         # synthetic | replay | static
    MOCK_SAMPLE_RATE_HZ = 25.0
    MOCK_ANNOUNCE_CONNECTION = True     # some platforms omit the explicit connect signal
    MOCK_DEVICE_AVAILABLE = True

    # Synthetic head nod: pitch = amplitude * sin(2*pi*t / period) + noise
    MOCK_PITCH_AMPLITUDE = 0.9
    MOCK_PITCH_PERIOD = 12.0
    MOCK_ROLL_AMPLITUDE = 0.1
    MOCK_NOISE_STD = 0.02
    MOCK_RANDOM_SEED = None

    # Replay / static
    MOCK_REPLAY_PATH = None
    MOCK_REPLAY_LOOP = True
    MOCK_STATIC_ATTITUDE = (0.0, 0.0, 0.0)

    # ==========================================================================
    # UI / SESSION
    # ==========================================================================

    STATUS_PRINT_INTERVAL = 1.0
    TELEMETRY_ENABLED = True
    LOG_DIR = "logs"

    def __init__(self):
        """Log the active posture defaults."""
        log.info(
            "[CONFIG] Threshold: %.2f rad (range %.1f-%.1f), warning volume: %.2f",
            self.POSTURE_THRESHOLD_DEFAULT,
            self.POSTURE_THRESHOLD_MIN,
            self.POSTURE_THRESHOLD_MAX,
            self.WARNING_VOLUME_DEFAULT,
        )
