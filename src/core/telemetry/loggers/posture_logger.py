"""
Dedicated logger for posture monitoring and audio debugging.

This module provides a singleton that attaches session log files to the
channel loggers used across the package, for easier analysis and
troubleshooting.

Features:
- Singleton pattern (one instance per session)
- Separate log files for motion, posture decisions, audio session and routing
- DEBUG level logging to files
- WARNING level console output for critical messages

Log Files:
- motion.log: Headphone connectivity and motion source events
- posture_sequencer.log: Posture decisions and config changes
- audio_session.log: Ducking, speech and keepalive loop
- audio_routing.log: Command queue delivery

Modules log through ``logging.getLogger("posture.<channel>")`` and need no
handle to this class; until the logger is initialized those records go to
the root logger configuration.

Usage:
    from core.telemetry.loggers.posture_logger import get_posture_logger

    posture_logger = get_posture_logger(session_dir=Path("logs/session_2025-01-15_10-30-00"))
    posture_logger.sequencer.debug("Evaluating sample...")
"""

import logging
from pathlib import Path
from datetime import datetime

CHANNELS = {
    "motion": "motion.log",
    "sequencer": "posture_sequencer.log",
    "audio": "audio_session.log",
    "routing": "audio_routing.log",
}


class PostureLogger:
    """Singleton logger for posture monitoring and audio debugging."""

    _instance = None
    _initialized = False

    def __new__(cls, session_dir: Path = None, console_level: int = logging.WARNING):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, session_dir: Path = None, console_level: int = logging.WARNING):
        if self._initialized:
            return

        if session_dir is None:
            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            project_root = Path(__file__).resolve().parents[4]
            self.log_dir = project_root / "logs" / f"session_{timestamp}"
        else:
            self.log_dir = Path(session_dir)

        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.console_level = console_level

        for name, filename in CHANNELS.items():
            self._setup_logger(name, filename)

        self._initialized = True

    def _setup_logger(self, name: str, filename: str):
        """Setup individual logger with file handler."""
        logger = logging.getLogger(f"posture.{name}")
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

        logger.handlers.clear()

        fh = logging.FileHandler(self.log_dir / filename, mode='w')
        fh.setLevel(logging.DEBUG)

        ch = logging.StreamHandler()
        ch.setLevel(self.console_level)

        formatter = logging.Formatter(
            '%(asctime)s.%(msecs)03d [%(levelname)s] %(message)s',
            datefmt='%H:%M:%S'
        )
        fh.setFormatter(formatter)
        ch.setFormatter(formatter)

        logger.addHandler(fh)
        logger.addHandler(ch)

        setattr(self, name, logger)

    def close(self):
        """Close all handlers and release the channel loggers."""
        for name in CHANNELS:
            logger = getattr(self, name, None)
            if logger:
                for handler in logger.handlers[:]:
                    handler.close()
                    logger.removeHandler(handler)
                logger.propagate = True
        PostureLogger._initialized = False
        PostureLogger._instance = None


# Global instance
_posture_logger = None


def get_posture_logger(session_dir: Path = None, console_level: int = logging.WARNING):
    """Get or create posture logger instance."""
    global _posture_logger
    if _posture_logger is None:
        _posture_logger = PostureLogger(session_dir=session_dir, console_level=console_level)
    return _posture_logger


def close_posture_logger() -> None:
    global _posture_logger
    if _posture_logger is not None:
        _posture_logger.close()
        _posture_logger = None
