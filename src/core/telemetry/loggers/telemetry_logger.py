"""
Session telemetry for posture monitoring.

This module provides thread-safe telemetry logging for monitoring sessions.
It tracks attitude samples, audio commands and connectivity changes, and
writes a summary when the session ends.

Features:
- Thread-safe metric collection with locks
- JSONL format for efficient streaming analytics
- Session-based organization with unique timestamps
- Real-time summary statistics

Metric Types:
- SampleMetric: pitch/roll/yaw per sample with the posture decision
- AudioCommandMetric: duck / restore / speak_warning routing events
- ConnectivityMetric: headphone connect / disconnect

Usage:
    from core.telemetry.loggers.telemetry_logger import TelemetryLogger

    logger = TelemetryLogger()
    logger.log_sample(pitch=0.7, roll=0.0, yaw=0.1, is_bad=True)
    logger.log_audio_command(action="dispatched", kind="duck")
    summary = logger.finalize_session()
"""

import json
import time
import threading
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, asdict
from datetime import datetime


@dataclass
class SampleMetric:
    """Attitude sample metric."""
    timestamp: float
    pitch: float
    roll: float
    yaw: float
    is_bad: bool


@dataclass
class AudioCommandMetric:
    """Audio command routing metric."""
    timestamp: float
    action: str  # "enqueued", "dispatched", "failed", "dropped"
    kind: str  # "duck", "restore", "speak_warning"
    pitch: Optional[float] = None
    volume: Optional[float] = None
    reason: Optional[str] = None


@dataclass
class ConnectivityMetric:
    """Headphone connectivity change."""
    timestamp: float
    state: str  # "connected", "disconnected"


class TelemetryLogger:
    """
    Centralized thread-safe session logger.
    - Samples: attitude, posture decision
    - Audio: command routing
    - Connectivity: headphone connect / disconnect
    """

    def __init__(self, output_dir: Optional[Path] = None):
        """
        Initialize new telemetry session.

        Args:
            output_dir: Base directory for logs (default: logs/)
        """
        self._write_lock = threading.Lock()
        self._buffer_lock = threading.Lock()

        if output_dir is None:
            project_root = Path(__file__).resolve().parents[4]
            output_dir = project_root / "logs"

        base_dir = Path(output_dir)
        base_dir.mkdir(parents=True, exist_ok=True)

        # Create unique session with readable timestamp
        self.session_timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        self.session_start = time.time()
        self.session_dir = base_dir / f"session_{self.session_timestamp}"
        self.session_dir.mkdir(parents=True, exist_ok=True)
        self.output_dir = self.session_dir

        self.samples_log = self.output_dir / "samples.jsonl"
        self.audio_log = self.output_dir / "audio_commands.jsonl"
        self.connectivity_log = self.output_dir / "connectivity.jsonl"
        self.system_log = self.output_dir / "system.jsonl"

        # Running totals (protected by _buffer_lock)
        self.total_samples = 0
        self.bad_posture_samples = 0
        self.abs_pitch_sum = 0.0
        self.abs_pitch_max = 0.0
        self.audio_by_action: Dict[str, int] = {}
        self.dispatched_by_kind: Dict[str, int] = {}
        self.connectivity_changes = 0

        self._log_system_event("session_start", {
            "session": self.session_timestamp,
            "timestamp": self.session_start
        })

        print(f"[TELEMETRY] New session: {self.session_timestamp}")
        print(f"[TELEMETRY] Folder: {self.output_dir}")

    def get_session_dir(self) -> Path:
        """Return the session directory path for use by other loggers."""
        return self.session_dir

    # ------------------------------------------------------------------
    # Samples
    # ------------------------------------------------------------------

    def log_sample(self, pitch: float, roll: float, yaw: float, is_bad: bool) -> None:
        """
        Record an attitude sample and its posture decision.

        Thread-safe: Can be called from any thread.
        """
        metric = SampleMetric(
            timestamp=time.time(),
            pitch=pitch,
            roll=roll,
            yaw=yaw,
            is_bad=is_bad,
        )
        with self._buffer_lock:
            self.total_samples += 1
            if is_bad:
                self.bad_posture_samples += 1
            self.abs_pitch_sum += abs(pitch)
            self.abs_pitch_max = max(self.abs_pitch_max, abs(pitch))
        self._write_jsonl(self.samples_log, asdict(metric))

    # ------------------------------------------------------------------
    # Audio commands
    # ------------------------------------------------------------------

    def log_audio_command(
        self,
        action: str,
        kind: str,
        pitch: Optional[float] = None,
        volume: Optional[float] = None,
        reason: Optional[str] = None,
    ) -> None:
        """
        Record an audio command routing event.

        Args:
            action: "enqueued", "dispatched", "failed", "dropped"
            kind: "duck", "restore", "speak_warning"
            pitch: Pitch that triggered the command, if any
            volume: Warning volume (speak_warning only)
            reason: Decision or failure reason

        Thread-safe: Can be called from any thread.
        """
        metric = AudioCommandMetric(
            timestamp=time.time(),
            action=action,
            kind=kind,
            pitch=pitch,
            volume=volume,
            reason=reason,
        )
        with self._buffer_lock:
            self.audio_by_action[action] = self.audio_by_action.get(action, 0) + 1
            if action == "dispatched":
                self.dispatched_by_kind[kind] = self.dispatched_by_kind.get(kind, 0) + 1
        self._write_jsonl(self.audio_log, asdict(metric))

    # ------------------------------------------------------------------
    # Connectivity
    # ------------------------------------------------------------------

    def log_connectivity(self, state: str) -> None:
        metric = ConnectivityMetric(timestamp=time.time(), state=state)
        with self._buffer_lock:
            self.connectivity_changes += 1
        self._write_jsonl(self.connectivity_log, asdict(metric))

    # ------------------------------------------------------------------
    # System Events
    # ------------------------------------------------------------------

    def _log_system_event(self, event_type: str, data: Dict[str, Any]) -> None:
        """Record system events."""
        payload = {
            "timestamp": time.time(),
            "session": self.session_timestamp,
            "event_type": event_type,
            **data
        }
        self._write_jsonl(self.system_log, payload)

    def log_event(self, event_type: str, **kwargs: Any) -> None:
        """Record a named application event (monitoring started, config changed...)."""
        self._log_system_event(event_type, kwargs)

    def log_error(self, error_type: str, message: str, **kwargs: Any) -> None:
        """Record a system error."""
        self._log_system_event("error", {
            "error_type": error_type,
            "message": message,
            **kwargs
        })

    # ------------------------------------------------------------------
    # Session Management
    # ------------------------------------------------------------------

    def finalize_session(self) -> Dict[str, Any]:
        """
        Finalize session and generate summary.

        Returns:
            Dict with session statistics
        """
        session_duration = time.time() - self.session_start

        audio = self.get_audio_summary()
        with self._buffer_lock:
            total = self.total_samples
            bad_samples = self.bad_posture_samples
            pitch_sum = self.abs_pitch_sum
            pitch_max = self.abs_pitch_max
            connectivity_changes = self.connectivity_changes

        summary = {
            "session": self.session_timestamp,
            "duration_seconds": session_duration,
            "total_samples": total,
            "bad_posture_samples": bad_samples,
            "bad_posture_ratio": bad_samples / total if total else 0.0,
            "avg_abs_pitch": pitch_sum / total if total else 0.0,
            "max_abs_pitch": pitch_max,
            "total_audio_events": audio["total_events"],
            "audio_by_action": audio["by_action"],
            "dispatched_by_kind": audio["dispatched_by_kind"],
            "connectivity_changes": connectivity_changes,
        }

        self._log_system_event("session_end", summary)

        summary_path = self.output_dir / "summary.json"
        with open(summary_path, 'w') as f:
            json.dump(summary, f, indent=2)

        print(f"[TELEMETRY] Session finalized: {self.session_timestamp}")
        print(f"[TELEMETRY] Summary saved: {summary_path.name}")

        return summary

    # ------------------------------------------------------------------
    # Analysis Helpers
    # ------------------------------------------------------------------

    def get_audio_summary(self) -> Dict[str, Any]:
        """
        Get audio command statistics.

        Thread-safe: Can be called from any thread.
        """
        with self._buffer_lock:
            by_action = dict(self.audio_by_action)
            dispatched_by_kind = dict(self.dispatched_by_kind)

        return {
            "total_events": sum(by_action.values()),
            "by_action": by_action,
            "dispatched_by_kind": dispatched_by_kind,
        }

    # ------------------------------------------------------------------
    # Internal I/O
    # ------------------------------------------------------------------

    def _write_jsonl(self, path: Path, data: Dict[str, Any]) -> None:
        with self._write_lock:
            with open(path, 'a') as f:
                f.write(json.dumps(data) + '\n')
