"""
System output volume control used for ducking.

Backends:
- macOS: ``osascript`` (AppleScript volume settings)
- Linux: ``pactl`` (PulseAudio / PipeWire default sink)

All failures surface as AudioSessionError so the audio session can run its
direct -> deactivate -> retry sequence.
"""

import logging
import platform
import re
import shutil
import subprocess
from typing import List, Optional

log = logging.getLogger("posture.audio")

_PERCENT_RE = re.compile(r"(\d+)%")


class AudioSessionError(RuntimeError):
    """A mixer/session operation failed."""


class SystemVolumeControl:
    """Read and set the system output volume (0.0 - 1.0)."""

    def __init__(self, timeout: float = 2.0) -> None:
        self.timeout = timeout
        self.backend: Optional[str] = None
        self._detect_backend()

    def _detect_backend(self) -> None:
        system = platform.system()
        if system == "Darwin" and shutil.which("osascript"):
            self.backend = "osascript"
        elif system == "Linux" and shutil.which("pactl"):
            self.backend = "pactl"
        else:
            self.backend = None
            log.warning("[VOLUME] No supported mixer backend found for %s", system)

    def reset(self) -> None:
        """Re-detect the mixer backend."""
        self._detect_backend()

    @property
    def available(self) -> bool:
        return self.backend is not None

    def _run(self, cmd: List[str]) -> str:
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            raise AudioSessionError(f"{cmd[0]} failed: {(e.stderr or '').strip()}") from e
        except (subprocess.TimeoutExpired, FileNotFoundError) as e:
            raise AudioSessionError(f"{cmd[0]} unavailable: {e}") from e
        return result.stdout

    def get_volume(self) -> float:
        if self.backend == "osascript":
            out = self._run(["osascript", "-e", "output volume of (get volume settings)"])
            try:
                return max(0.0, min(1.0, int(out.strip()) / 100.0))
            except ValueError as e:
                raise AudioSessionError(f"Unexpected osascript output: {out!r}") from e

        if self.backend == "pactl":
            out = self._run(["pactl", "get-sink-volume", "@DEFAULT_SINK@"])
            match = _PERCENT_RE.search(out)
            if not match:
                raise AudioSessionError(f"Unexpected pactl output: {out!r}")
            return max(0.0, min(1.0, int(match.group(1)) / 100.0))

        raise AudioSessionError("No mixer backend available")

    def set_volume(self, level: float) -> None:
        percent = int(round(max(0.0, min(1.0, float(level))) * 100))

        if self.backend == "osascript":
            self._run(["osascript", "-e", f"set volume output volume {percent}"])
        elif self.backend == "pactl":
            self._run(["pactl", "set-sink-volume", "@DEFAULT_SINK@", f"{percent}%"])
        else:
            raise AudioSessionError("No mixer backend available")

        log.debug("[VOLUME] Output volume set to %d%%", percent)
