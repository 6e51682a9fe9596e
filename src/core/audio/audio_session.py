import logging
import platform
import shutil
import subprocess
import threading
import time
from typing import Optional

# Try to import dependencies and handle missing ones
try:
    import numpy as np
except ImportError:
    np = None
    print("[WARN] Numpy not found. Silent keepalive loop will be disabled.")

try:
    import sounddevice as sd
except (ImportError, OSError):
    # OSError: PortAudio library not found
    sd = None
    print("[WARN] Sounddevice not found. Silent keepalive loop will be disabled.")

try:
    import pyttsx3
except ImportError:
    pyttsx3 = None
    print("[WARN] pyttsx3 not found. TTS will be disabled on non-macOS systems.")

from core.audio.volume_control import AudioSessionError, SystemVolumeControl
from utils.config_sections import AudioSessionConfig, load_audio_session_config

log = logging.getLogger("posture.audio")

MIX_WITH_OTHERS = "mix_with_others"
DUCK_OTHERS = "duck_others"


class AudioSession:
    """Audio session for posture feedback: ducking, spoken warning and keepalive loop."""

    def __init__(
        self,
        config: Optional[AudioSessionConfig] = None,
        volume_control: Optional[SystemVolumeControl] = None,
    ):
        self.config = config or load_audio_session_config()
        self.volume_control = volume_control or SystemVolumeControl(timeout=self.config.command_timeout)

        self.tts_engine = None
        self.tts_backend: Optional[str] = None
        self.tts_rate = self.config.tts_rate_say
        self._setup_tts()

        # Session state
        self.category_options = MIX_WITH_OTHERS
        self.is_active = False
        self.is_ducked = False
        self._saved_volume: Optional[float] = None
        self._state_lock = threading.Lock()

        # TTS state
        self.tts_speaking = False
        self.warnings_spoken = 0

        # Silent loop state
        self._silent_buffer = None
        self.silent_loop_running = False

        self.configure_session()

    @property
    def is_speaking(self) -> bool:
        return self.tts_speaking

    def _setup_tts(self):
        """Configure TTS based on the operating system."""
        system = platform.system()

        if system == "Darwin" and shutil.which('say'):
            self.tts_backend = "say"
            self.tts_rate = self.config.tts_rate_say
            log.info("[AUDIO] Using 'say' for TTS on macOS.")

        elif pyttsx3:
            try:
                self.tts_engine = pyttsx3.init()
                self.tts_rate = self.config.tts_rate_pyttsx3
                self.tts_engine.setProperty('rate', self.tts_rate)
                self.tts_engine.setProperty('volume', 1.0)
                self.tts_backend = "pyttsx3"
                log.info("[AUDIO] Using pyttsx3 for TTS on %s (rate=%s).", system, self.tts_rate)
            except Exception as e:
                log.error("[AUDIO] Failed to initialize pyttsx3: %s", e)
                self.tts_backend = None
        else:
            log.warning("[AUDIO] No supported TTS backend found for %s.", system)
            self.tts_backend = None

    # ------------------------------------------------------------------
    # session
    # ------------------------------------------------------------------

    def configure_session(self) -> None:
        """Activate the session in a mixable state."""
        with self._state_lock:
            self.category_options = MIX_WITH_OTHERS
            self.is_active = True
        log.info("[AUDIO] Audio session configured successfully")

    def _deactivate(self) -> None:
        with self._state_lock:
            self.is_active = False
        self.volume_control.reset()

    def _apply_duck(self) -> None:
        current = self.volume_control.get_volume()
        self.volume_control.set_volume(current * self.config.duck_level)
        with self._state_lock:
            self._saved_volume = current
            self.category_options = DUCK_OTHERS
            self.is_active = True
            self.is_ducked = True

    def _apply_restore(self) -> None:
        if self._saved_volume is not None:
            self.volume_control.set_volume(self._saved_volume)
        with self._state_lock:
            self._saved_volume = None
            self.category_options = MIX_WITH_OTHERS
            self.is_active = True
            self.is_ducked = False

    def duck(self) -> bool:
        """Lower other audio; retries once after deactivating the session."""
        if self.is_ducked:
            return True

        log.info("[AUDIO] Ducking audio...")
        try:
            self._apply_duck()
            return True
        except AudioSessionError as e:
            log.warning("[AUDIO] Failed to start ducking (direct): %s", e)

        # Fallback: deactivate and retry
        self._deactivate()
        try:
            self._apply_duck()
            log.info("[AUDIO] Ducking started via fallback")
            return True
        except AudioSessionError as e:
            log.error("[AUDIO] Failed to start ducking (fallback): %s", e)
            return False

    def restore(self) -> bool:
        """Bring other audio back to its level before ducking."""
        if not self.is_ducked:
            with self._state_lock:
                self.category_options = MIX_WITH_OTHERS
                self.is_active = True
            return True

        log.info("[AUDIO] Restoring audio...")
        try:
            self._apply_restore()
            return True
        except AudioSessionError as e:
            log.warning("[AUDIO] Failed to stop ducking (direct): %s", e)

        self._deactivate()
        try:
            self._apply_restore()
            log.info("[AUDIO] Audio restored via fallback")
            return True
        except AudioSessionError as e:
            log.error("[AUDIO] Failed to stop ducking (fallback): %s", e)
            return False

    def start_background_task(self) -> bool:
        """Start the session in a mixable state."""
        return self.restore()

    # ------------------------------------------------------------------
    # speech
    # ------------------------------------------------------------------

    def speak_warning(self, volume: float = 1.0) -> bool:
        """Speak the posture warning asynchronously at the given volume."""
        if not self.tts_backend:
            log.warning("[AUDIO] Cannot speak warning, no TTS backend")
            return False

        message = self.config.warning_phrase
        level = max(0.0, min(1.0, float(volume)))

        def _speak():
            try:
                self.tts_speaking = True
                log.debug("[AUDIO] Speaking '%s' at volume %.2f", message, level)

                if self.tts_backend == "say":
                    run_cmd = ["say", "-r", str(self.tts_rate), f"[[volm {level:.2f}]] {message}"]
                    subprocess.Popen(run_cmd)
                    # Give TTS process time to start
                    time.sleep(0.1)

                elif self.tts_backend == "pyttsx3" and self.tts_engine:
                    self.tts_engine.setProperty('volume', level)
                    self.tts_engine.say(message)
                    self.tts_engine.runAndWait()  # Blocking, runs in this thread

            except Exception as e:
                log.warning("[AUDIO] TTS error: %s", e)
            finally:
                self.tts_speaking = False

        self.warnings_spoken += 1
        threading.Thread(target=_speak, daemon=True).start()
        return True

    # ------------------------------------------------------------------
    # silent keepalive loop
    # ------------------------------------------------------------------

    def start_silent_loop(self) -> bool:
        """Loop a silent buffer so the audio route stays alive in the background."""
        if self.silent_loop_running:
            log.debug("[AUDIO] Silent loop already running")
            return True
        if np is None or sd is None:
            log.warning("[AUDIO] Cannot start silent loop. Numpy or Sounddevice not installed.")
            return False

        sample_rate = int(self.config.silent_loop_sample_rate)
        frames = max(1, int(sample_rate * self.config.silent_loop_seconds))
        self._silent_buffer = np.zeros((frames, 1), dtype=np.float32)

        try:
            sd.play(self._silent_buffer, samplerate=sample_rate, loop=True, blocking=False)
        except Exception as e:
            log.warning("[AUDIO] Failed to start silent loop: %s", e)
            self._silent_buffer = None
            return False

        self.silent_loop_running = True
        log.info("[AUDIO] Silent loop started successfully")
        return True

    def stop_silent_loop(self) -> None:
        if not self.silent_loop_running:
            return
        try:
            sd.stop()
        except Exception as e:
            log.warning("[AUDIO] Failed to stop silent loop: %s", e)
        self.silent_loop_running = False
        self._silent_buffer = None
        log.info("[AUDIO] Silent loop stopped")

    def close(self):
        if self.is_ducked:
            self.restore()
        self.stop_silent_loop()
        if self.tts_backend == "pyttsx3" and self.tts_engine:
            try:
                self.tts_engine.stop()
            except Exception as e:
                log.debug("[AUDIO] pyttsx3 stop failed: %s", e)
        log.info("[AUDIO] AudioSession closed.")
