"""
Posture evaluation and audio-session sequencing.

This module turns a stream of orientation samples into a deduplicated stream
of audio commands. Every sample is compared against the live bad posture
threshold; commands are emitted only when the decision crosses an edge.

State machine (initial NORMAL):
    NORMAL  --(|pitch| >  threshold)--> DUCKED  [DUCK, SPEAK_WARNING]
    DUCKED  --(|pitch| <= threshold)--> NORMAL  [RESTORE]
    NORMAL  --(|pitch| <= threshold)--> NORMAL  []
    DUCKED  --(|pitch| >  threshold)--> DUCKED  []
    stop() while DUCKED             --> NORMAL  [RESTORE]

The comparison is strict: a pitch magnitude exactly equal to the threshold
is good posture. There is no hysteresis and no smoothing.

The sequencer never touches audio APIs. Commands go to registered listeners
(normally the PostureAudioRouter), which keeps policy apart from mechanism.

Usage:
    sequencer = PostureSequencer(PostureConfig(bad_posture_threshold=0.6))
    sequencer.add_command_listener(router.enqueue)
    sequencer.on_sample(sample)
    sequencer.update_config(PostureConfig(bad_posture_threshold=1.0))
    sequencer.stop()
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from core.imu.orientation_state import OrientationSample
from core.posture.posture_commands import PostureCommand, SequencerState
from utils.config_sections import PostureConfig, load_posture_config

log = logging.getLogger("posture.sequencer")

CommandListener = Callable[[PostureCommand], None]


class PostureSequencer:
    """Edge-triggered bad posture detector emitting duck/restore/speak commands."""

    def __init__(
        self,
        config: Optional[PostureConfig] = None,
        command_listener: Optional[CommandListener] = None,
    ) -> None:
        self.config = config or load_posture_config()
        self._is_ducked = False
        self._lock = threading.RLock()
        self._listeners: List[CommandListener] = []
        if command_listener is not None:
            self._listeners.append(command_listener)

        # Display values
        self.last_pitch = 0.0
        self.last_roll = 0.0

        # Counters
        self.samples_evaluated = 0
        self.samples_dropped = 0
        self.duck_count = 0
        self.restore_count = 0

    def add_command_listener(self, listener: CommandListener) -> None:
        self._listeners.append(listener)

    @property
    def is_ducked(self) -> bool:
        return self._is_ducked

    @property
    def state(self) -> SequencerState:
        return SequencerState.DUCKED if self._is_ducked else SequencerState.NORMAL

    def is_bad_posture(self, pitch: float, config: Optional[PostureConfig] = None) -> bool:
        threshold = (config or self.config).bad_posture_threshold
        return abs(pitch) > threshold

    def update_config(self, config: PostureConfig) -> None:
        """Replace the live config; applies from the next sample on."""
        with self._lock:
            self.config = config
        log.info(
            "Config updated: threshold=%.2f volume=%.2f",
            config.bad_posture_threshold,
            config.warning_volume,
        )

    def on_sample(
        self,
        sample: Optional[OrientationSample],
        config: Optional[PostureConfig] = None,
    ) -> List[PostureCommand]:
        """
        Evaluate one sample and emit commands on posture edges.

        Args:
            sample: Orientation sample, or None (dropped)
            config: Config to evaluate with; becomes the live config

        Returns:
            Commands emitted for this sample (possibly empty)
        """
        if sample is None:
            self.samples_dropped += 1
            return []

        with self._lock:
            if config is not None:
                self.config = config
            active = self.config

            self.last_pitch = sample.pitch
            self.last_roll = sample.roll
            self.samples_evaluated += 1

            bad = self.is_bad_posture(sample.pitch, active)
            commands: List[PostureCommand] = []

            if bad and not self._is_ducked:
                reason = f"|pitch| {abs(sample.pitch):.3f} > {active.bad_posture_threshold:.3f}"
                commands.append(PostureCommand.duck(sample.pitch, reason))
                commands.append(PostureCommand.speak_warning(active.warning_volume, sample.pitch, reason))
                self._is_ducked = True
                self.duck_count += 1
                log.info("Bad posture: %s", reason)
            elif not bad and self._is_ducked:
                reason = f"|pitch| {abs(sample.pitch):.3f} <= {active.bad_posture_threshold:.3f}"
                commands.append(PostureCommand.restore(sample.pitch, reason))
                self._is_ducked = False
                self.restore_count += 1
                log.info("Posture recovered: %s", reason)

            self._emit(commands)
            return commands

    def stop(self) -> List[PostureCommand]:
        """Restore audio if currently ducked and reset to NORMAL."""
        with self._lock:
            if not self._is_ducked:
                return []
            self._is_ducked = False
            self.restore_count += 1
            commands = [PostureCommand.restore(reason="monitoring stopped")]
            log.info("Monitoring stopped while ducked, restoring audio")
            self._emit(commands)
            return commands

    def _emit(self, commands: List[PostureCommand]) -> None:
        for command in commands:
            for listener in list(self._listeners):
                listener(command)

    def get_state_summary(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "is_ducked": self._is_ducked,
            "threshold": self.config.bad_posture_threshold,
            "warning_volume": self.config.warning_volume,
            "last_pitch": self.last_pitch,
            "last_roll": self.last_roll,
            "samples_evaluated": self.samples_evaluated,
            "samples_dropped": self.samples_dropped,
            "duck_count": self.duck_count,
            "restore_count": self.restore_count,
        }


__all__ = ["PostureSequencer"]
