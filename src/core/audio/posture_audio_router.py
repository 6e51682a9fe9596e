"""
Fire-and-forget delivery of posture commands to the audio session.

The posture sequencer must never block on audio I/O. This router accepts
commands on a bounded FIFO queue and a single worker thread applies them to
the AudioSession in emission order.

Features:
- FIFO ordering (DUCK, SPEAK_WARNING, RESTORE are applied as emitted)
- Non-blocking enqueue; DUCK / SPEAK_WARNING dropped when the queue is full
- RESTORE waits briefly for space so audio is never left ducked
- Synchronous dispatch when the worker is not running
- Graceful stop drains queued commands before joining the worker
- Thread-safe metrics with telemetry integration

Architecture:
    PostureSequencer → PostureCommand → Queue → Worker Thread → AudioSession
                                                      ↓
                                              duck / restore / speak_warning

Usage:
    router = PostureAudioRouter(audio_session, telemetry)
    router.start()
    sequencer.add_command_listener(router.enqueue)
    ...
    router.stop()
"""

from __future__ import annotations

import json
import logging
import queue
import threading
import time
from typing import Any, Dict, Optional

from core.posture.posture_commands import CommandKind, PostureCommand
from utils.config_sections import AudioRouterConfig, load_audio_router_config

log = logging.getLogger("posture.routing")


class PostureAudioRouter:
    """Single-worker queue between the posture sequencer and the audio session."""

    def __init__(
        self,
        audio_session,
        telemetry=None,
        config: Optional[AudioRouterConfig] = None,
    ) -> None:
        self.audio = audio_session
        self.telemetry = telemetry
        self.config = config or load_audio_router_config()

        self.command_queue: "queue.Queue[Optional[PostureCommand]]" = queue.Queue(
            maxsize=self.config.queue_size
        )
        self._running = False
        self._thread: Optional[threading.Thread] = None
        self._dispatch_lock = threading.Lock()

        self._metrics_lock = threading.Lock()
        self.commands_enqueued = 0
        self.commands_dispatched = 0
        self.commands_failed = 0
        self.commands_dropped = 0
        self.metrics: Dict[str, Any] = {}
        self._reset_metrics()

    def _make_kind_stats(self) -> Dict[str, Any]:
        return {
            "enqueued": 0,
            "dispatched": 0,
            "failed": 0,
            "dropped": 0,
            "last_dispatch_ts": 0.0,
        }

    def _reset_metrics(self) -> None:
        self.commands_enqueued = 0
        self.commands_dispatched = 0
        self.commands_failed = 0
        self.commands_dropped = 0
        with self._metrics_lock:
            self.metrics = {
                "commands_enqueued": 0,
                "commands_dispatched": 0,
                "commands_failed": 0,
                "commands_dropped": 0,
                "queue_maxsize": self.command_queue.maxsize,
                "queue_size": 0,
                "session_start_ts": time.time(),
                "per_kind": {kind.value: self._make_kind_stats() for kind in CommandKind},
            }

    def _update_metrics(self, command: PostureCommand, action: str, reason: Optional[str] = None) -> None:
        now = time.time()
        with self._metrics_lock:
            stats = self.metrics["per_kind"].setdefault(command.kind.value, self._make_kind_stats())
            if action == "enqueued":
                self.commands_enqueued += 1
                self.metrics["commands_enqueued"] = self.commands_enqueued
            elif action == "dispatched":
                self.commands_dispatched += 1
                self.metrics["commands_dispatched"] = self.commands_dispatched
                stats["last_dispatch_ts"] = now
            elif action == "failed":
                self.commands_failed += 1
                self.metrics["commands_failed"] = self.commands_failed
            elif action == "dropped":
                self.commands_dropped += 1
                self.metrics["commands_dropped"] = self.commands_dropped
            stats[action] += 1
            self.metrics["queue_size"] = max(self.command_queue.qsize(), 0)

        if self.telemetry:
            self.telemetry.log_audio_command(
                action=action,
                kind=command.kind.value,
                pitch=command.pitch,
                volume=command.volume,
                reason=reason or command.reason,
            )

    def get_metrics(self) -> Dict[str, Any]:
        with self._metrics_lock:
            return json.loads(json.dumps(self.metrics))

    @property
    def is_running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._reset_metrics()
        self._thread = threading.Thread(target=self._run, name="PostureAudioRouter", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if not self._running:
            return
        # Sentinel goes after any backlog so queued commands still reach the session
        sentinel_queued = self._put_sentinel()
        thread = self._thread
        while thread is not None and thread.is_alive():
            thread.join(timeout=self.config.stop_timeout)
            if thread.is_alive():
                # Drain only once the worker has exited
                log.warning("Audio worker still dispatching, waiting before drain")
                if not sentinel_queued:
                    sentinel_queued = self._put_sentinel()
        self._running = False
        self._thread = None
        self._drain_remaining()

    def _put_sentinel(self) -> bool:
        try:
            self.command_queue.put(None, timeout=self.config.stop_timeout)
            return True
        except queue.Full:
            log.warning("Command queue full on stop, retrying sentinel")
            return False

    def _drain_remaining(self) -> None:
        """Dispatch anything left behind after the worker exited."""
        while True:
            try:
                command = self.command_queue.get_nowait()
            except queue.Empty:
                break
            if command is not None:
                self.dispatch(command)

    # ------------------------------------------------------------------
    # queue interface
    # ------------------------------------------------------------------

    def enqueue(self, command: PostureCommand) -> None:
        if not self._running:
            self._update_metrics(command, "enqueued")
            self.dispatch(command)
            return

        try:
            self.command_queue.put_nowait(command)
        except queue.Full:
            if command.kind != CommandKind.RESTORE:
                self._update_metrics(command, "dropped", reason="queue_full")
                log.warning("Dropped %s command, queue full", command.kind.value)
                return
            try:
                self.command_queue.put(command, timeout=self.config.restore_put_timeout)
            except queue.Full:
                log.warning("Queue still full, restoring synchronously")
                self._update_metrics(command, "enqueued")
                self.dispatch(command)
                return
        self._update_metrics(command, "enqueued")

    # ------------------------------------------------------------------
    # dispatch
    # ------------------------------------------------------------------

    def dispatch(self, command: PostureCommand) -> bool:
        """Apply a single command to the audio session."""
        with self._dispatch_lock:
            if command.kind == CommandKind.DUCK:
                ok = self.audio.duck()
            elif command.kind == CommandKind.RESTORE:
                ok = self.audio.restore()
            elif command.kind == CommandKind.SPEAK_WARNING:
                volume = command.volume if command.volume is not None else 1.0
                ok = self.audio.speak_warning(volume)
            else:
                log.warning("Unknown command kind: %s", command.kind)
                ok = False

        if ok:
            self._update_metrics(command, "dispatched")
            log.debug("✓ %s dispatched", command.kind.value)
        else:
            self._update_metrics(command, "failed", reason="session_rejected")
            log.warning("✗ %s rejected by audio session", command.kind.value)
        return bool(ok)

    # ------------------------------------------------------------------
    # worker
    # ------------------------------------------------------------------

    def _run(self) -> None:
        while True:
            try:
                command = self.command_queue.get(timeout=0.5)
            except queue.Empty:
                if not self._running:
                    break
                continue

            if command is None:
                break

            try:
                self.dispatch(command)
            except Exception as e:
                self._update_metrics(command, "failed", reason=str(e))
                log.error("Dispatch of %s raised: %s", command.kind.value, e)


__all__ = ["PostureAudioRouter"]
