"""
Audio commands emitted by the posture sequencer.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class CommandKind(Enum):
    DUCK = "duck"
    RESTORE = "restore"
    SPEAK_WARNING = "speak_warning"


class SequencerState(Enum):
    NORMAL = "normal"
    DUCKED = "ducked"


@dataclass(frozen=True)
class PostureCommand:
    kind: CommandKind
    volume: Optional[float] = None  # SPEAK_WARNING only
    pitch: Optional[float] = None
    reason: str = ""
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def duck(cls, pitch: float, reason: str = "") -> "PostureCommand":
        return cls(kind=CommandKind.DUCK, pitch=pitch, reason=reason)

    @classmethod
    def restore(cls, pitch: Optional[float] = None, reason: str = "") -> "PostureCommand":
        return cls(kind=CommandKind.RESTORE, pitch=pitch, reason=reason)

    @classmethod
    def speak_warning(cls, volume: float, pitch: float, reason: str = "") -> "PostureCommand":
        return cls(kind=CommandKind.SPEAK_WARNING, volume=volume, pitch=pitch, reason=reason)


__all__ = ["CommandKind", "SequencerState", "PostureCommand"]
