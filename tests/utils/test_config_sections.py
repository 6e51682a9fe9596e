"""Tests for typed config sections and UI-boundary clamping."""

from __future__ import annotations

import dataclasses

import pytest

from utils.config import Config
from utils.config_sections import (
    PostureConfig,
    clamp_posture_config,
    load_audio_router_config,
    load_audio_session_config,
    load_mock_motion_config,
    load_posture_config,
)


def test_posture_defaults() -> None:
    config = load_posture_config()

    assert config == PostureConfig(bad_posture_threshold=0.6, warning_volume=1.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.bad_posture_threshold = 0.2  # type: ignore[misc]


@pytest.mark.parametrize(
    "threshold, volume, expected",
    [
        (0.6, 1.0, (0.6, 1.0)),
        (0.0, 0.5, (0.1, 0.5)),
        (2.0, 0.5, (1.5, 0.5)),
        (0.8, -0.2, (0.8, 0.0)),
        (0.8, 1.3, (0.8, 1.0)),
    ],
)
def test_clamp_posture_config(threshold, volume, expected) -> None:
    config = clamp_posture_config(threshold=threshold, volume=volume)
    assert (config.bad_posture_threshold, config.warning_volume) == pytest.approx(expected)


def test_clamp_keeps_base_values() -> None:
    base = PostureConfig(bad_posture_threshold=0.9, warning_volume=0.3)

    config = clamp_posture_config(volume=0.7, base=base)

    assert config.bad_posture_threshold == pytest.approx(0.9)
    assert config.warning_volume == pytest.approx(0.7)


def test_loaders_follow_config_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(Config, "DUCK_LEVEL", 0.5)
    monkeypatch.setattr(Config, "AUDIO_ROUTER_QUEUE_SIZE", 3)
    monkeypatch.setattr(Config, "MOTION_SOURCE", "static")

    assert load_audio_session_config().duck_level == pytest.approx(0.5)
    assert load_audio_router_config().queue_size == 3
    assert load_mock_motion_config().mode == "static"


def test_loader_defaults_when_config_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delattr(Config, "WARNING_PHRASE")

    assert load_audio_session_config().warning_phrase == "Posture"
