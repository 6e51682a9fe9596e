"""Tests for the Builder wiring of the posture system."""

from __future__ import annotations

import pytest

import core.audio.audio_session as audio_module
import core.audio.volume_control as volume_module
from core.audio.posture_audio_router import PostureAudioRouter
from core.builder import Builder, build_posture_system
from core.hardware.mock_motion_source import MockMotionSource
from core.posture.coordinator import PostureCoordinator


@pytest.fixture(autouse=True)
def no_system_audio(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(audio_module.platform, "system", lambda: "Linux")
    monkeypatch.setattr(audio_module.shutil, "which", lambda _: None)
    monkeypatch.setattr(volume_module.shutil, "which", lambda _: None)
    monkeypatch.setattr(audio_module, "pyttsx3", None)


def test_build_full_system_wires_components() -> None:
    coordinator = Builder().build_full_system(mode="static", threshold=0.9, volume=0.4, silent_loop_enabled=False)

    assert isinstance(coordinator, PostureCoordinator)
    assert isinstance(coordinator.monitor.source, MockMotionSource)
    assert coordinator.monitor.source.mode == "static"
    assert isinstance(coordinator.audio_router, PostureAudioRouter)
    assert coordinator.audio_router.audio is coordinator.audio_session
    assert coordinator.sequencer.config.bad_posture_threshold == pytest.approx(0.9)
    assert coordinator.sequencer.config.warning_volume == pytest.approx(0.4)
    assert coordinator.silent_loop_enabled is False


def test_build_posture_system_clamps_settings() -> None:
    coordinator = build_posture_system(mode="synthetic", threshold=9.0, volume=2.0)

    assert coordinator.config.bad_posture_threshold == pytest.approx(1.5)
    assert coordinator.config.warning_volume == pytest.approx(1.0)


def test_build_motion_source_overrides() -> None:
    source = Builder().build_motion_source(mode="static", sample_rate_hz=50.0)

    assert source.mode == "static"
    assert source.interval == pytest.approx(0.02)


def test_built_system_runs_end_to_end() -> None:
    coordinator = build_posture_system(mode="static", silent_loop_enabled=False)
    coordinator.startup()
    try:
        assert coordinator.monitor.is_active
        assert coordinator.monitor.is_connected
        assert coordinator.start_monitoring() is True
    finally:
        coordinator.shutdown()

    assert not coordinator.monitor.is_active
    assert not coordinator.audio_router.is_running
