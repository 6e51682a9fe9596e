"""Tests for SystemVolumeControl backends."""

from __future__ import annotations

import subprocess
from types import SimpleNamespace

import pytest

import core.audio.volume_control as volume_module
from core.audio.volume_control import AudioSessionError, SystemVolumeControl


class FakeRun:
    def __init__(self, stdout: str = "") -> None:
        self.stdout = stdout
        self.calls: list[list[str]] = []
        self.error = None

    def __call__(self, cmd, **kwargs):
        self.calls.append(cmd)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(stdout=self.stdout)


def make_control(monkeypatch: pytest.MonkeyPatch, system: str, stdout: str = ""):
    fake_run = FakeRun(stdout)
    monkeypatch.setattr(volume_module.platform, "system", lambda: system)
    monkeypatch.setattr(volume_module.shutil, "which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(volume_module.subprocess, "run", fake_run)
    return SystemVolumeControl(timeout=1.0), fake_run


def test_osascript_get_and_set(monkeypatch: pytest.MonkeyPatch) -> None:
    control, fake_run = make_control(monkeypatch, "Darwin", stdout="64\n")

    assert control.backend == "osascript"
    assert control.get_volume() == pytest.approx(0.64)

    control.set_volume(0.3)
    assert fake_run.calls[-1] == ["osascript", "-e", "set volume output volume 30"]


def test_pactl_get_and_set(monkeypatch: pytest.MonkeyPatch) -> None:
    stdout = "Volume: front-left: 45875 /  70% / -9.29 dB,   front-right: 45875 /  70% / -9.29 dB\n"
    control, fake_run = make_control(monkeypatch, "Linux", stdout=stdout)

    assert control.backend == "pactl"
    assert control.get_volume() == pytest.approx(0.7)

    control.set_volume(1.7)
    assert fake_run.calls[-1] == ["pactl", "set-sink-volume", "@DEFAULT_SINK@", "100%"]


def test_command_failure_raises_audio_session_error(monkeypatch: pytest.MonkeyPatch) -> None:
    control, fake_run = make_control(monkeypatch, "Linux")
    fake_run.error = subprocess.CalledProcessError(1, ["pactl"], stderr="Connection refused")

    with pytest.raises(AudioSessionError):
        control.set_volume(0.5)


def test_unparseable_output_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    control, _ = make_control(monkeypatch, "Darwin", stdout="missing value")

    with pytest.raises(AudioSessionError):
        control.get_volume()


def test_no_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(volume_module.platform, "system", lambda: "Windows")

    control = SystemVolumeControl()

    assert not control.available
    with pytest.raises(AudioSessionError):
        control.get_volume()
    with pytest.raises(AudioSessionError):
        control.set_volume(0.5)
