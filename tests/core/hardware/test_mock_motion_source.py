"""Tests for MockMotionSource generation modes and threading."""

from __future__ import annotations

import json
import threading

import pytest

from core.hardware.mock_motion_source import MockMotionSource, load_attitude_recording
from core.imu.orientation_monitor import OrientationMonitor
from utils.config_sections import MockMotionConfig


class RecordingDelegate:
    def __init__(self) -> None:
        self.events = []

    def on_headphone_connected(self) -> None:
        self.events.append("connected")

    def on_headphone_disconnected(self) -> None:
        self.events.append("disconnected")


def test_synthetic_mode_is_reproducible_with_seed() -> None:
    config = MockMotionConfig(mode="synthetic", random_seed=7, sample_rate_hz=10.0)
    first = MockMotionSource(config)
    second = MockMotionSource(config)

    a = [first.next_attitude() for _ in range(20)]
    b = [second.next_attitude() for _ in range(20)]

    assert a == b
    assert max(abs(p) for p, _, _ in a) <= config.pitch_amplitude + 6 * config.noise_std


def test_synthetic_without_noise_follows_sine() -> None:
    config = MockMotionConfig(mode="synthetic", noise_std=0.0, pitch_amplitude=1.0, pitch_period=4.0, sample_rate_hz=1.0)
    source = MockMotionSource(config)

    pitches = [source.next_attitude()[0] for _ in range(4)]

    assert pitches == pytest.approx([0.0, 1.0, 0.0, -1.0], abs=1e-9)


def test_static_mode() -> None:
    source = MockMotionSource(MockMotionConfig(mode="static", static_attitude=(0.7, 0.1, -0.2)))
    assert source.next_attitude() == (0.7, 0.1, -0.2)
    assert source.next_attitude() == (0.7, 0.1, -0.2)


def test_replay_jsonl_loops(tmp_path) -> None:
    path = tmp_path / "session.jsonl"
    path.write_text("\n".join(json.dumps({"pitch": p, "roll": 0.0, "yaw": 0.0}) for p in (0.1, 0.9)) + "\n")

    source = MockMotionSource(MockMotionConfig(mode="replay", replay_path=str(path)))

    assert [source.next_attitude()[0] for _ in range(3)] == [0.1, 0.9, 0.1]


def test_replay_without_loop_stops(tmp_path) -> None:
    path = tmp_path / "session.csv"
    path.write_text("pitch,roll,yaw\n0.2,0.0,0.0\nbad,row,here\n")

    source = MockMotionSource(MockMotionConfig(mode="replay", replay_path=str(path), replay_loop=False))

    assert source.next_attitude() == (0.2, 0.0, 0.0)
    with pytest.raises(StopIteration):
        source.next_attitude()


def test_recording_errors(tmp_path) -> None:
    with pytest.raises(ValueError):
        load_attitude_recording(str(tmp_path / "missing.jsonl"))

    empty = tmp_path / "empty.jsonl"
    empty.write_text("")
    with pytest.raises(ValueError):
        load_attitude_recording(str(empty))

    with pytest.raises(ValueError):
        MockMotionSource(MockMotionConfig(mode="replay", replay_path=None))


def test_unknown_mode_rejected() -> None:
    with pytest.raises(ValueError):
        MockMotionSource(MockMotionConfig(mode="video"))


def test_updates_thread_delivers_samples_and_announces_connection() -> None:
    source = MockMotionSource(MockMotionConfig(mode="static", sample_rate_hz=200.0, static_attitude=(0.3, 0.0, 0.0)))
    delegate = RecordingDelegate()
    received = []
    got_samples = threading.Event()

    def handler(motion, error):
        received.append(motion)
        if len(received) >= 3:
            got_samples.set()

    source.set_delegate(delegate)
    source.start_device_motion_updates(handler)
    assert got_samples.wait(2.0)
    source.stop_device_motion_updates()

    count = len(received)
    assert delegate.events == ["connected"]
    assert received[0].attitude.pitch == pytest.approx(0.3)
    assert not source.running

    # No handler call after stop returns
    threading.Event().wait(0.05)
    assert len(received) == count


def test_simulated_disconnect_reaches_monitor() -> None:
    source = MockMotionSource(MockMotionConfig(mode="static", sample_rate_hz=50.0))
    monitor = OrientationMonitor(source)
    changes = []
    monitor.add_connection_listener(changes.append)
    monitor.start()
    try:
        assert monitor.is_connected
        source.simulate_disconnect()
        assert not monitor.is_connected
    finally:
        monitor.stop()

    assert [state.value for state in changes] == ["connected", "disconnected"]


def test_device_availability_flag() -> None:
    source = MockMotionSource(MockMotionConfig(device_available=False))
    assert source.is_device_motion_available() is False
