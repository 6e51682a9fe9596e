"""Tests for the JSONL session TelemetryLogger."""

from __future__ import annotations

import json

import pytest

from core.telemetry.loggers.telemetry_logger import TelemetryLogger


def read_jsonl(path):
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


@pytest.fixture()
def telemetry(tmp_path) -> TelemetryLogger:
    return TelemetryLogger(output_dir=tmp_path)


def test_session_directory_layout(telemetry: TelemetryLogger, tmp_path) -> None:
    session_dir = telemetry.get_session_dir()

    assert session_dir.parent == tmp_path
    assert session_dir.name.startswith("session_")
    events = read_jsonl(session_dir / "system.jsonl")
    assert events[0]["event_type"] == "session_start"


def test_samples_and_commands_are_streamed(telemetry: TelemetryLogger) -> None:
    telemetry.log_sample(pitch=0.7, roll=0.0, yaw=0.1, is_bad=True)
    telemetry.log_audio_command(action="dispatched", kind="duck", pitch=0.7)
    telemetry.log_connectivity("connected")

    samples = read_jsonl(telemetry.samples_log)
    commands = read_jsonl(telemetry.audio_log)
    connectivity = read_jsonl(telemetry.connectivity_log)

    assert samples[0]["pitch"] == pytest.approx(0.7) and samples[0]["is_bad"] is True
    assert commands[0]["kind"] == "duck" and commands[0]["volume"] is None
    assert connectivity[0]["state"] == "connected"


def test_finalize_session_summary(telemetry: TelemetryLogger) -> None:
    for pitch in (0.2, -0.8, 0.9, 0.1):
        telemetry.log_sample(pitch=pitch, roll=0.0, yaw=0.0, is_bad=abs(pitch) > 0.6)
    for kind in ("duck", "speak_warning", "restore"):
        telemetry.log_audio_command(action="enqueued", kind=kind)
        telemetry.log_audio_command(action="dispatched", kind=kind)
    telemetry.log_audio_command(action="dropped", kind="duck")
    telemetry.log_connectivity("connected")

    summary = telemetry.finalize_session()

    assert summary["total_samples"] == 4
    assert summary["bad_posture_samples"] == 2
    assert summary["bad_posture_ratio"] == pytest.approx(0.5)
    assert summary["avg_abs_pitch"] == pytest.approx(0.5)
    assert summary["max_abs_pitch"] == pytest.approx(0.9)
    assert summary["audio_by_action"] == {"enqueued": 3, "dispatched": 3, "dropped": 1}
    assert summary["dispatched_by_kind"] == {"duck": 1, "speak_warning": 1, "restore": 1}
    assert summary["connectivity_changes"] == 1

    saved = json.loads((telemetry.output_dir / "summary.json").read_text())
    assert saved["total_samples"] == 4


def test_empty_session_summary(telemetry: TelemetryLogger) -> None:
    summary = telemetry.finalize_session()

    assert summary["total_samples"] == 0
    assert summary["bad_posture_ratio"] == 0.0


def test_events_and_errors(telemetry: TelemetryLogger) -> None:
    telemetry.log_event("config_changed", threshold=0.8, volume=0.5)
    telemetry.log_error("sensor_unavailable", "no headphones")

    events = read_jsonl(telemetry.system_log)
    assert events[1]["event_type"] == "config_changed" and events[1]["threshold"] == 0.8
    assert events[2]["error_type"] == "sensor_unavailable"
    assert telemetry.get_audio_summary()["total_events"] == 0


def test_long_session_keeps_running_totals(telemetry: TelemetryLogger) -> None:
    for i in range(500):
        telemetry.log_sample(pitch=0.8 if i % 5 == 0 else 0.1, roll=0.0, yaw=0.0, is_bad=i % 5 == 0)
    telemetry.log_audio_command(action="dispatched", kind="duck")

    assert telemetry.total_samples == 500
    assert telemetry.bad_posture_samples == 100
    assert telemetry.get_audio_summary() == {
        "total_events": 1,
        "by_action": {"dispatched": 1},
        "dispatched_by_kind": {"duck": 1},
    }

    summary = telemetry.finalize_session()
    assert summary["bad_posture_ratio"] == pytest.approx(0.2)
    assert summary["avg_abs_pitch"] == pytest.approx(0.24)
    assert len(telemetry.samples_log.read_text().splitlines()) == 500
