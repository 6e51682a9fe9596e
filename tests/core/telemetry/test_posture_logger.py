"""Tests for the per-channel posture session logger."""

from __future__ import annotations

import logging

from core.telemetry.loggers.posture_logger import close_posture_logger, get_posture_logger


def test_channel_loggers_write_session_files(tmp_path) -> None:
    posture_logger = get_posture_logger(session_dir=tmp_path)
    try:
        assert get_posture_logger() is posture_logger

        logging.getLogger("posture.sequencer").info("Bad posture: |pitch| 0.800 > 0.600")
        logging.getLogger("posture.routing").debug("duck dispatched")
        for handler in posture_logger.sequencer.handlers + posture_logger.routing.handlers:
            handler.flush()

        assert "Bad posture" in (tmp_path / "posture_sequencer.log").read_text()
        assert "duck dispatched" in (tmp_path / "audio_routing.log").read_text()
        assert (tmp_path / "motion.log").exists()
        assert (tmp_path / "audio_session.log").exists()
    finally:
        close_posture_logger()

    assert logging.getLogger("posture.sequencer").handlers == []
    assert logging.getLogger("posture.sequencer").propagate is True
