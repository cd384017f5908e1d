"""Tests for the console logger."""

import pytest
from chix8.logging import ConsoleLogger, log_config


def test_level_filtering(capsys):
    logger = ConsoleLogger(name="t", log_level="WARNING", show_timestamps=False)

    logger.info("hidden")
    logger.warning("shown")

    out = capsys.readouterr().out
    assert "hidden" not in out
    assert out == "[ WARNING][t] shown\n"


def test_level_is_case_insensitive():
    logger = ConsoleLogger(log_level="debug")
    assert logger.is_enabled_for("DEBUG")
    assert logger.is_enabled_for("critical")


def test_unknown_level():
    with pytest.raises(ValueError):
        ConsoleLogger(log_level="VERBOSE")


def test_log_config(capsys):
    logger = ConsoleLogger(log_level="INFO", show_timestamps=False)

    log_config(logger, {"rom": "brix.ch8", "scale": 8})

    out = capsys.readouterr().out
    assert "  rom: brix.ch8" in out
    assert "  scale: 8" in out
