"""Tests for the headless driver loop."""

from omegaconf import OmegaConf
from chix8 import Engine
from chix8.logging import ConsoleLogger
from conftest import program_bytes
from main import run_headless


def make_config(**overrides):
    config = dict(frames=3, instructions_per_frame=10, fps=60, scale=1,
                  color_scheme="chix8", video=None)
    config.update(overrides)
    return OmegaConf.create(config)


def test_fault_reported_once(capsys):
    logger = ConsoleLogger(log_level="INFO", show_timestamps=False)
    engine = Engine(logger=logger)
    engine.load(program_bytes(0x00EE))

    run_headless(engine, make_config(), logger)

    out = capsys.readouterr().out
    assert out.count("Stack underflow") == 1
    assert "Ran 0 frames, pc=0x200" in out


def test_runs_requested_frames(capsys):
    logger = ConsoleLogger(log_level="INFO", show_timestamps=False)
    engine = Engine(logger=logger)
    engine.load(program_bytes(0x7001, 0x1200))

    run_headless(engine, make_config(frames=2, instructions_per_frame=4), logger)

    assert engine.state.V[0] == 4
    assert "Ran 2 frames" in capsys.readouterr().out
