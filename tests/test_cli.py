import functools
import logging

import pytest

import diffusionsim.__main__ as cli
from diffusionsim.__main__ import main, parse_args
from diffusionsim.model.state import ModelSettings


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    logger = logging.getLogger("diffusionsim")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


def test_parse_args_defaults():
    args = parse_args([])
    assert args.node_count == 100
    assert args.sigma == 0.5
    assert args.min_tick_ms == 10.0
    assert not args.parallel


def test_short_run_logs_divergences(caplog):
    with caplog.at_level(logging.INFO, logger="diffusionsim"):
        code = main(["--seconds", "0.2", "--node-count", "11", "--min-tick-ms", "1"])
    assert code == 0
    assert "ticks/s" in caplog.text


def test_invalid_settings_exit_with_error():
    assert main(["--seconds", "0", "--sigma", "3"]) == 2


def test_preset_failing_on_the_grid_exits_with_error(monkeypatch):
    monkeypatch.setattr(cli, "ModelSettings", functools.partial(ModelSettings, left_boundary="1/t"))
    assert main(["--seconds", "0", "--node-count", "11"]) == 2
