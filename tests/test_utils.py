import logging
from datetime import timedelta

import numpy as np
import pytest

from diffusionsim.logging_config import setup_logging
from diffusionsim.utils import grid_positions, to_seconds


def test_to_seconds():
    assert to_seconds(0.25) == 0.25
    assert to_seconds(timedelta(milliseconds=15)) == pytest.approx(0.015)
    with pytest.raises(ValueError):
        to_seconds(timedelta(seconds=-1))


def test_grid_positions():
    np.testing.assert_array_equal(grid_positions(3, 0.5), [0.0, 0.5, 1.0])


def test_setup_logging_writes_file_without_duplicate_handlers(tmp_path):
    log_file = tmp_path / "run.log"
    logger = logging.getLogger("diffusionsim")
    try:
        setup_logging(level=logging.DEBUG, log_file=str(log_file))
        setup_logging(level=logging.DEBUG, log_file=str(log_file))
        assert len(logger.handlers) == 2
        logging.getLogger("diffusionsim.test").debug("hello from test")
        for handler in logger.handlers:
            handler.flush()
        assert "hello from test" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)


def test_log_file_keeps_debug_records_below_console_level(tmp_path):
    log_file = tmp_path / "run.log"
    logger = logging.getLogger("diffusionsim")
    try:
        setup_logging(level=logging.WARNING, log_file=str(log_file))
        console, file_handler = logger.handlers
        assert console.level == logging.WARNING
        assert file_handler.level == logging.DEBUG

        logging.getLogger("diffusionsim.test").debug("tick detail")
        file_handler.flush()
        line = log_file.read_text(encoding="utf-8").splitlines()[-1]
        assert "tick detail" in line
        assert "[MainThread]" in line
    finally:
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
