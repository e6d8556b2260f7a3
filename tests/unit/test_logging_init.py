from __future__ import annotations

import logging
from io import StringIO

from order_grid.logging.init import (
    APP_LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    setup_logging,
)


def test_setup_logging_creates_single_stdout_handler():
    logger = setup_logging()
    assert logger.name == APP_LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert not logger.propagate


def test_setup_logging_is_idempotent():
    first = setup_logging()
    second = setup_logging(debug=True)
    assert first is second
    assert len(second.handlers) == 1
    assert second.level == logging.DEBUG


def test_labeled_prefixes():
    captured = StringIO()
    logger = logging.getLogger("test_order_grid_labels")
    for h in logger.handlers[:]:
        logger.removeHandler(h)
    handler = logging.StreamHandler(captured)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    logger.info("a")
    logger.warning("b")
    logger.error("c")
    logger.log(SUMMARY_LEVEL, "d")
    logger.debug("e")

    assert captured.getvalue().splitlines() == ["INFO a", "WARN b", "ERROR c", "SUMMARY d", "DEBUG e"]
    logger.removeHandler(handler)


def test_child_module_loggers_reach_app_handler(capsys):
    setup_logging()
    logging.getLogger(f"{APP_LOGGER_NAME}.services.dispatcher").warning("LAST_ROW: Cannot delete the last row")
    assert "WARN LAST_ROW: Cannot delete the last row" in capsys.readouterr().out


def test_debug_hidden_by_default(capsys):
    get_logger().debug("hidden")
    log_summary("rows=1")
    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "SUMMARY rows=1" in out
