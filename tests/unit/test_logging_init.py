from __future__ import annotations

import logging

from sheetsync.logging.init import (
    APP_LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    setup_logging,
)


def _record(level: int, msg: str) -> logging.LogRecord:
    return logging.LogRecord("sheetsync", level, __file__, 1, msg, None, None)


def test_labels():
    fmt = LabeledFormatter()
    assert fmt.format(_record(logging.INFO, "hello")) == "INFO hello"
    assert fmt.format(_record(logging.WARNING, "careful")) == "WARN careful"
    assert fmt.format(_record(logging.ERROR, "bad")) == "ERROR bad"
    assert fmt.format(_record(SUMMARY_LEVEL, "op=push")) == "SUMMARY op=push"


def test_setup_is_idempotent():
    a = setup_logging()
    b = setup_logging()
    assert a is b
    assert a.name == APP_LOGGER_NAME
    assert len(a.handlers) == 1
    assert a.propagate is False


def test_module_loggers_reach_app_handler(capsys):
    setup_logging()
    logging.getLogger("sheetsync.services.push").warning("sheet=Menu something")
    assert "WARN sheet=Menu something" in capsys.readouterr().out


def test_debug_mode(capsys):
    logger = setup_logging(debug=True)
    logger.debug("details")
    assert "DEBUG details" in capsys.readouterr().out


def test_debug_hidden_by_default(capsys):
    get_logger().debug("details")
    assert capsys.readouterr().out == ""


def test_log_summary(capsys):
    log_summary("op=pull processed=0")
    assert capsys.readouterr().out.strip() == "SUMMARY op=pull processed=0"
