"""Tests for structured log formatting."""

import logging

from roi_canvas.core.logging import StructuredFormatter, get_logger, log_with_context


def _record(msg: str = "Canvas generated", **attrs) -> logging.LogRecord:
    record = logging.LogRecord(
        name="roi_canvas.core.canvas_builder",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
        func="generate_canvas",
    )
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


def test_key_value_format():
    line = StructuredFormatter().format(_record())
    assert "level=INFO" in line
    assert "function=generate_canvas" in line
    assert "message=Canvas generated" in line
    assert line.startswith("timestamp=")


def test_context_fields_appended():
    line = StructuredFormatter().format(
        _record(workspace_id="ws-1", extra_data={"selected": 2, "budget": 150000})
    )
    assert line.endswith("workspace_id=ws-1 selected=2 budget=150000")


def test_get_logger_configures_once():
    logger = get_logger("roi_canvas.tests.once")
    get_logger("roi_canvas.tests.once")
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, StructuredFormatter)
    # Test env is not dev
    assert logger.level == logging.INFO


def test_log_with_context_splits_workspace_id(caplog):
    logger = logging.getLogger("roi_canvas.tests.context")
    with caplog.at_level(logging.INFO, logger="roi_canvas.tests.context"):
        log_with_context(logger, logging.INFO, "Merged candidates", workspace_id="ws-9", accepted=1)

    record = caplog.records[-1]
    assert record.workspace_id == "ws-9"
    assert record.extra_data == {"accepted": 1}
