import logging

import pytest

from sudscript.messages import Message, MessageLogger, Severity


def test_counts_only_errors():
    logger = MessageLogger(write_to_log=False)
    logger.warning("w1")
    logger.error("e1")
    logger.info("i1")
    logger.error("e2")
    assert logger.num_errors() == 2
    assert logger.has_errors() is True
    assert len(logger) == 4


def test_warnings_alone_are_not_errors():
    logger = MessageLogger(write_to_log=False)
    logger.warning("just a warning")
    assert logger.has_errors() is False
    assert logger.num_errors() == 0


def test_add_message_records_in_order():
    logger = MessageLogger(write_to_log=False)
    first = logger.add_message(Severity.WARNING, "first")
    second = logger.add_message(Severity.ERROR, "second")
    assert list(logger) == [first, second]
    assert first == Message(Severity.WARNING, "first")


def test_clear_removes_messages():
    logger = MessageLogger(write_to_log=False)
    logger.error("boom")
    logger.clear()
    assert logger.has_errors() is False
    assert list(logger) == []


def test_invalid_severity_rejected():
    logger = MessageLogger(write_to_log=False)
    with pytest.raises(ValueError):
        logger.add_message("fatal", "x")


def test_context_manager_writes_to_log(caplog):
    with caplog.at_level(logging.INFO, logger="sudscript"):
        with MessageLogger() as logger:
            logger.error("bad thing")
    texts = [r.getMessage() for r in caplog.records]
    assert "bad thing" in texts
    assert any(r.levelno == logging.ERROR for r in caplog.records)


def test_silent_logger_writes_nothing(caplog):
    with caplog.at_level(logging.INFO, logger="sudscript"):
        with MessageLogger(write_to_log=False) as logger:
            logger.error("hidden")
    assert caplog.records == []
    assert logger.num_errors() == 1


def test_flush_reports_each_message_once(caplog):
    logger = MessageLogger()
    logger.error("once")
    with caplog.at_level(logging.INFO, logger="sudscript"):
        logger.flush()
        logger.flush()
    assert [r.getMessage() for r in caplog.records].count("once") == 1