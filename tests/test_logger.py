import json
import logging

import pytest

from kubealertbot.logger import JsonFormatter, LogLevel, setup_logger


def _record(level, msg, **extra):
    record = logging.LogRecord("kubealertbot.test", level, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_fields_and_extras():
    line = JsonFormatter().format(_record(logging.INFO, "hello", chat_id=42))
    entry = json.loads(line)
    assert entry["msg"] == "hello"
    assert entry["level"] == "INFO"
    assert entry["chat_id"] == 42
    assert "time" in entry


def test_json_formatter_warning_level_name():
    entry = json.loads(JsonFormatter().format(_record(logging.WARNING, "careful")))
    assert entry["level"] == "WARN"


def test_levels_per_environment():
    assert setup_logger(LogLevel.ENV_LOCAL).level == logging.DEBUG
    assert setup_logger(LogLevel.ENV_DEV).level == logging.DEBUG
    assert setup_logger(LogLevel.ENV_PROD).level == logging.INFO


def test_repeated_setup_keeps_one_handler():
    setup_logger(LogLevel.ENV_DEV)
    logger = setup_logger(LogLevel.ENV_DEV)
    assert len(logger.handlers) == 1


def test_prod_writes_json_and_drops_debug(capsys):
    logger = setup_logger(LogLevel.ENV_PROD)
    logger.debug("hidden")
    logger.info("shown", extra={"namespace": "prod"})
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 1
    entry = json.loads(lines[0])
    assert entry["msg"] == "shown"
    assert entry["namespace"] == "prod"


def test_local_writes_text(capsys):
    logger = setup_logger(LogLevel.ENV_LOCAL)
    logger.debug("started", extra={"pod": "web-1"})
    out = capsys.readouterr().out
    assert "msg=started" in out
    assert "pod=web-1" in out
    assert "level=DEBUG" in out


def test_unknown_level_rejected():
    with pytest.raises(ValueError):
        setup_logger(7)