import json
import logging

import numpy as np
import pytest

from eltwise.core.buffer import DeviceBuffer
from eltwise.linalg import scalar_add
from eltwise.logging.logging import (
    EltwiseJSONFormatter,
    RotatingFileHandlerWithDir,
    launch_context,
    setup_logging,
)


@pytest.fixture
def restore_eltwise_logger():
    logger = logging.getLogger("eltwise")
    saved = (logger.level, list(logger.handlers), logger.propagate)
    yield logger
    for handler in logger.handlers:
        if handler not in saved[1]:
            handler.close()
    logger.setLevel(saved[0])
    logger.handlers[:] = saved[1]
    logger.propagate = saved[2]


def _record(msg="launch %s", args=("map[4]",), exc_info=None):
    return logging.LogRecord(
        name="eltwise.core.stream",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=args,
        exc_info=exc_info,
    )


def test_json_formatter_maps_keys():
    formatter = EltwiseJSONFormatter(
        fmt_keys={"level": "levelname", "logger": "name", "message": "message"}
    )
    payload = json.loads(formatter.format(_record()))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "eltwise.core.stream"
    assert payload["message"] == "launch map[4]"
    assert "timestamp" in payload


def test_json_formatter_includes_exception():
    try:
        raise RuntimeError("boom")
    except RuntimeError as exc:
        record = _record(exc_info=(type(exc), exc, exc.__traceback__))
    payload = json.loads(EltwiseJSONFormatter().format(record))
    assert "RuntimeError: boom" in payload["exc_info"]


def test_json_formatter_passes_extra_fields_through():
    record = _record()
    record.stream = "stream-7"
    record.launch = "zip[128]"
    record.attempt = 2
    payload = json.loads(EltwiseJSONFormatter().format(record))
    assert payload["stream"] == "stream-7"
    assert payload["launch"] == "zip[128]"
    assert payload["attempt"] == 2
    # builtin record attributes are only written when listed in fmt_keys
    assert "lineno" not in payload
    assert "args" not in payload


def test_stream_records_carry_launch_context(stream, caplog):
    with caplog.at_level(logging.DEBUG, logger="eltwise"):
        buf = DeviceBuffer.from_host([1.0, 2.0, 3.0], dtype=np.float32)
        scalar_add(buf, buf, 1.0, 3, stream)
    stream.synchronize()

    enqueued = [r for r in caplog.records if r.getMessage().startswith("Enqueued")]
    assert launch_context(enqueued[-1]) == {
        "stream": "test-stream",
        "launch": "map[3]",
    }
    payload = json.loads(EltwiseJSONFormatter().format(enqueued[-1]))
    assert payload["launch"] == "map[3]"

    created = [r for r in caplog.records if r.getMessage().startswith("Creating buffer")]
    assert launch_context(created[-1]) == {"buffer": buf.uid}


def test_rotating_handler_creates_directory(tmp_path):
    log_file = tmp_path / "nested" / "dir" / "eltwise.log"
    handler = RotatingFileHandlerWithDir(filename=str(log_file))
    try:
        assert log_file.parent.is_dir()
    finally:
        handler.close()


def test_setup_logging_prefers_user_config(tmp_path, monkeypatch, restore_eltwise_logger):
    log_file = tmp_path / "logs" / "user.jsonl"
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": "eltwise.logging.logging.EltwiseJSONFormatter"}
        },
        "handlers": {
            "file": {
                "()": "eltwise.logging.logging.RotatingFileHandlerWithDir",
                "formatter": "json",
                "filename": str(log_file),
            }
        },
        "loggers": {"eltwise": {"level": "DEBUG", "handlers": ["file"]}},
    }
    (tmp_path / "logging_config.json").write_text(json.dumps(config))
    monkeypatch.chdir(tmp_path)

    setup_logging()
    logging.getLogger("eltwise.core.stream").info("enqueued %s", "zip[8]")
    for handler in restore_eltwise_logger.handlers:
        handler.flush()

    line = log_file.read_text().strip().splitlines()[-1]
    assert json.loads(line)["message"] == "enqueued zip[8]"


def test_setup_logging_uses_packaged_config(tmp_path, monkeypatch, restore_eltwise_logger):
    monkeypatch.chdir(tmp_path)
    setup_logging()
    assert logging.getHandlerByName("queue_handler") is not None
    assert restore_eltwise_logger.propagate is False
    logging.getLogger("eltwise.core.stream").debug("packaged config active")
    logging.getHandlerByName("queue_handler").listener.stop()
    assert (tmp_path / "logs" / "eltwise.log.jsonl").is_file()


def test_setup_logging_accepts_explicit_config(tmp_path, restore_eltwise_logger):
    log_file = tmp_path / "explicit" / "eltwise.jsonl"
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": "eltwise.logging.logging.EltwiseJSONFormatter"}
        },
        "handlers": {
            "file": {
                "()": "eltwise.logging.logging.RotatingFileHandlerWithDir",
                "formatter": "json",
                "filename": str(log_file),
            }
        },
        "loggers": {"eltwise": {"level": "INFO", "handlers": ["file"]}},
    }
    config_file = tmp_path / "custom.json"
    config_file.write_text(json.dumps(config))

    setup_logging(config_file)
    logging.getLogger("eltwise.core.stream").info(
        "fault", extra={"stream": "stream-3", "launch": "map[9]"}
    )
    for handler in restore_eltwise_logger.handlers:
        handler.flush()

    payload = json.loads(log_file.read_text().strip().splitlines()[-1])
    assert payload["stream"] == "stream-3"
    assert payload["launch"] == "map[9]"
