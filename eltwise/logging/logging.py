"""
Logging setup for eltwise.

Library modules only create loggers under the ``eltwise`` namespace; nothing
is configured until an application calls `setup_logging`. Records emitted by
streams and buffers carry launch context through ``extra=``:

* ``stream``: name of the stream the work was enqueued on
* ``launch``: launch label, e.g. ``map[1024]``
* ``buffer``: uid of the device buffer

`EltwiseJSONFormatter` writes that context, and any other ``extra=`` field,
next to the configured keys of every JSON line.
"""

import atexit
import datetime as dt
import json
import logging
import logging.config
import pathlib
from logging.handlers import RotatingFileHandler
from typing import Any, override

USER_CONFIG_FILE = "logging_config.json"
PACKAGED_CONFIG_FILE = pathlib.Path(__file__).parent.resolve() / "config.json"

LAUNCH_CONTEXT_KEYS = ("stream", "launch", "buffer")

# Attributes every LogRecord has; anything else was passed through ``extra=``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def setup_logging(config_file: str | pathlib.Path | None = None) -> None:
    """
    Configure the ``eltwise`` loggers from a dictConfig JSON file.

    Parameters
    ----------
    config_file: str | pathlib.Path | None
        Explicit config file. When omitted, ``logging_config.json`` in the
        working directory is used if present, otherwise the packaged config
        (warnings to stderr, everything to ``logs/eltwise.log.jsonl``)
    """
    if config_file is None:
        user_config = pathlib.Path(USER_CONFIG_FILE)
        config_file = user_config if user_config.is_file() else PACKAGED_CONFIG_FILE
    with open(config_file) as f_in:
        config = json.load(f_in)
    logging.config.dictConfig(config)

    queue_handler = logging.getHandlerByName("queue_handler")
    if queue_handler is not None:
        queue_handler.listener.start()
        atexit.register(queue_handler.listener.stop)


def launch_context(record: logging.LogRecord) -> dict[str, Any]:
    """Stream, launch label and buffer uid attached to a record, if any."""
    return {
        key: getattr(record, key)
        for key in LAUNCH_CONTEXT_KEYS
        if getattr(record, key, None) is not None
    }


class EltwiseJSONFormatter(logging.Formatter):
    """
    JSON lines formatter for stream and launch records

    Attributes:
        fmt_keys (dict): output key -> LogRecord attribute, always written
    """

    def __init__(
        self,
        *,
        fmt_keys: dict[str, str] | None = None,
    ) -> None:
        super().__init__()
        self.fmt_keys = fmt_keys if fmt_keys is not None else {}

    @override
    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(self._prepare_log_dict(record), default=str)

    def _prepare_log_dict(self, record: logging.LogRecord) -> dict[str, Any]:
        computed = {
            "message": record.getMessage(),
            "timestamp": dt.datetime.fromtimestamp(
                record.created, tz=dt.timezone.utc
            ).isoformat(),
        }
        if record.exc_info is not None:
            computed["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info is not None:
            computed["stack_info"] = self.formatStack(record.stack_info)

        message = {}
        for key, attr in self.fmt_keys.items():
            value = computed.pop(attr, None)
            message[key] = value if value is not None else getattr(record, attr)
        message.update(computed)
        message.update(launch_context(record))
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and key not in message:
                message[key] = value
        return message


class RotatingFileHandlerWithDir(RotatingFileHandler):
    """
    RotatingFileHandler that creates the parent directory of its log file
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        filename = kwargs.get("filename", args[0] if args else None)
        if filename:
            pathlib.Path(filename).parent.mkdir(parents=True, exist_ok=True)
        super().__init__(*args, **kwargs)
