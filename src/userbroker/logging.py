"""Logging setup for the broker.

Lifecycle code logs with `extra={"event": LogEvent.X, "instance_id": ...}`.
Both formats surface that context:
- text: `... - Created service instance [event=instance_created instance_id=db-1]`
- json: top-level `event`, plus an `instance` object grouping the
  instance/binding fields, for log aggregation
"""

import logging
import sys
import time
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any

from pythonjsonlogger import json as jsonlogger

from userbroker.config import LoggingConfig

# extra= keys that describe the instance a record is about, in display order.
INSTANCE_FIELDS = ("instance_id", "binding_id", "service_type", "location")


def _context(record: logging.LogRecord) -> dict[str, str]:
    return {
        key: str(getattr(record, key))
        for key in ("event", *INSTANCE_FIELDS)
        if getattr(record, key, None) is not None
    }


class RepeatedEventFilter(logging.Filter):
    """Drop a lifecycle event repeated for the same instance within a window.

    Records are keyed by (event, instance_id) when they carry an event,
    otherwise by logger and message. WARNING and above always pass, as
    does the first occurrence of a key after the window expires.
    """

    def __init__(self, window: float = 5.0, max_keys: int = 1000) -> None:
        super().__init__()
        self._window = window
        self._max_keys = max_keys
        self._seen: OrderedDict[tuple[str, str], float] = OrderedDict()

    def _key(self, record: logging.LogRecord) -> tuple[str, str]:
        event = getattr(record, "event", None)
        if event is not None:
            return str(event), str(getattr(record, "instance_id", ""))
        return record.name, record.getMessage()

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= logging.WARNING:
            return True

        key = self._key(record)
        now = time.monotonic()
        last = self._seen.get(key)
        if last is not None and now - last < self._window:
            return False

        self._seen[key] = now
        self._seen.move_to_end(key)
        while len(self._seen) > self._max_keys:
            self._seen.popitem(last=False)
        return True


class BrokerTextFormatter(logging.Formatter):
    """Plain text with the record's broker context appended in brackets."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)-7s %(name)s - %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        head, sep, tail = line.partition("\n")
        return f"{head} [{pairs}]{sep}{tail}"


class BrokerJsonFormatter(jsonlogger.JsonFormatter):
    """JSON records with the instance context nested under `instance`."""

    def __init__(self, config: LoggingConfig, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._service = config.service_name

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        instance: dict[str, str] = {}
        for key in INSTANCE_FIELDS:
            value = log_record.pop(key, None)
            if value is not None:
                instance["id" if key == "instance_id" else key] = str(value)
        if instance:
            log_record["instance"] = instance
        if "event" in log_record:
            log_record["event"] = str(log_record["event"])

        log_record["timestamp"] = datetime.fromtimestamp(
            record.created, tz=timezone.utc
        ).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = self._service
        log_record["source"] = f"{record.module}:{record.lineno}"


def setup_logging(config: LoggingConfig) -> None:
    """Install one stdout handler on the root logger.

    uvicorn's loggers propagate to it, so server and broker records share
    one format.
    """
    if config.format == "json":
        formatter: logging.Formatter = BrokerJsonFormatter(config)
    else:
        formatter = BrokerTextFormatter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(RepeatedEventFilter(window=config.repeat_window))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True
    logging.getLogger("uvicorn.access").disabled = not config.access_log

    # Kubernetes API calls are covered by the broker's own records.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
