"""
Logging setup

Console output for operators, plus a best-effort copy of every record in the
``logs`` table. Database writes happen on a listener thread fed by a queue, so
request handlers never wait on them, and a failed write is reported on stderr
and otherwise dropped.
"""
import logging
import queue
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from logging.handlers import QueueHandler, QueueListener
from typing import Any, Dict, Optional, Protocol

from photofeed.core.config import Settings
from photofeed.core.database import Database

APP_LOGGER = "photofeed"
CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Attributes every LogRecord carries; anything else came in through ``extra=``
_RESERVED_ATTRS = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


@dataclass
class LogRecordEntry:
    level: str
    message: str
    metadata: Optional[Dict[str, Any]] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class LogSink(Protocol):
    def record(self, entry: LogRecordEntry) -> None:
        """Persist an entry. Must never raise."""


class DatabaseLogSink:
    """Writes log entries to the ``logs`` table"""

    def __init__(self, database: Database):
        self.database = database

    def record(self, entry: LogRecordEntry) -> None:
        from photofeed.models.log_entry import LogEntry

        try:
            session = self.database.session()
        except Exception as e:
            print(f"Failed to save log to DB: {e}", file=sys.stderr)
            return

        try:
            session.add(LogEntry(
                level=entry.level,
                message=entry.message,
                log_metadata=entry.metadata,
                timestamp=entry.timestamp,
            ))
            session.commit()
        except Exception as e:
            session.rollback()
            print(f"Failed to save log to DB: {e}", file=sys.stderr)
        finally:
            session.close()


def _json_safe(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return str(value)


def entry_from_record(record: logging.LogRecord) -> LogRecordEntry:
    metadata = {
        key: _json_safe(value)
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS
    }
    metadata["logger"] = record.name
    if record.exc_info:
        metadata["exception"] = logging.Formatter().formatException(record.exc_info)

    return LogRecordEntry(
        level=record.levelname.lower(),
        message=record.getMessage(),
        metadata=metadata or None,
        timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
    )


class DatabaseLogHandler(logging.Handler):
    """Logging handler forwarding records to a LogSink"""

    def __init__(self, sink: LogSink, level: int = logging.NOTSET):
        super().__init__(level)
        self.sink = sink

    def emit(self, record: logging.LogRecord):
        try:
            entry = entry_from_record(record)
        except Exception:
            self.handleError(record)
            return
        self.sink.record(entry)


def configure_logging(settings: Settings, database: Optional[Database] = None) -> Optional[QueueListener]:
    """
    Configure the ``photofeed`` logger.

    Returns the queue listener feeding the database sink (not yet started), or
    None when database logging is off.
    """
    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(settings.LOG_LEVEL.upper())

    # Re-running (tests, reload) replaces our own handlers only
    for handler in list(logger.handlers):
        if getattr(handler, "_photofeed", False):
            logger.removeHandler(handler)

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    console._photofeed = True
    logger.addHandler(console)

    if not settings.LOG_TO_DATABASE or database is None:
        return None

    log_queue: "queue.Queue[logging.LogRecord]" = queue.Queue(-1)
    queue_handler = QueueHandler(log_queue)
    queue_handler._photofeed = True
    logger.addHandler(queue_handler)

    return QueueListener(log_queue, DatabaseLogHandler(DatabaseLogSink(database)), respect_handler_level=True)
