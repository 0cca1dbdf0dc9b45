"""
envgate — structured logging.

Every record is rendered as one JSON object per line and delivered through a
``QueueHandler``/``QueueListener`` pair, so checks never block on sink I/O.
Two sinks are available: ``<log_dir>/<run_id>/envgate.jsonl`` and stderr.
``structlog`` is configured to hand its events to the same stdlib loggers;
event keyword arguments end up under the ``fields`` key of the JSON line.
"""

from __future__ import annotations

import atexit
import json
import logging
import logging.handlers
import math
import queue
import sys
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Final, TextIO

import structlog

_DEFAULT_LOG_FILENAME: Final[str] = "envgate.jsonl"
_DEFAULT_LOGGER_NAME: Final[str] = "envgate"
_DEFAULT_QUEUE_SIZE: Final[int] = 4096

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRIBUTES: Final[frozenset[str]] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}

_active_lock = threading.Lock()
_active: StructuredLoggingHandle | None = None
_atexit_hooked = False


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Configuration for queue-backed structured logging.

    ``base_log_dir`` of ``None`` disables the per-run log file.
    """

    run_id: str
    base_log_dir: Path | str | None = None
    logger_name: str = _DEFAULT_LOGGER_NAME
    level: int | str = "WARNING"
    queue_size: int = _DEFAULT_QUEUE_SIZE
    log_filename: str = _DEFAULT_LOG_FILENAME
    log_to_stderr: bool = True
    stream: TextIO | None = None


def setup_logging(
    observability_config: Mapping[str, object] | None = None,
    *,
    run_id: str,
    log_dir: Path | str | None = None,
    logger_name: str = _DEFAULT_LOGGER_NAME,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure logging from an ``[observability]`` mapping and return the logger.

    ``log_dir`` overrides ``observability.log_dir``; a blank value means no
    log file. ``stream`` replaces ``sys.stderr`` for the stderr sink.
    """

    settings = dict(observability_config or {})
    level = settings.get("log_level", "WARNING")
    base_dir = log_dir if log_dir is not None else settings.get("log_dir", "")
    if isinstance(base_dir, str):
        base_dir = base_dir.strip() or None

    handle = setup_structured_logging(
        LoggingConfig(
            run_id=run_id,
            base_log_dir=base_dir if isinstance(base_dir, (str, Path)) else None,
            logger_name=logger_name,
            level=level if isinstance(level, (int, str)) else "WARNING",
            log_to_stderr=bool(settings.get("log_to_stderr", True)),
            stream=stream,
        )
    )
    return handle.logger


class _DroppingQueueHandler(logging.handlers.QueueHandler):
    """Queue handler that counts and discards records once the queue is full."""

    def __init__(self, log_queue: queue.Queue[Any]) -> None:
        super().__init__(log_queue)
        self._dropped = 0
        self._dropped_lock = threading.Lock()

    @property
    def dropped(self) -> int:
        with self._dropped_lock:
            return self._dropped

    def enqueue(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            with self._dropped_lock:
                self._dropped += 1


class _JsonLineFormatter(logging.Formatter):
    def __init__(self, run_id: str) -> None:
        super().__init__()
        self._run_id = run_id

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "timestamp": _utc_timestamp(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": self._run_id,
        }
        extras = {
            key: _jsonable(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
        }
        if extras:
            line["fields"] = extras
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            line["stack"] = str(record.stack_info)
        return json.dumps(line, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


@dataclass(slots=True)
class StructuredLoggingHandle:
    """Runtime handle for an active structured logging setup."""

    logger: logging.Logger
    run_id: str
    log_path: Path | None
    _queue: queue.Queue[Any]
    _queue_handler: _DroppingQueueHandler
    _sinks: tuple[logging.Handler, ...]
    _listener: logging.handlers.QueueListener
    _lock: threading.Lock = field(default_factory=threading.Lock)
    _closed: bool = False

    @property
    def dropped_records(self) -> int:
        return self._queue_handler.dropped

    @property
    def is_shutdown(self) -> bool:
        return self._closed

    def flush(self, *, timeout_seconds: float = 2.0) -> None:
        deadline = time.monotonic() + max(timeout_seconds, 0.0)
        while self._queue.unfinished_tasks and time.monotonic() < deadline:
            time.sleep(0.01)
        for sink in self._sinks:
            sink.flush()

    def shutdown(self, *, timeout_seconds: float = 2.0) -> None:
        with self._lock:
            if self._closed:
                return
            self.flush(timeout_seconds=timeout_seconds)
            self._listener.stop()
            self.logger.removeHandler(self._queue_handler)
            self._queue_handler.close()
            for sink in self._sinks:
                sink.close()
            self._closed = True


def setup_structured_logging(config: LoggingConfig) -> StructuredLoggingHandle:
    """Configure queue-backed structured logging for a single run.

    A previously active setup is shut down first.
    """

    global _active
    previous = get_active_logging_handle()
    if previous is not None:
        shutdown_logging(previous)

    run_id = _plain_name("run_id", config.run_id)
    log_filename = _plain_name("log_filename", config.log_filename)
    if config.queue_size <= 0:
        raise ValueError("queue_size must be > 0")
    level = _level_number(config.level)

    log_path: Path | None = None
    if config.base_log_dir is not None:
        log_path = Path(config.base_log_dir) / run_id / log_filename
    sinks = _build_sinks(config, log_path)
    for sink in sinks:
        sink.setLevel(level)
        sink.setFormatter(_JsonLineFormatter(run_id))

    logger = logging.getLogger(config.logger_name)
    logger.setLevel(level)
    logger.propagate = False
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    log_queue: queue.Queue[Any] = queue.Queue(maxsize=config.queue_size)
    queue_handler = _DroppingQueueHandler(log_queue)
    listener = logging.handlers.QueueListener(log_queue, *sinks, respect_handler_level=True)
    listener.start()
    logger.addHandler(queue_handler)
    _configure_structlog()

    handle = StructuredLoggingHandle(
        logger=logger,
        run_id=run_id,
        log_path=log_path,
        _queue=log_queue,
        _queue_handler=queue_handler,
        _sinks=sinks,
        _listener=listener,
    )
    with _active_lock:
        _active = handle
    _hook_atexit()
    return handle


def shutdown_logging(
    handle: StructuredLoggingHandle | None = None,
    *,
    timeout_seconds: float = 2.0,
) -> None:
    """Stop the listener, close all sinks and restore structlog defaults."""
    global _active
    target = handle if handle is not None else get_active_logging_handle()
    if target is None:
        return
    target.shutdown(timeout_seconds=timeout_seconds)
    with _active_lock:
        if _active is target:
            _active = None
            structlog.reset_defaults()


def get_active_logging_handle() -> StructuredLoggingHandle | None:
    """Return the currently active handle, if one exists."""
    with _active_lock:
        return _active


def _build_sinks(config: LoggingConfig, log_path: Path | None) -> tuple[logging.Handler, ...]:
    sinks: list[logging.Handler] = []
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        sinks.append(logging.FileHandler(log_path, encoding="utf-8"))
    if config.log_to_stderr:
        stream = config.stream if config.stream is not None else sys.stderr
        sinks.append(logging.StreamHandler(stream))
    return tuple(sinks) or (logging.NullHandler(),)


def _configure_structlog() -> None:
    # Keyword arguments of structlog events travel as ``extra`` on the stdlib record.
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def _hook_atexit() -> None:
    global _atexit_hooked
    if not _atexit_hooked:
        atexit.register(shutdown_logging)
        _atexit_hooked = True


def _plain_name(label: str, value: str) -> str:
    name = value.strip() if isinstance(value, str) else ""
    if not name:
        raise ValueError(f"{label} must not be empty")
    if Path(name).name != name:
        raise ValueError(f"{label} must not include path separators")
    return name


def _level_number(level: int | str) -> int:
    if isinstance(level, int):
        return level
    number = logging.getLevelName(str(level).strip().upper())
    if not isinstance(number, int):
        raise ValueError(f"unsupported logging level {level!r}")
    return number


def _utc_timestamp(epoch_seconds: float) -> str:
    moment = datetime.fromtimestamp(epoch_seconds, tz=UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _jsonable(value: object) -> Any:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else repr(value)
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return repr(value)


__all__ = [
    "LoggingConfig",
    "StructuredLoggingHandle",
    "get_active_logging_handle",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
