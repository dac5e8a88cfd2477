"""
creed.services.log_buffer — Live Log Capture for Marshals
===========================================================

A bounded, thread-safe buffer of recent log records, fed by a
:class:`logging.Handler` attached to the root logger at API start-up.
Marshals read it through ``GET /api/admin/logs`` and can raise or lower
the capture level without a restart.

Nothing is persisted; a restart empties the buffer.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

DEFAULT_CAPACITY = 1000
VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_buffer: LogBuffer | None = None
_buffer_lock = threading.Lock()


@dataclass(frozen=True, slots=True)
class LogEntry:
    timestamp: str
    level: str
    logger: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


class LogBuffer:
    """Fixed-size FIFO of :class:`LogEntry`; oldest entries fall off."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._entries: deque[LogEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def append(self, entry: LogEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def tail(
        self,
        limit: int = 200,
        *,
        min_level: str | None = None,
        prefix: str | None = None,
    ) -> list[LogEntry]:
        """Newest *limit* entries at or above *min_level* under logger *prefix*."""
        floor = logging.getLevelName(min_level.upper()) if min_level else 0
        if not isinstance(floor, int):
            floor = 0
        with self._lock:
            snapshot = tuple(self._entries)

        matched = [
            e for e in snapshot
            if logging.getLevelName(e.level) >= floor
            and (not prefix or e.logger.startswith(prefix))
        ]
        return matched[-limit:] if limit > 0 else matched


class BufferHandler(logging.Handler):
    """Copies each record it receives into a :class:`LogBuffer`."""

    def __init__(self, buffer: LogBuffer, level: int = logging.INFO) -> None:
        super().__init__(level)
        self.buffer = buffer

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.buffer.append(LogEntry(
                timestamp=datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
                level=record.levelname,
                logger=record.name,
                message=self.format(record),
            ))
        except Exception:
            self.handleError(record)


# ---------------------------------------------------------------------------
# Process-wide access
# ---------------------------------------------------------------------------
def get_buffer() -> LogBuffer:
    global _buffer
    with _buffer_lock:
        if _buffer is None:
            _buffer = LogBuffer()
        return _buffer


def _installed_handler() -> BufferHandler | None:
    for h in logging.getLogger().handlers:
        if isinstance(h, BufferHandler):
            return h
    return None


def install_handler(level: int = logging.INFO) -> BufferHandler:
    """Attach the buffer handler to the root logger (once per process).

    Uvicorn's loggers are switched to propagate so request and server
    logs reach the buffer as well.
    """
    handler = _installed_handler()
    if handler is not None:
        return handler

    handler = BufferHandler(get_buffer(), level=level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root = logging.getLogger()
    root.addHandler(handler)
    if root.level > level:
        root.setLevel(level)

    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).propagate = True
    return handler


def get_logs(
    tail: int = 200,
    level: str | None = None,
    logger_prefix: str | None = None,
) -> list[dict[str, str]]:
    return [
        e.to_dict()
        for e in get_buffer().tail(tail, min_level=level, prefix=logger_prefix)
    ]


def get_capture_level() -> str:
    handler = _installed_handler()
    if handler is None:
        return logging.getLevelName(logging.getLogger().level)
    return logging.getLevelName(handler.level)


def set_capture_level(level_name: str) -> str:
    """Change what the buffer captures; installs the handler if needed.

    Raises ``ValueError`` for an unknown level name.
    """
    level_name = level_name.upper()
    if level_name not in VALID_LEVELS:
        raise ValueError(f"Unknown log level {level_name!r}; expected one of {VALID_LEVELS}")
    numeric = logging.getLevelName(level_name)
    handler = install_handler(level=numeric)
    handler.setLevel(numeric)
    root = logging.getLogger()
    if root.level > numeric:
        root.setLevel(numeric)
    return level_name
