"""System logging and audit trail.

The logger records structured entries for what happens during a
session: the system coming up and going down, each command the shell
runs, and each filesystem operation that failed.

Like a kernel ring buffer (``dmesg``), the log lives only in memory and
is gone when the process exits:

- **LogLevel** — severity levels ordered for filtering (DEBUG < ERROR).
- **LogEntry** — one immutable record (level, message, source, time).
- **Logger** — an append-only buffer with filtering and clearing.

The filesystem core never writes here; only its callers do.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import IntEnum


class LogLevel(IntEnum):
    """Severity levels for log entries, comparable with ``<``."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """A single structured log record.

    Attributes:
        level: The severity of this event.
        message: A human-readable description of what happened.
        source: The component that generated the event (e.g. "shell").
        timestamp: When the event was recorded (UTC).

    """

    level: LogLevel
    message: str
    source: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


class Logger:
    """Append-only log buffer with filtering.

    An optional *capacity* turns the buffer into a ring: once full, the
    oldest entry is dropped for each new one.
    """

    def __init__(self, *, capacity: int | None = None) -> None:
        """Create an empty logger.

        Args:
            capacity: Maximum number of entries kept (None = unbounded).

        Raises:
            ValueError: If *capacity* is not positive.

        """
        if capacity is not None and capacity <= 0:
            msg = f"Log capacity must be positive, got {capacity}"
            raise ValueError(msg)
        self._capacity = capacity
        self._entries: list[LogEntry] = []

    @property
    def entries(self) -> list[LogEntry]:
        """Return all log entries in chronological order."""
        return list(self._entries)

    def log(self, level: LogLevel, message: str, *, source: str) -> None:
        """Append a new entry to the log.

        Args:
            level: Severity of the event.
            message: Human-readable event description.
            source: Component that generated the event.

        """
        self._entries.append(LogEntry(level=level, message=message, source=source))
        if self._capacity is not None and len(self._entries) > self._capacity:
            del self._entries[0]

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return entries matching the given criteria.

        Args:
            min_level: If set, only return entries at or above this level.
            source: If set, only return entries from this source.

        """
        result = self._entries
        if min_level is not None:
            result = [e for e in result if e.level >= min_level]
        if source is not None:
            result = [e for e in result if e.source == source]
        return result if result is not self._entries else list(result)

    def clear(self) -> None:
        """Remove all log entries."""
        self._entries.clear()

    def __len__(self) -> int:
        """Return the number of entries currently held."""
        return len(self._entries)
