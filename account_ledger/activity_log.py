"""
Activity Log Module

Append-only, timestamped history per account. When an account is deleted its
log moves, untouched, into the LogArchive under the same account id so the
history stays queryable. Logs are unbounded; nothing is ever truncated.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, Iterator, List, Optional, Tuple


TIMESTAMP_SEPARATOR = " at "
CTIME_FORMAT = "%a %b %d %H:%M:%S %Y"


@dataclass(frozen=True)
class LogEntry:
    """
    Immutable activity log entry

    Rendered as "<message> at <ctime>", which is also the persisted form.
    """
    message: str
    timestamp: Optional[datetime] = None

    @classmethod
    def now(cls, message: str) -> 'LogEntry':
        """Create an entry stamped with the current local time"""
        return cls(message=message, timestamp=datetime.now().replace(microsecond=0))

    @property
    def text(self) -> str:
        if self.timestamp is None:
            return self.message
        return f"{self.message}{TIMESTAMP_SEPARATOR}{self.timestamp.ctime()}"

    @classmethod
    def parse(cls, text: str) -> 'LogEntry':
        """Recover an entry from its rendered text"""
        message, sep, stamp = text.rpartition(TIMESTAMP_SEPARATOR)
        if not sep:
            return cls(message=text)
        try:
            timestamp = datetime.strptime(stamp.strip(), CTIME_FORMAT)
        except ValueError:
            return cls(message=text)
        return cls(message=message, timestamp=timestamp)

    def __str__(self) -> str:
        return self.text


class ActivityLog:
    """Ordered, append-only sequence of log entries for one account"""

    def __init__(self, entries: Iterable[LogEntry] = ()):
        self._entries: List[LogEntry] = list(entries)

    def append(self, entry: LogEntry) -> LogEntry:
        self._entries.append(entry)
        return entry

    def record(self, message: str) -> LogEntry:
        """Append a new entry stamped now"""
        return self.append(LogEntry.now(message))

    def pop_last(self) -> LogEntry:
        """Remove the newest entry. Only used to undo a failed write."""
        return self._entries.pop()

    def tail(self, count: int) -> List[LogEntry]:
        """Most recent `count` entries, oldest first"""
        if count <= 0:
            return []
        return self._entries[-count:]

    def entries(self) -> Tuple[LogEntry, ...]:
        return tuple(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __repr__(self) -> str:
        return f"ActivityLog({len(self._entries)} entries)"


class LogArchive:
    """
    Read-only log sequences of deleted accounts, keyed by former account id
    """

    def __init__(self):
        self._logs: Dict[int, Tuple[LogEntry, ...]] = {}

    def add(self, account_id: int, entries: Iterable[LogEntry]) -> None:
        """Archive a log sequence. Each id is written exactly once."""
        if account_id in self._logs:
            raise ValueError(f"Logs for account {account_id} are already archived")
        self._logs[account_id] = tuple(entries)

    def discard(self, account_id: int) -> Tuple[LogEntry, ...]:
        """Drop an archive entry. Only used to undo a failed deletion."""
        return self._logs.pop(account_id)

    def get(self, account_id: int) -> Optional[Tuple[LogEntry, ...]]:
        return self._logs.get(account_id)

    def items(self) -> Iterator[Tuple[int, Tuple[LogEntry, ...]]]:
        return iter(list(self._logs.items()))

    def ids(self) -> List[int]:
        return list(self._logs)

    def __contains__(self, account_id: object) -> bool:
        return account_id in self._logs

    def __len__(self) -> int:
        return len(self._logs)
