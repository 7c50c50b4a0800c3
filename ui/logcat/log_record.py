"""Structured logcat records and the threadtime line parser."""

import itertools
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional


class LogLevel(Enum):
    """Mapped logcat severities in ascending order."""

    VERBOSE = ('V', 'Verbose', '#808080')
    DEBUG = ('D', 'Debug', '#2196F3')
    INFO = ('I', 'Info', '#4CAF50')
    WARNING = ('W', 'Warning', '#FF9800')
    ERROR = ('E', 'Error', '#F44336')
    FATAL = ('F', 'Fatal', '#9C27B0')

    def __init__(self, code: str, label: str, color: str):
        self.code = code
        self.label = label
        self.color = color

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)

    @classmethod
    def from_code(cls, code: str) -> Optional["LogLevel"]:
        """Return the level for a severity letter, or None when unmapped (e.g. 'A')."""
        return _LEVELS_BY_CODE.get(code)


_LEVEL_ORDER = list(LogLevel)
_LEVELS_BY_CODE = {level.code: level for level in _LEVEL_ORDER}


@dataclass(frozen=True)
class LogRecord:
    """One parsed logcat line."""

    timestamp: str
    pid: str
    tid: str
    level: str
    tag: str
    message: str
    key: int

    @property
    def log_level(self) -> Optional[LogLevel]:
        return LogLevel.from_code(self.level)

    def to_line(self) -> str:
        """Rebuild the line in the form used for copying."""
        return f'{self.timestamp} {self.pid} {self.tid} {self.level} {self.tag}: {self.message}'


class LogRecordParser:
    """Parses threadtime lines, issuing a sequential key per record.

    Keys keep increasing for the lifetime of the parser so that records from
    before and after a clear never share an identity.
    """

    THREADTIME_PATTERN = re.compile(
        r'^(?P<timestamp>\d{2}-\d{2}\s\d{2}:\d{2}:\d{2}\.\d{3})\s+'
        r'(?P<pid>\d+)\s+(?P<tid>\d+)\s+'
        r'(?P<level>[VDIWEAF])(?:/|\s+)'
        r'(?P<tag>[^:]+?):\s+'
        r'(?P<message>.+)$'
    )

    def __init__(self, first_key: int = 1):
        self._keys = itertools.count(first_key)

    def parse(self, line: str) -> Optional[LogRecord]:
        """Return a record for a matching line, or None when the line is unparsable."""
        match = self.THREADTIME_PATTERN.match(line.rstrip('\r'))
        if not match:
            return None

        parts = match.groupdict()
        tag = parts['tag'].strip()
        if not tag:
            return None

        return LogRecord(
            timestamp=parts['timestamp'],
            pid=parts['pid'],
            tid=parts['tid'],
            level=parts['level'],
            tag=tag,
            message=parts['message'],
            key=next(self._keys),
        )

    def parse_lines(self, lines: Iterable[str]) -> Iterator[LogRecord]:
        """Parse lines in order, skipping the unparsable ones."""
        for line in lines:
            record = self.parse(line)
            if record is not None:
                yield record
