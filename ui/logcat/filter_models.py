"""Data models for logcat display filters.

Tag filters either travel to adb as ``TAG:LEVEL`` filterspecs or, with
frontend filtering enabled, are evaluated against records already received.
The keyword search always runs locally.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ui.logcat.log_record import LogLevel, LogRecord


@dataclass(frozen=True)
class TagFilter:
    """Tag substring with a minimum severity."""

    tag: str
    level: str = LogLevel.VERBOSE.code

    def matches(self, record: LogRecord) -> bool:
        if self.tag and self.tag not in record.tag:
            return False

        record_level = record.log_level
        minimum = LogLevel.from_code(self.level)
        if record_level is None or minimum is None:
            return False
        return record_level.rank >= minimum.rank

    def to_dict(self) -> Dict[str, str]:
        return {"tag": self.tag, "level": self.level}

    @classmethod
    def from_dict(cls, data: dict) -> "TagFilter":
        return cls(tag=str(data.get("tag", "")), level=str(data.get("level") or LogLevel.VERBOSE.code))

    def __str__(self) -> str:
        return f"{self.tag}:{self.level}"


@dataclass
class DisplayFilterState:
    """Runtime state for the display-side filters."""

    keyword: Optional[str] = None
    tag_filters: List[TagFilter] = field(default_factory=list)
    frontend_filtering: bool = False

    def set_keyword(self, keyword: Optional[str]) -> bool:
        """Set the search keyword. Returns True if it changed."""
        normalized = keyword.strip().lower() if keyword and keyword.strip() else None
        if normalized == self.keyword:
            return False
        self.keyword = normalized
        return True

    def add_filter(self, tag_filter: TagFilter) -> bool:
        """Append a tag filter. Returns True if added."""
        if not tag_filter.tag.strip():
            return False
        normalized = TagFilter(tag_filter.tag.strip(), tag_filter.level)
        if normalized in self.tag_filters:
            return False
        self.tag_filters.append(normalized)
        return True

    def remove_filter_at(self, index: int) -> Optional[TagFilter]:
        """Remove the filter at ``index``. Returns the removed filter."""
        if 0 <= index < len(self.tag_filters):
            return self.tag_filters.pop(index)
        return None

    def server_filters(self) -> List[Dict[str, str]]:
        """Filters to pass to adb; empty while frontend filtering is on."""
        if self.frontend_filtering:
            return []
        return [tag_filter.to_dict() for tag_filter in self.tag_filters]

    def is_empty(self) -> bool:
        return not self.keyword and not (self.frontend_filtering and self.tag_filters)

    def accepts(self, record: LogRecord) -> bool:
        """Return whether the record should be displayed."""
        if self.keyword:
            if self.keyword not in record.message.lower() and self.keyword not in record.tag.lower():
                return False

        if self.frontend_filtering and self.tag_filters:
            return any(tag_filter.matches(record) for tag_filter in self.tag_filters)

        return True
