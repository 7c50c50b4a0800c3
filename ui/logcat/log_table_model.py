"""Qt models presenting the bounded record view as a filterable table."""

from typing import Any, List, Optional

from PyQt6.QtCore import QAbstractTableModel, QModelIndex, QObject, QSortFilterProxyModel, Qt
from PyQt6.QtGui import QColor

from ui.logcat.filter_models import DisplayFilterState
from ui.logcat.log_record import LogRecord


# (field, header)
LOG_COLUMNS = [
    ('timestamp', 'Time'),
    ('pid', 'PID'),
    ('tid', 'TID'),
    ('level', 'Level'),
    ('tag', 'Tag'),
    ('message', 'Message'),
]

COLUMN_FIELDS = [name for name, _ in LOG_COLUMNS]


class LogTableModel(QAbstractTableModel):
    """Table model mirroring the aggregation buffer view."""

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._records: List[LogRecord] = []

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        if parent.isValid():
            return 0
        return len(self._records)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        if parent.isValid():
            return 0
        return len(LOG_COLUMNS)

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:  # type: ignore[override]
        if role != Qt.ItemDataRole.DisplayRole or orientation != Qt.Orientation.Horizontal:
            return None
        if 0 <= section < len(LOG_COLUMNS):
            return LOG_COLUMNS[section][1]
        return None

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:  # type: ignore[override]
        if not index.isValid() or not (0 <= index.row() < len(self._records)):
            return None
        record = self._records[index.row()]
        field_name = COLUMN_FIELDS[index.column()]

        if role == Qt.ItemDataRole.DisplayRole:
            if field_name == 'level':
                level = record.log_level
                return level.label if level else record.level
            return getattr(record, field_name)
        if role == Qt.ItemDataRole.ForegroundRole and field_name == 'level':
            level = record.log_level
            return QColor(level.color) if level else None
        if role == Qt.ItemDataRole.ToolTipRole and field_name == 'message':
            return record.message
        if role == Qt.ItemDataRole.UserRole:
            return record
        return None

    def append_records(self, records: List[LogRecord]) -> None:
        if not records:
            return
        start = len(self._records)
        end = start + len(records) - 1
        self.beginInsertRows(QModelIndex(), start, end)
        self._records.extend(records)
        self.endInsertRows()

    def remove_first(self, count: int) -> None:
        if count <= 0 or not self._records:
            return
        actual = min(count, len(self._records))
        self.beginRemoveRows(QModelIndex(), 0, actual - 1)
        del self._records[:actual]
        self.endRemoveRows()

    def on_merged(self, records: List[LogRecord], evicted: int) -> None:
        """Apply one aggregation buffer merge."""
        self.append_records(list(records))
        self.remove_first(evicted)

    def clear(self) -> None:
        if not self._records:
            return
        self.beginResetModel()
        self._records.clear()
        self.endResetModel()

    def get_record(self, row: int) -> Optional[LogRecord]:
        if 0 <= row < len(self._records):
            return self._records[row]
        return None


class LogFilterProxyModel(QSortFilterProxyModel):
    """Proxy applying the keyword and frontend tag/level filters."""

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._state = DisplayFilterState()

    @property
    def filter_state(self) -> DisplayFilterState:
        return self._state

    def set_filter_state(self, state: DisplayFilterState) -> None:
        self._state = state
        self.invalidateFilter()

    def refresh(self) -> None:
        """Re-evaluate rows after the shared filter state was mutated."""
        self.invalidateFilter()

    def filterAcceptsRow(self, source_row: int, source_parent: QModelIndex) -> bool:  # type: ignore[override]
        if self._state.is_empty():
            return True

        model = self.sourceModel()
        if model is None:
            return False

        index = model.index(source_row, 0, source_parent)
        record: Optional[LogRecord] = model.data(index, Qt.ItemDataRole.UserRole)
        if record is None:
            return False
        return self._state.accepts(record)
