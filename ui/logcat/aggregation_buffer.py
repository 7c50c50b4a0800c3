"""GUI-side coalescing of record batches into a bounded, ordered view."""

from collections import deque
from typing import Deque, List, Optional, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from config.constants import LogcatConstants
from ui.logcat.log_record import LogRecord
from utils import common
from utils.debounced_batcher import DebouncedBatcher

logger = common.get_logger('aggregation_buffer')


class AggregationBuffer(QObject):
    """Stages incoming batches behind a fixed-delay window and merges them into the view.

    The view keeps at most ``max_logs`` records; overflow evicts the oldest
    records first.
    """

    merged = pyqtSignal(object, int)  # appended records, evicted count
    cleared = pyqtSignal()

    def __init__(
        self,
        max_logs: int = LogcatConstants.MAX_LOGS,
        update_interval_ms: int = LogcatConstants.LOG_UPDATE_INTERVAL_MS,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.max_logs = max(1, int(max_logs))
        self._view: Deque[LogRecord] = deque(maxlen=self.max_logs)
        self._staging = DebouncedBatcher(
            delay_ms=update_interval_ms,
            parent=self,
            logger_name='aggregation_buffer.staging',
        )
        self._staging.flushed.connect(self._merge)

    @property
    def view(self) -> Tuple[LogRecord, ...]:
        """Snapshot of the merged records, oldest first."""
        return tuple(self._view)

    @property
    def staged_count(self) -> int:
        return self._staging.pending_count

    def is_armed(self) -> bool:
        return self._staging.is_armed()

    def __len__(self) -> int:
        return len(self._view)

    def on_batch(self, records: List[LogRecord]) -> None:
        """Stage a batch; the first batch after a merge arms the window."""
        self._staging.submit(records)

    def merge_staging(self) -> None:
        """Merge staged records into the view immediately."""
        self._staging.flush()

    def clear(self) -> None:
        """Drop the view and any staged records."""
        self._staging.clear()
        self._view.clear()
        self.cleared.emit()

    def _merge(self, records: List[LogRecord]) -> None:
        before = len(self._view)
        self._view.extend(records)
        evicted = before + len(records) - len(self._view)
        if evicted:
            logger.debug('Evicted %d record(s) over capacity %d', evicted, self.max_logs)
        self.merged.emit(records, evicted)
