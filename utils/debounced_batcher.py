"""Fixed-delay batching utility for coalescing bursts of items."""

from typing import Any, Iterable, List, Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from utils import common


class DebouncedBatcher(QObject):
    """Collects items and emits them together on a count or time threshold.

    The window is fixed-delay: the timer is armed by the first item after a
    flush and is never restarted by later arrivals, so a steady stream is
    delivered at least every ``delay_ms``. When ``max_items`` is set, reaching
    it flushes immediately. Empty batches are never emitted.
    """

    # Emitted with the list of items collected since the previous flush
    flushed = pyqtSignal(object)

    def __init__(
        self,
        delay_ms: int,
        max_items: Optional[int] = None,
        parent: Optional[QObject] = None,
        logger_name: str = 'debounced_batcher',
    ):
        """Initialize the batcher.

        Args:
            delay_ms: Delay after the first pending item before flushing
            max_items: Pending count that triggers an immediate flush, or None
            parent: Parent QObject; the timer follows it across threads
            logger_name: Name passed to common.get_logger
        """
        super().__init__(parent)
        self.delay_ms = max(0, int(delay_ms))
        self.max_items = max_items
        self.logger = common.get_logger(logger_name)

        self._pending: List[Any] = []

        self.timer = QTimer(self)
        self.timer.setSingleShot(True)
        self.timer.timeout.connect(self.flush)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def is_armed(self) -> bool:
        """Return whether a flush timer is outstanding."""
        return self.timer.isActive()

    def submit(self, items: Iterable[Any]) -> None:
        """Queue items, flushing now if the count threshold is reached."""
        items = list(items)
        if not items:
            return

        self._pending.extend(items)

        if self.max_items is not None and len(self._pending) >= self.max_items:
            self.logger.debug('Count threshold reached (%d items), flushing now', len(self._pending))
            self.flush()
        elif not self.timer.isActive():
            self.timer.start(self.delay_ms)

    def flush(self) -> None:
        """Emit pending items as one batch and disarm the timer."""
        self.timer.stop()
        if not self._pending:
            return

        batch = self._pending
        self._pending = []
        self.flushed.emit(batch)

    def clear(self) -> None:
        """Drop pending items without emitting them."""
        self.timer.stop()
        dropped = len(self._pending)
        self._pending = []
        if dropped:
            self.logger.debug('Discarded %d pending item(s)', dropped)
