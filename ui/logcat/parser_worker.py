"""Background parsing stage of the logcat pipeline.

The worker owns the line reassembler, the record parser and the batch
scheduler. It is driven exclusively through queued slots and reports batches
through ``batch_ready`` so no record buffer is shared with the GUI thread.
"""

from typing import List, Optional

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from config.constants import LogcatConstants
from ui.logcat.batch_scheduler import BatchScheduler
from ui.logcat.line_reassembler import LineReassembler
from ui.logcat.log_record import LogRecord, LogRecordParser
from utils import common

logger = common.get_logger('parser_worker')


class LogParserWorker(QObject):
    """Turns raw text chunks into batches of LogRecord."""

    batch_ready = pyqtSignal(int, object)  # generation, List[LogRecord]

    def __init__(
        self,
        batch_size: int = LogcatConstants.BATCH_SIZE,
        batch_interval_ms: int = LogcatConstants.BATCH_INTERVAL_MS,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._reassembler = LineReassembler()
        self._parser = LogRecordParser()
        self._scheduler = BatchScheduler(batch_size, batch_interval_ms, parent=self)
        self._scheduler.flushed.connect(self._deliver)
        self._generation = 0
        self.dropped_lines = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def scheduler(self) -> BatchScheduler:
        return self._scheduler

    @pyqtSlot(str)
    def ingest(self, chunk: str) -> None:
        """Reassemble, parse and schedule the lines completed by ``chunk``."""
        lines = self._reassembler.feed(chunk)
        if not lines:
            return

        records = list(self._parser.parse_lines(lines))
        dropped = len(lines) - len(records)
        if dropped:
            self.dropped_lines += dropped
            logger.debug('Dropped %d unparsable line(s)', dropped)

        if records:
            self._scheduler.submit(records)

    @pyqtSlot()
    def flush(self) -> None:
        """Deliver pending records now."""
        self._scheduler.flush()

    @pyqtSlot(int)
    def clear(self, generation: int) -> None:
        """Discard the partial line and pending records; later batches carry ``generation``."""
        discarded = len(self._reassembler.pending)
        self._scheduler.clear()
        self._reassembler.clear()
        self._generation = generation
        logger.debug('Worker state cleared, generation %d (%d partial char(s) discarded)', generation, discarded)

    def _deliver(self, records: List[LogRecord]) -> None:
        self.batch_ready.emit(self._generation, records)
