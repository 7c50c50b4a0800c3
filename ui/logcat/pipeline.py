"""Control channel tying the background parser to the GUI-side aggregation buffer."""

from typing import List, Optional, Tuple

from PyQt6.QtCore import QCoreApplication, QMetaObject, QObject, Qt, QThread, pyqtSignal, pyqtSlot

from config.config_manager import PipelineSettings
from config.constants import LogcatConstants
from ui.logcat.aggregation_buffer import AggregationBuffer
from ui.logcat.log_record import LogRecord
from ui.logcat.parser_worker import LogParserWorker
from utils import common

logger = common.get_logger('logcat_pipeline')


class LogcatPipeline(QObject):
    """Accepts raw logcat text and maintains the bounded record view.

    Chunks and clear commands travel to the worker over queued connections;
    batches come back the same way. Every ``clear()`` starts a new
    generation, and batches produced before it are dropped on arrival when
    ``drop_stale_batches`` is enabled.

    Usage:
        pipeline = LogcatPipeline(parent=window)
        pipeline.buffer.merged.connect(model.on_merged)
        source.data_received.connect(pipeline.ingest)
    """

    _chunk_posted = pyqtSignal(str)
    _clear_posted = pyqtSignal(int)
    _flush_posted = pyqtSignal()

    def __init__(
        self,
        settings: Optional[PipelineSettings] = None,
        parent: Optional[QObject] = None,
        *,
        threaded: bool = True,
        drop_stale_batches: bool = True,
    ):
        super().__init__(parent)
        settings = settings or PipelineSettings()
        self.drop_stale_batches = drop_stale_batches
        self._generation = 0
        self._closed = False
        self.stale_batches = 0

        self.buffer = AggregationBuffer(settings.max_logs, settings.update_interval_ms, parent=self)

        self._thread: Optional[QThread] = None
        if threaded:
            self._worker = LogParserWorker(settings.batch_size, settings.batch_interval_ms)
            self._thread = QThread(self)
            self._thread.setObjectName('logcat-parser')
            self._worker.moveToThread(self._thread)
            self._thread.finished.connect(self._worker.deleteLater)
        else:
            self._worker = LogParserWorker(settings.batch_size, settings.batch_interval_ms, parent=self)

        self._chunk_posted.connect(self._worker.ingest)
        self._clear_posted.connect(self._worker.clear)
        self._flush_posted.connect(self._worker.flush)
        self._worker.batch_ready.connect(self._on_batch_ready)

        if self._thread is not None:
            self._thread.start()
        logger.info('Logcat pipeline ready (threaded=%s, settings=%s)', threaded, settings)

    @property
    def view(self) -> Tuple[LogRecord, ...]:
        return self.buffer.view

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_threaded(self) -> bool:
        return self._thread is not None

    @property
    def worker(self) -> LogParserWorker:
        return self._worker

    @pyqtSlot(str)
    def ingest(self, chunk: str) -> None:
        """Hand one raw chunk to the parser, in arrival order."""
        if self._closed or not chunk:
            return
        self._chunk_posted.emit(chunk)

    def flush(self) -> None:
        """Ask the worker to deliver its pending records without waiting for the interval."""
        if self._closed:
            return
        self._flush_posted.emit()

    def clear(self) -> None:
        """Reset every stage; records received before the call never reach the view."""
        if self._closed:
            return
        self._generation += 1
        self.buffer.clear()
        self._clear_posted.emit(self._generation)
        logger.info('Pipeline cleared (generation %d)', self._generation)

    def shutdown(self) -> None:
        """Flush whatever the worker holds into the view and stop the worker thread."""
        if self._closed:
            return
        self._closed = True

        if self._thread is not None and self._thread.isRunning():
            QMetaObject.invokeMethod(self._worker, 'flush', Qt.ConnectionType.BlockingQueuedConnection)
            self._thread.quit()
            if not self._thread.wait(LogcatConstants.SHUTDOWN_TIMEOUT_MS):
                logger.warning('Parser thread did not stop within %d ms', LogcatConstants.SHUTDOWN_TIMEOUT_MS)
            # Deliver batches queued by the final flush before merging.
            QCoreApplication.sendPostedEvents(self, 0)
        elif self._thread is None:
            self._worker.flush()

        staged = self.buffer.staged_count
        self.buffer.merge_staging()
        logger.info('Pipeline shut down, merged %d staged record(s), %d in view', staged, len(self.buffer))

    @pyqtSlot(int, object)
    def _on_batch_ready(self, generation: int, records: List[LogRecord]) -> None:
        if self.drop_stale_batches and generation != self._generation:
            self.stale_batches += 1
            logger.debug(
                'Dropping stale batch of %d record(s) from generation %d (current %d)',
                len(records), generation, self._generation,
            )
            return
        self.buffer.on_batch(records)
