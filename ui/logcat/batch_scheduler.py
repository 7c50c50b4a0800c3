"""Dual-trigger batching of parsed records on the worker side."""

from typing import Optional

from PyQt6.QtCore import QObject

from config.constants import LogcatConstants
from utils.debounced_batcher import DebouncedBatcher


class BatchScheduler(DebouncedBatcher):
    """Delivers records once ``batch_size`` accumulate or ``interval_ms`` elapses.

    Usage:
        scheduler = BatchScheduler(parent=worker)
        scheduler.flushed.connect(worker.deliver)
        scheduler.submit(records)
    """

    def __init__(
        self,
        batch_size: int = LogcatConstants.BATCH_SIZE,
        interval_ms: int = LogcatConstants.BATCH_INTERVAL_MS,
        parent: Optional[QObject] = None,
    ):
        super().__init__(
            delay_ms=interval_ms,
            max_items=max(1, int(batch_size)),
            parent=parent,
            logger_name='batch_scheduler',
        )
