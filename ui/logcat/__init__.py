"""Logcat streaming pipeline and viewer components.

This package contains the modularized components for the Logcat viewer:
- log_record: LogRecord, LogLevel and the threadtime line parser
- line_reassembler: chunk-to-line reassembly
- batch_scheduler: dual-trigger batching on the worker side
- parser_worker: background parsing stage
- aggregation_buffer: bounded, coalesced record view
- pipeline: control channel wiring worker and buffer
- logcat_source: adb logcat process wrapper
- filter_models: display filter state
- log_table_model: table and filter proxy models
"""

from ui.logcat.log_record import LogLevel, LogRecord, LogRecordParser
from ui.logcat.line_reassembler import LineReassembler
from ui.logcat.batch_scheduler import BatchScheduler
from ui.logcat.parser_worker import LogParserWorker
from ui.logcat.aggregation_buffer import AggregationBuffer
from ui.logcat.pipeline import LogcatPipeline
from ui.logcat.logcat_source import LogcatSource
from ui.logcat.filter_models import TagFilter, DisplayFilterState
from ui.logcat.log_table_model import LogTableModel, LogFilterProxyModel

__all__ = [
    "LogLevel",
    "LogRecord",
    "LogRecordParser",
    "LineReassembler",
    "BatchScheduler",
    "LogParserWorker",
    "AggregationBuffer",
    "LogcatPipeline",
    "LogcatSource",
    "TagFilter",
    "DisplayFilterState",
    "LogTableModel",
    "LogFilterProxyModel",
]
