#!/usr/bin/env python3
"""Unit tests for the GUI-side aggregation buffer."""

import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from PyQt6.QtCore import QCoreApplication
from PyQt6.QtTest import QTest

from ui.logcat.aggregation_buffer import AggregationBuffer
from ui.logcat.log_record import LogRecord


def _records(start: int, count: int):
    return [
        LogRecord('10-01 12:00:00.000', '1', '2', 'I', 'Tag', f'message {i}', key=i)
        for i in range(start, start + count)
    ]


class AggregationBufferTest(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._app = QCoreApplication.instance() or QCoreApplication([])

    def setUp(self) -> None:
        self.buffer = AggregationBuffer(max_logs=10, update_interval_ms=100)
        self.merges = []
        self.clears = []
        self.buffer.merged.connect(lambda records, evicted: self.merges.append((list(records), evicted)))
        self.buffer.cleared.connect(lambda: self.clears.append(True))

    def test_batches_inside_window_merge_together(self) -> None:
        self.buffer.on_batch(_records(0, 2))
        QTest.qWait(30)
        self.buffer.on_batch(_records(2, 2))

        self.assertEqual(len(self.buffer), 0)
        self.assertTrue(self.buffer.is_armed())
        QTest.qWait(250)

        self.assertEqual(len(self.merges), 1)
        self.assertEqual([r.key for r in self.buffer.view], [0, 1, 2, 3])
        self.assertEqual(self.buffer.staged_count, 0)

    def test_window_is_fixed_from_first_batch(self) -> None:
        buffer = AggregationBuffer(max_logs=10, update_interval_ms=150)
        merges = []
        buffer.merged.connect(lambda records, evicted: merges.append(len(records)))

        buffer.on_batch(_records(0, 1))
        QTest.qWait(100)
        buffer.on_batch(_records(1, 1))
        QTest.qWait(100)

        # Merged at ~150 ms even though a batch arrived at ~100 ms.
        self.assertEqual(merges, [2])

    def test_overflow_keeps_newest_records_in_order(self) -> None:
        self.buffer.on_batch(_records(0, 8))
        self.buffer.merge_staging()
        self.buffer.on_batch(_records(8, 7))
        self.buffer.merge_staging()

        self.assertEqual([r.key for r in self.buffer.view], list(range(5, 15)))
        self.assertEqual(self.merges[0][1], 0)
        self.assertEqual(self.merges[1][1], 5)

    def test_single_batch_larger_than_capacity(self) -> None:
        self.buffer.on_batch(_records(0, 25))
        self.buffer.merge_staging()

        self.assertEqual([r.key for r in self.buffer.view], list(range(15, 25)))
        self.assertEqual(self.merges[0][1], 15)

    def test_empty_batch_is_ignored(self) -> None:
        self.buffer.on_batch([])

        self.assertFalse(self.buffer.is_armed())
        self.buffer.merge_staging()
        self.assertEqual(self.merges, [])

    def test_clear_drops_view_and_staging(self) -> None:
        self.buffer.on_batch(_records(0, 3))
        self.buffer.merge_staging()
        self.buffer.on_batch(_records(3, 3))

        self.buffer.clear()
        QTest.qWait(200)

        self.assertEqual(self.buffer.view, ())
        self.assertEqual(self.buffer.staged_count, 0)
        self.assertFalse(self.buffer.is_armed())
        self.assertEqual(len(self.merges), 1)
        self.assertEqual(len(self.clears), 1)

    def test_clear_is_idempotent(self) -> None:
        self.buffer.on_batch(_records(0, 3))
        self.buffer.merge_staging()

        self.buffer.clear()
        self.buffer.clear()

        self.assertEqual(self.buffer.view, ())
        self.assertEqual(self.buffer.staged_count, 0)

    def test_view_is_a_snapshot(self) -> None:
        self.buffer.on_batch(_records(0, 2))
        self.buffer.merge_staging()
        snapshot = self.buffer.view

        self.buffer.on_batch(_records(2, 2))
        self.buffer.merge_staging()

        self.assertEqual(len(snapshot), 2)
        self.assertEqual(len(self.buffer.view), 4)


if __name__ == "__main__":
    unittest.main()
