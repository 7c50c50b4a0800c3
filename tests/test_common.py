#!/usr/bin/env python3
"""Unit tests for utils.common logging, trace ids and command helper."""

import logging
import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from utils import common


class TestCommonUtils(unittest.TestCase):
    def test_trace_id_lifecycle_and_filter(self) -> None:
        # Default trace id
        self.assertEqual(common.get_trace_id(), "-")

        with common.trace_id_scope("abc123"):
            with common.trace_id_scope(None):
                self.assertEqual(common.get_trace_id(), "-")
            self.assertEqual(common.get_trace_id(), "abc123")
        self.assertEqual(common.get_trace_id(), "-")

        with common.trace_id_scope("zzz"):
            self.assertEqual(common.get_trace_id(), "zzz")
            record = logging.LogRecord("x", 20, __file__, 1, "msg", None, None)
            self.assertTrue(common.TraceIdFilter().filter(record))
            self.assertEqual(record.trace_id, "zzz")
        self.assertEqual(common.get_trace_id(), "-")

    def test_trace_id_scope_restores_on_error(self) -> None:
        with self.assertRaises(RuntimeError):
            with common.trace_id_scope("boom"):
                raise RuntimeError("fail")
        self.assertEqual(common.get_trace_id(), "-")

    def test_generate_trace_id_is_unique(self) -> None:
        self.assertNotEqual(common.generate_trace_id(), common.generate_trace_id())

    def test_resolve_logs_dir_linux_variants(self) -> None:
        with patch("platform.system", return_value="Linux"), \
             patch.dict(os.environ, {"XDG_DATA_HOME": "/tmp/xdg"}, clear=False):
            path = common._resolve_logs_dir()  # type: ignore[attr-defined]
            self.assertTrue(str(path).endswith("/tmp/xdg/quick_logcat/logs"))

        with patch("platform.system", return_value="Linux"), \
             patch.dict(os.environ, {"XDG_DATA_HOME": ""}, clear=False):
            path = common._resolve_logs_dir()  # type: ignore[attr-defined]
            self.assertIn("quick_logcat/logs", str(path))

    def test_get_logger_creates_and_cleans_logs(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            stale = os.path.join(td, "quick_logcat_19990101_000000.log")
            with open(stale, "w", encoding="utf-8") as f:
                f.write("old")

            # Reset module guard and route logs to temp dir
            common._logs_cleaned_today = False  # type: ignore[attr-defined]

            with patch("utils.common._resolve_logs_dir", return_value=Path(td)):
                logger = common.get_logger("quick_logcat_cleanup_test")
                logger.info("hello")

            names = os.listdir(td)
            self.assertNotIn(os.path.basename(stale), names)
            self.assertTrue(any(name.startswith("quick_logcat_") and name.endswith(".log") for name in names))

            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)

    def test_get_logger_reuses_handlers(self) -> None:
        first = common.get_logger("quick_logcat_reuse_test")
        handler_count = len(first.handlers)

        second = common.get_logger("quick_logcat_reuse_test")

        self.assertIs(first, second)
        self.assertEqual(len(second.handlers), handler_count)

    def test_run_command_uses_argument_list(self) -> None:
        completed = subprocess.CompletedProcess(args=["adb", "devices"], returncode=0, stdout="ok", stderr="")
        with patch("utils.common.subprocess.run", return_value=completed) as mock_run:
            result = common.run_command(["adb", "devices"], timeout=5)

        self.assertIs(result, completed)
        args, kwargs = mock_run.call_args
        self.assertEqual(args[0], ["adb", "devices"])
        self.assertFalse(kwargs["shell"])
        self.assertFalse(kwargs["check"])
        self.assertEqual(kwargs["timeout"], 5)

    def test_run_command_propagates_missing_executable(self) -> None:
        with patch("utils.common.subprocess.run", side_effect=FileNotFoundError("adb")):
            with self.assertRaises(FileNotFoundError):
                common.run_command(["adb", "version"])


if __name__ == "__main__":
    unittest.main()
