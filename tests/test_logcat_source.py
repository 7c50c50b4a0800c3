import sys
import unittest
from pathlib import Path
from unittest.mock import patch

from PyQt6.QtCore import QCoreApplication, QProcess

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ui.logcat.logcat_source import LogcatSource


class FakeSignal:
    """Minimal signal stub for intercepting connections in tests."""

    def __init__(self):
        self.callback = None

    def connect(self, callback):
        self.callback = callback

    def emit(self, *args, **kwargs):
        if self.callback:
            self.callback(*args, **kwargs)


class FakeProcess:
    """Stand-in for QProcess feeding scripted stdout/stderr bytes."""

    instances = []

    def __init__(self, parent=None):
        self.readyReadStandardOutput = FakeSignal()
        self.readyReadStandardError = FakeSignal()
        self.finished = FakeSignal()
        self.started = FakeSignal()
        self.errorOccurred = FakeSignal()
        self.program = None
        self.arguments = None
        self.killed = False
        self.wait_finished_called = False
        self.deleted = False
        self.parent = parent
        self.stdout = b''
        self.stderr = b''
        FakeProcess.instances.append(self)

    def start(self, program, arguments):
        self.program = program
        self.arguments = arguments

    def kill(self):
        self.killed = True

    def waitForFinished(self, msec):
        self.wait_finished_called = True

    def deleteLater(self):
        self.deleted = True

    def readAllStandardOutput(self):
        data, self.stdout = self.stdout, b''
        return data

    def readAllStandardError(self):
        data, self.stderr = self.stderr, b''
        return data

    def push_stdout(self, data: bytes):
        self.stdout += data
        self.readyReadStandardOutput.emit()

    def push_stderr(self, data: bytes):
        self.stderr += data
        self.readyReadStandardError.emit()


@patch('ui.logcat.logcat_source.QProcess', new=FakeProcess)
class LogcatSourceTest(unittest.TestCase):
    """Process lifecycle and decoding in LogcatSource."""

    @classmethod
    def setUpClass(cls):
        cls._app = QCoreApplication.instance() or QCoreApplication([])

    def setUp(self):
        FakeProcess.instances.clear()
        self.source = LogcatSource('/opt/adb')
        self.chunks = []
        self.errors = []
        self.closed = []
        self.source.data_received.connect(self.chunks.append)
        self.source.error_occurred.connect(self.errors.append)
        self.source.closed.connect(self.closed.append)

    def _process(self):
        return FakeProcess.instances[-1]

    def test_start_uses_threadtime_main_buffer(self):
        args = self.source.start('SERIAL01')

        process = self._process()
        self.assertEqual(process.program, '/opt/adb')
        self.assertEqual(process.arguments, ['-s', 'SERIAL01', 'logcat', '-v', 'threadtime', '-b', 'main'])
        self.assertEqual(args, process.arguments)
        self.assertTrue(self.source.is_running)
        self.assertIs(process.parent, self.source)

    def test_start_with_server_filters_silences_others(self):
        self.source.start('SERIAL01', [{'tag': 'ActivityManager', 'level': 'I'}, {'tag': 'Net', 'level': 'W'}])

        self.assertEqual(
            self._process().arguments[-3:],
            ['ActivityManager:I', 'Net:W', '*:S'],
        )

    def test_stdout_is_emitted_as_text(self):
        self.source.start('SERIAL01')

        self._process().push_stdout(b'10-01 12:00:00.000 1 2 I Tag: hi\n')

        self.assertEqual(self.chunks, ['10-01 12:00:00.000 1 2 I Tag: hi\n'])

    def test_multibyte_character_split_across_reads(self):
        self.source.start('SERIAL01')
        encoded = 'café 日本\n'.encode('utf-8')

        for index in range(len(encoded)):
            self._process().push_stdout(encoded[index:index + 1])

        self.assertEqual(''.join(self.chunks), 'café 日本\n')

    def test_stderr_reported_as_error(self):
        self.source.start('SERIAL01')

        self._process().push_stderr(b'error: device offline\n')
        self._process().push_stderr(b'   \n')

        self.assertEqual(self.errors, ['error: device offline\n'])

    def test_finished_emits_closed_with_exit_code(self):
        self.source.start('SERIAL01')
        process = self._process()
        process.stdout = b'tail without newline'

        process.finished.emit(1, QProcess.ExitStatus.NormalExit)

        self.assertEqual(self.chunks, ['tail without newline'])
        self.assertEqual(self.closed, [1])
        self.assertTrue(process.deleted)
        self.assertFalse(self.source.is_running)

    def test_stop_kills_without_closed_signal(self):
        self.source.start('SERIAL01')
        process = self._process()

        self.source.stop()
        process.finished.emit(0, QProcess.ExitStatus.CrashExit)

        self.assertTrue(process.killed)
        self.assertTrue(process.wait_finished_called)
        self.assertTrue(process.deleted)
        self.assertEqual(self.closed, [])
        self.assertFalse(self.source.is_running)

    def test_stop_ignores_late_output(self):
        self.source.start('SERIAL01')
        process = self._process()

        self.source.stop()
        process.push_stdout(b'late\n')

        self.assertEqual(self.chunks, [])

    def test_failed_start_reports_error_and_closes(self):
        self.source.start('SERIAL01')

        self._process().errorOccurred.emit(QProcess.ProcessError.FailedToStart)

        self.assertEqual(len(self.errors), 1)
        self.assertIn('Failed to start', self.errors[0])
        self.assertEqual(self.closed, [-1])
        self.assertFalse(self.source.is_running)

    def test_restart_replaces_previous_process(self):
        self.source.start('SERIAL01')
        first = self._process()

        self.source.start('SERIAL02')

        self.assertTrue(first.killed)
        self.assertIsNot(self._process(), first)
        self.assertEqual(self.source.serial, 'SERIAL02')
        self.assertEqual(self.closed, [])


if __name__ == '__main__':
    unittest.main()
