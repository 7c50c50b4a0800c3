"""Upstream process wrapper streaming ``adb logcat`` output as text chunks."""

import codecs
from typing import Dict, Iterable, List, Mapping, Optional

from PyQt6.QtCore import QObject, QProcess, pyqtSignal

from config.constants import ADBConstants
from utils import adb_commands
from utils import common

logger = common.get_logger('logcat_source')

QT_QPROCESS = QProcess


class LogcatSource(QObject):
    """Spawns one logcat process and re-emits its output.

    Signals:
        data_received(str): decoded stdout text, split at arbitrary points
        error_occurred(str): stderr output or a process error description
        started(): the process is running
        closed(int): the process exited on its own with the given exit code
    """

    data_received = pyqtSignal(str)
    error_occurred = pyqtSignal(str)
    started = pyqtSignal()
    closed = pyqtSignal(int)

    def __init__(self, adb_path: str, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.adb_path = adb_path
        self._process = None
        self._decoder = None
        self.serial: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self._process is not None

    @property
    def process(self):
        return self._process

    def start(self, serial: str, tag_filters: Iterable[Mapping[str, str]] = ()) -> List[str]:
        """Start streaming logcat for ``serial`` and return the adb arguments used."""
        if self._process is not None:
            self.stop()

        args = adb_commands.build_logcat_arguments(serial, list(tag_filters))
        self.serial = serial
        self._decoder = codecs.getincrementaldecoder('utf-8')(errors='replace')

        process = QProcess(self)
        process.readyReadStandardOutput.connect(self._read_stdout)
        process.readyReadStandardError.connect(self._read_stderr)
        process.started.connect(self._handle_started)
        process.finished.connect(self._handle_finished)
        process.errorOccurred.connect(self._handle_error)
        self._process = process

        logger.info('Starting logcat: %s %s', self.adb_path, args)
        process.start(self.adb_path, args)
        return args

    def stop(self) -> None:
        """Kill the running process without emitting ``closed``."""
        process = self._process
        if process is None:
            return

        # Detach first so late signals from the dying process are ignored.
        self._process = None
        self._decoder = None

        try:
            process.kill()
            process.waitForFinished(ADBConstants.PROCESS_KILL_TIMEOUT_MS)
        except RuntimeError as exc:
            logger.debug('Kill skipped (process already gone): %s', exc)
        finally:
            delete_later = getattr(process, 'deleteLater', None)
            if callable(delete_later):
                delete_later()
        logger.info('Logcat process stopped for %s', self.serial)

    def _read_stdout(self) -> None:
        if self._process is None or self._decoder is None:
            return
        data = bytes(self._process.readAllStandardOutput())
        text = self._decoder.decode(data)
        if text:
            self.data_received.emit(text)

    def _read_stderr(self) -> None:
        if self._process is None:
            return
        text = bytes(self._process.readAllStandardError()).decode('utf-8', errors='replace')
        if text.strip():
            logger.warning('logcat stderr: %s', text.strip())
            self.error_occurred.emit(text)

    def _handle_started(self) -> None:
        if self._process is None:
            return
        logger.info('Logcat process started for %s', self.serial)
        self.started.emit()

    def _handle_finished(self, exit_code: int, _exit_status=None) -> None:
        process = self._process
        if process is None:
            return

        self._read_stdout()
        if self._decoder is not None:
            tail = self._decoder.decode(b'', final=True)
            if tail:
                self.data_received.emit(tail)

        self._process = None
        self._decoder = None
        delete_later = getattr(process, 'deleteLater', None)
        if callable(delete_later):
            delete_later()

        logger.info('Logcat process closed with exit code %s', exit_code)
        self.closed.emit(int(exit_code))

    def _handle_error(self, error) -> None:
        if self._process is None:
            return

        error_map: Dict[object, str] = {
            QT_QPROCESS.ProcessError.FailedToStart: 'Failed to start logcat process. Check the configured ADB path.',
            QT_QPROCESS.ProcessError.Crashed: 'Logcat process crashed unexpectedly.',
            QT_QPROCESS.ProcessError.Timedout: 'Timed out while starting logcat process.',
        }
        message = error_map.get(error, f'Logcat process error: {error}')
        logger.error(message)
        self.error_occurred.emit(message)

        if error == QT_QPROCESS.ProcessError.FailedToStart:
            # No finished signal follows a failed start.
            process = self._process
            self._process = None
            self._decoder = None
            delete_later = getattr(process, 'deleteLater', None)
            if callable(delete_later):
                delete_later()
            self.closed.emit(-1)
