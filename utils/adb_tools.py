"""Locate the adb executable and run the one-shot adb commands used by the viewer."""

import shutil
import subprocess
from typing import Iterable, List, Optional, Sequence, TYPE_CHECKING

from config.constants import ADBConstants, MessageConstants
from utils import adb_commands
from utils import common

if TYPE_CHECKING:
  from config.config_manager import ConfigManager


logger = common.get_logger('adb_tools')


class AdbError(RuntimeError):
  """Base class for adb failures surfaced to the user."""


class AdbPathNotConfiguredError(AdbError):
  """Raised when an adb command is requested before a path is configured."""

  def __init__(self, message: str = MessageConstants.ERROR_ADB_NOT_CONFIGURED):
    super().__init__(message)


class AdbCommandError(AdbError):
  """Raised when executing an adb command fails."""

  def __init__(self, command: Sequence[str], returncode: Optional[int], stderr: str = ''):
    self.command = list(command)
    self.returncode = returncode
    self.stderr = (stderr or '').strip()
    detail = self.stderr or f'exit code {returncode}'
    super().__init__(f'{" ".join(self.command)} failed: {detail}')


def _require_adb_path(adb_path: Optional[str]) -> str:
  if not adb_path:
    logger.error('ADB path is not configured')
    raise AdbPathNotConfiguredError()
  return adb_path


def _run(command: List[str], timeout: float = ADBConstants.DEFAULT_COMMAND_TIMEOUT) -> subprocess.CompletedProcess:
  try:
    result = common.run_command(command, timeout=timeout)
  except (OSError, subprocess.TimeoutExpired) as exc:
    logger.error('ADB command could not run: %s (%s)', command, exc)
    raise AdbCommandError(command, None, str(exc)) from exc

  if result.returncode != 0:
    raise AdbCommandError(command, result.returncode, result.stderr)
  return result


def find_adb_in_path() -> str:
  """Return the adb executable found on PATH, or an empty string."""
  adb_path = shutil.which('adb') or ''
  if adb_path:
    logger.info('ADB found on PATH: %s', adb_path)
  else:
    logger.info('ADB not found on PATH')
  return adb_path


def is_valid_adb_path(adb_path: str) -> bool:
  """Return True when ``adb_path version`` identifies Android Debug Bridge."""
  if not adb_path or not adb_path.strip():
    return False

  try:
    result = _run(adb_commands.cmd_adb_version(adb_path.strip()), timeout=ADBConstants.VERSION_COMMAND_TIMEOUT)
  except AdbCommandError as exc:
    logger.warning('ADB path validation failed: %s', exc)
    return False

  is_valid = ADBConstants.VERSION_BANNER in (result.stdout or '')
  logger.info('ADB path %s valid: %s', adb_path, is_valid)
  return is_valid


def resolve_adb_path(config_manager: "ConfigManager") -> str:
  """Return the configured adb path, auto-detecting and persisting it when unset."""
  configured = config_manager.get_adb_settings().adb_path
  if configured:
    logger.info('Using configured ADB path: %s', configured)
    return configured

  detected = find_adb_in_path()
  if detected:
    config_manager.update_adb_settings(adb_path=detected)
    logger.info('ADB path auto-configured: %s', detected)
  return detected


def parse_devices_output(lines: Iterable[str]) -> List[str]:
  """Return serials of ready devices from ``adb devices`` output lines."""
  serials: List[str] = []
  for raw_line in lines:
    line = raw_line.strip()
    if not line or line.startswith('List of devices') or line.startswith('*'):
      continue

    parts = line.split()
    if len(parts) < 2:
      continue

    serial, status = parts[0], parts[1]
    if status != ADBConstants.DEVICE_STATE_DEVICE:
      logger.debug('Skipping device %s due to status %s', serial, status)
      continue
    serials.append(serial)
  return serials


def get_devices(adb_path: Optional[str]) -> List[str]:
  """Return serials of connected, authorized devices.

  Raises:
    AdbPathNotConfiguredError: No adb path configured.
  """
  adb_path = _require_adb_path(adb_path)
  try:
    result = _run(adb_commands.cmd_get_adb_devices(adb_path))
  except AdbCommandError as exc:
    logger.error('Failed to list devices: %s', exc)
    return []

  devices = parse_devices_output(result.stdout.splitlines())
  logger.info('Devices found: %s', devices)
  return devices


def clear_device_logcat(adb_path: Optional[str], serial_num: str) -> None:
  """Clear the device-side logcat buffer.

  Raises:
    AdbPathNotConfiguredError: No adb path configured.
    AdbCommandError: adb reported a failure.
  """
  adb_path = _require_adb_path(adb_path)
  command = adb_commands.cmd_clear_logcat(adb_path, serial_num)
  logger.debug('Clearing device logcat: %s', command)
  _run(command)


def force_stop_logcat(adb_path: Optional[str], serial_num: str) -> bool:
  """Kill logcat processes on the device; best effort, returns success."""
  if not adb_path or not serial_num:
    return False

  try:
    _run(adb_commands.cmd_force_stop_logcat(adb_path, serial_num))
  except AdbCommandError as exc:
    logger.debug('Force stop of device logcat skipped: %s', exc)
    return False
  return True
