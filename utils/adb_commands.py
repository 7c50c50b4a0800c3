"""Utility with commands functions for adb.

Every builder returns an argument list so that commands run without a shell.
"""

from typing import Iterable, List, Mapping

from config.constants import ADBConstants


def _build_adb_command(adb_path: str, serial_num: str = None, *command_parts) -> List[str]:
  """Build ADB command with proper device selection.

  Args:
    adb_path: Path of the adb executable
    serial_num: Device serial number (optional)
    *command_parts: Command parts to append

  Returns:
    Complete ADB argument list, program first
  """
  parts = [adb_path]

  if serial_num:
    parts.extend(['-s', serial_num])

  parts.extend(command_parts)
  return parts


def cmd_adb_version(adb_path: str) -> List[str]:
  # adb version
  return _build_adb_command(adb_path, None, 'version')


def cmd_get_adb_devices(adb_path: str) -> List[str]:
  # adb devices
  return _build_adb_command(adb_path, None, 'devices')


def cmd_clear_logcat(adb_path: str, serial_num: str) -> List[str]:
  # adb -s <serial> logcat -c
  return _build_adb_command(adb_path, serial_num, 'logcat', '-c')


def cmd_force_stop_logcat(adb_path: str, serial_num: str) -> List[str]:
  # adb -s <serial> shell pkill -f logcat
  return _build_adb_command(adb_path, serial_num, 'shell', 'pkill', '-f', 'logcat')


def format_filter_spec(tag: str, level: str) -> str:
  """Return a logcat filterspec such as ``ActivityManager:W``."""
  return f'{tag}:{level}'


def build_logcat_arguments(serial_num: str, tag_filters: Iterable[Mapping[str, str]] = ()) -> List[str]:
  """Build the arguments passed to adb for a streaming logcat session.

  When tag filters are given, every other tag is silenced with ``*:S`` so the
  device only emits the requested tags.
  """
  args = [
      '-s', serial_num,
      'logcat',
      '-v', ADBConstants.LOGCAT_FORMAT,
      '-b', ADBConstants.LOGCAT_BUFFER,
  ]

  specs = [
      format_filter_spec(entry['tag'], entry.get('level') or 'V')
      for entry in tag_filters
      if entry.get('tag')
  ]
  if specs:
    args.extend(specs)
    args.append('*:S')
  return args
