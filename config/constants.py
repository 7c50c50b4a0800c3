"""Application constants and configuration values."""


class LogcatConstants:
    """Streaming pipeline tuning constants."""

    # Batch scheduler (background worker)
    BATCH_SIZE = 200
    BATCH_INTERVAL_MS = 150

    # Aggregation buffer (GUI thread)
    LOG_UPDATE_INTERVAL_MS = 300
    MAX_LOGS = 1000

    # Lower bounds accepted from persisted settings
    MIN_BATCH_SIZE = 1
    MIN_INTERVAL_MS = 10
    MIN_MAX_LOGS = 100

    # Milliseconds to wait for the worker thread on shutdown
    SHUTDOWN_TIMEOUT_MS = 2000

    LINE_SEPARATOR = '\n'

    # Severity letters accepted in tag filters, lowest first
    LEVEL_CODES = ('V', 'D', 'I', 'W', 'E', 'F')


class ADBConstants:
    """ADB-related constants."""

    # Command timeouts (seconds)
    DEFAULT_COMMAND_TIMEOUT = 30
    VERSION_COMMAND_TIMEOUT = 10

    DEVICE_STATE_DEVICE = 'device'

    VERSION_BANNER = 'Android Debug Bridge'
    LOGCAT_FORMAT = 'threadtime'
    LOGCAT_BUFFER = 'main'

    # Milliseconds to wait for a killed logcat process
    PROCESS_KILL_TIMEOUT_MS = 3000


class MessageConstants:
    """User-facing message constants."""

    ERROR_ADB_NOT_CONFIGURED = 'ADB path not configured'
    ERROR_INVALID_ADB_PATH = 'Invalid ADB path. Make sure it points to the adb executable.'
    ERROR_EMPTY_ADB_PATH = 'Please enter the ADB path'
    ERROR_NO_DEVICE = 'Please select a device first'
    ERROR_REFRESH_WHILE_RUNNING = 'Stop logcat before refreshing the device list'
    ERROR_MESSAGE_COLUMN = 'The message column cannot be hidden'

    INFO_COPIED = 'Copied to clipboard'
    INFO_FRONTEND_FILTERING = (
        'Filters are applied to the displayed logs instead of the adb command. '
        'All logs are received, only matching entries are shown.'
    )


class LoggingConstants:
    """Logging configuration constants."""

    DEFAULT_LOG_LEVEL = 'INFO'

    LOG_FILE_PREFIX = 'quick_logcat_'
    LOG_FILE_SUFFIX = '.log'

    FILE_LOG_FORMAT = '%(asctime)s %(trace_id)s %(name)-20s %(levelname)-8s %(message)s'
    CONSOLE_LOG_FORMAT = '%(levelname)s [%(trace_id)s] %(message)s'
    DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ApplicationConstants:
    """General application constants."""

    APP_NAME = 'Quick Logcat'
    APP_VERSION = '1.0.0'

    CONFIG_FILE_NAME = '.quick_logcat_config.json'
    BACKUP_CONFIG_FILE_NAME = '.quick_logcat_config.backup.json'
