"""Entry point for the Quick Logcat PyQt application."""

import sys

from PyQt6.QtWidgets import QApplication

from config.constants import ApplicationConstants
from ui.logcat_viewer import LogcatWindow
from utils import common

__all__ = [
    "LogcatWindow",
    "main",
]


def main() -> None:
    """Main application entry point."""
    logger = common.get_logger()
    logger.info('Starting %s %s', ApplicationConstants.APP_NAME, ApplicationConstants.APP_VERSION)

    app = QApplication(sys.argv)
    app.setApplicationName(ApplicationConstants.APP_NAME)
    app.setApplicationVersion(ApplicationConstants.APP_VERSION)

    window = LogcatWindow()
    window.show()
    window.initialize_adb()

    sys.exit(app.exec())


if __name__ == "__main__":  # pragma: no cover
    main()
