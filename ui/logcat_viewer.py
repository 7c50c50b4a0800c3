"""
Logcat Viewer Window
Streams adb logcat through the parsing pipeline and renders the bounded view
with device selection, tag filters and keyword search.
"""

from typing import Dict, List, Optional

from PyQt6.QtWidgets import (
    QWidget, QDialog, QVBoxLayout, QHBoxLayout, QPushButton, QLabel, QLineEdit,
    QComboBox, QCheckBox, QListWidget, QTableView, QAbstractItemView,
    QHeaderView, QToolButton, QMenu, QApplication,
)
from PyQt6.QtCore import QModelIndex
from PyQt6.QtGui import QCloseEvent, QAction

from config.config_manager import ConfigManager
from config.constants import ApplicationConstants, MessageConstants
from ui.logcat.filter_models import DisplayFilterState, TagFilter
from ui.logcat.log_record import LogLevel, LogRecord
from ui.logcat.log_table_model import LOG_COLUMNS, COLUMN_FIELDS, LogFilterProxyModel, LogTableModel
from ui.logcat.logcat_source import LogcatSource
from ui.logcat.pipeline import LogcatPipeline
from utils import adb_tools
from utils import common

logger = common.get_logger('logcat_viewer')


class AdbPathDialog(QDialog):
    """Dialog asking for the adb executable path and validating it."""

    def __init__(self, config_manager: ConfigManager, current_path: str = '', parent=None):
        super().__init__(parent)
        self._config_manager = config_manager
        self.adb_path = current_path
        self.init_ui()

    def init_ui(self):
        """Initialize the dialog UI."""
        self.setWindowTitle('Configure ADB Path')
        self.setModal(True)

        layout = QVBoxLayout(self)
        layout.setSpacing(10)

        self.path_input = QLineEdit(self.adb_path)
        self.path_input.setPlaceholderText('Full path of the adb executable')
        layout.addWidget(self.path_input)

        self.error_label = QLabel('')
        self.error_label.setStyleSheet('color: #F44336;')
        self.error_label.setWordWrap(True)
        self.error_label.hide()
        layout.addWidget(self.error_label)

        tips = QLabel(
            '1. If adb is on PATH it is detected automatically\n'
            '2. Windows: C:\\Users\\<user>\\AppData\\Local\\Android\\Sdk\\platform-tools\\adb.exe\n'
            '3. macOS/Linux: ~/Library/Android/sdk/platform-tools/adb'
        )
        tips.setStyleSheet('color: #6c757d; font-size: 11px;')
        layout.addWidget(tips)

        button_layout = QHBoxLayout()
        cancel_btn = QPushButton('Cancel')
        cancel_btn.clicked.connect(self.reject)
        save_btn = QPushButton('Save')
        save_btn.clicked.connect(self.save_path)
        button_layout.addStretch()
        button_layout.addWidget(cancel_btn)
        button_layout.addWidget(save_btn)
        layout.addLayout(button_layout)

    def _show_error(self, message: str) -> None:
        self.error_label.setText(message)
        self.error_label.show()

    def save_path(self) -> bool:
        """Validate and persist the entered path; accept the dialog on success."""
        path = self.path_input.text().strip()
        if not path:
            self._show_error(MessageConstants.ERROR_EMPTY_ADB_PATH)
            return False

        if not adb_tools.is_valid_adb_path(path):
            self._show_error(MessageConstants.ERROR_INVALID_ADB_PATH)
            return False

        self._config_manager.update_adb_settings(adb_path=path)
        self.adb_path = path
        self.accept()
        return True


class LogcatWindow(QWidget):
    """Logcat viewer window with real-time streaming and filtering capabilities."""

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        parent=None,
        *,
        threaded: bool = True,
    ):
        super().__init__(parent)
        self._config_manager = config_manager or ConfigManager()
        config = self._config_manager.load_config()

        self.adb_path = config.adb.adb_path
        self.source: Optional[LogcatSource] = None

        self.pipeline = LogcatPipeline(config.pipeline, parent=self, threaded=threaded)
        self.log_model = LogTableModel(self)
        self.log_proxy = LogFilterProxyModel(self)
        self.log_proxy.setSourceModel(self.log_model)

        viewer = config.viewer
        self.filter_state = DisplayFilterState(
            tag_filters=[TagFilter.from_dict(entry) for entry in viewer.tag_filters],
            frontend_filtering=viewer.frontend_filtering,
        )
        self.log_proxy.set_filter_state(self.filter_state)
        self.column_visibility: Dict[str, bool] = dict(viewer.column_visibility)

        self.pipeline.buffer.merged.connect(self._on_view_merged)
        self.pipeline.buffer.cleared.connect(self._on_view_cleared)

        self.init_ui()
        self._apply_column_visibility()
        self.update_active_filters_list()
        self._update_adb_warning()

    @property
    def is_running(self) -> bool:
        return self.source is not None and self.source.is_running

    # ──────────────────────────────────────────────────────────────────────
    # UI construction
    # ──────────────────────────────────────────────────────────────────────

    def init_ui(self):
        """Initialize the logcat window UI."""
        self.setWindowTitle(ApplicationConstants.APP_NAME)
        self.setGeometry(100, 100, 1200, 800)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(6)

        layout.addLayout(self.create_control_panel())

        self.adb_warning_label = QLabel('Configure the ADB path with the "Configure ADB" button.')
        self.adb_warning_label.setStyleSheet('color: #FF9800;')
        layout.addWidget(self.adb_warning_label)

        self.error_label = QLabel('')
        self.error_label.setStyleSheet('color: #F44336;')
        self.error_label.setWordWrap(True)
        self.error_label.hide()
        layout.addWidget(self.error_label)

        layout.addLayout(self.create_filter_panel())
        layout.addLayout(self.create_search_panel())

        self.log_table = QTableView()
        self.log_table.setModel(self.log_proxy)
        self.log_table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.log_table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.log_table.setWordWrap(False)
        self.log_table.verticalHeader().hide()
        self.log_table.horizontalHeader().setSectionResizeMode(
            COLUMN_FIELDS.index('message'), QHeaderView.ResizeMode.Stretch
        )
        self.log_table.clicked.connect(self.copy_record_at)
        layout.addWidget(self.log_table)

        self.status_label = QLabel('Ready')
        layout.addWidget(self.status_label)

    def create_control_panel(self) -> QHBoxLayout:
        """Create the device selector and start/stop/clear buttons."""
        layout = QHBoxLayout()

        self.device_combo = QComboBox()
        self.device_combo.setMinimumWidth(200)
        self.device_combo.setPlaceholderText('Select device')
        layout.addWidget(self.device_combo)

        refresh_btn = QPushButton('Refresh Devices')
        refresh_btn.clicked.connect(self.refresh_devices)
        layout.addWidget(refresh_btn)

        self.start_btn = QPushButton('Start')
        self.start_btn.clicked.connect(self.toggle_logcat)
        layout.addWidget(self.start_btn)

        clear_btn = QPushButton('Clear Logs')
        clear_btn.clicked.connect(self.clear_logs)
        layout.addWidget(clear_btn)

        config_btn = QPushButton('Configure ADB')
        config_btn.clicked.connect(self.open_adb_config)
        layout.addWidget(config_btn)

        layout.addStretch()
        return layout

    def create_filter_panel(self) -> QVBoxLayout:
        """Create the tag filter inputs and active filter list."""
        layout = QVBoxLayout()

        input_layout = QHBoxLayout()
        self.tag_input = QLineEdit()
        self.tag_input.setPlaceholderText('Tag')
        self.tag_input.returnPressed.connect(self.add_filter)
        input_layout.addWidget(self.tag_input)

        self.level_combo = QComboBox()
        for level in LogLevel:
            self.level_combo.addItem(level.label, level.code)
        input_layout.addWidget(self.level_combo)

        add_btn = QPushButton('Add Filter')
        add_btn.clicked.connect(self.add_filter)
        input_layout.addWidget(add_btn)

        self.frontend_checkbox = QCheckBox('Frontend filtering')
        self.frontend_checkbox.setChecked(self.filter_state.frontend_filtering)
        self.frontend_checkbox.setToolTip(MessageConstants.INFO_FRONTEND_FILTERING)
        self.frontend_checkbox.toggled.connect(self.toggle_filter_mode)
        input_layout.addWidget(self.frontend_checkbox)
        input_layout.addStretch()
        layout.addLayout(input_layout)

        list_layout = QHBoxLayout()
        self.filters_list = QListWidget()
        self.filters_list.setMaximumHeight(60)
        self.filters_list.setFlow(QListWidget.Flow.LeftToRight)
        list_layout.addWidget(self.filters_list)

        remove_btn = QPushButton('Remove Filter')
        remove_btn.clicked.connect(self.remove_selected_filter)
        list_layout.addWidget(remove_btn)
        layout.addLayout(list_layout)

        return layout

    def create_search_panel(self) -> QHBoxLayout:
        """Create the keyword search box and column visibility menu."""
        layout = QHBoxLayout()

        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText('Search logs...')
        self.search_input.setMaximumWidth(300)
        self.search_input.textChanged.connect(self.apply_keyword)
        layout.addWidget(self.search_input)

        self.columns_button = QToolButton()
        self.columns_button.setText('Columns')
        self.columns_button.setPopupMode(QToolButton.ToolButtonPopupMode.InstantPopup)
        self.columns_menu = QMenu(self.columns_button)
        self.column_actions: Dict[str, QAction] = {}
        for field_name, header in LOG_COLUMNS:
            action = QAction(header, self.columns_menu)
            action.setCheckable(True)
            action.setChecked(self.column_visibility.get(field_name, True))
            action.setEnabled(field_name != 'message')
            action.toggled.connect(lambda checked, name=field_name: self.set_column_visible(name, checked))
            self.columns_menu.addAction(action)
            self.column_actions[field_name] = action
        self.columns_button.setMenu(self.columns_menu)
        layout.addWidget(self.columns_button)

        layout.addStretch()
        return layout

    # ──────────────────────────────────────────────────────────────────────
    # ADB configuration and devices
    # ──────────────────────────────────────────────────────────────────────

    def initialize_adb(self) -> None:
        """Resolve the adb path, prompting for it when none can be found."""
        self.adb_path = adb_tools.resolve_adb_path(self._config_manager)
        self._update_adb_warning()
        if self.adb_path:
            self.fetch_devices()
        else:
            self.open_adb_config()

    def open_adb_config(self) -> None:
        """Open the adb path dialog and refresh devices after a successful save."""
        dialog = AdbPathDialog(self._config_manager, self.adb_path, self)
        if dialog.exec() == QDialog.DialogCode.Accepted:
            self.adb_path = dialog.adb_path
            self._update_adb_warning()
            self.fetch_devices()

    def _update_adb_warning(self) -> None:
        self.adb_warning_label.setVisible(not self.adb_path)
        self.start_btn.setEnabled(bool(self.adb_path))

    def fetch_devices(self) -> List[str]:
        """Reload the device list, selecting the first device when none is selected."""
        try:
            devices = adb_tools.get_devices(self.adb_path)
        except adb_tools.AdbPathNotConfiguredError:
            self.open_adb_config()
            return []

        previous = self.device_combo.currentText()
        self.device_combo.clear()
        self.device_combo.addItems(devices)
        if previous in devices:
            self.device_combo.setCurrentText(previous)
        elif devices:
            self.device_combo.setCurrentIndex(0)
        return devices

    def refresh_devices(self) -> None:
        """Refresh devices unless a stream is active."""
        if self.is_running:
            self.show_log_error(MessageConstants.ERROR_REFRESH_WHILE_RUNNING)
            return
        if self.adb_path:
            self.fetch_devices()

    def selected_device(self) -> Optional[str]:
        serial = self.device_combo.currentText().strip()
        return serial or None

    # ──────────────────────────────────────────────────────────────────────
    # Streaming
    # ──────────────────────────────────────────────────────────────────────

    def toggle_logcat(self) -> None:
        if self.is_running:
            self.stop_logcat()
        else:
            self.start_logcat()

    def start_logcat(self) -> None:
        """Start streaming logcat for the selected device."""
        if self.is_running:
            return

        serial = self.selected_device()
        if not serial:
            self.show_log_error(MessageConstants.ERROR_NO_DEVICE)
            return
        if not self.adb_path:
            self.show_log_error(MessageConstants.ERROR_ADB_NOT_CONFIGURED)
            self.open_adb_config()
            return

        self.clear_log_error()
        with common.trace_id_scope(common.generate_trace_id()):
            source = LogcatSource(self.adb_path, self)
            source.data_received.connect(self.pipeline.ingest)
            source.error_occurred.connect(self.show_log_error)
            source.closed.connect(self._on_source_closed)
            self.source = source
            source.start(serial, self.filter_state.server_filters())

        self.start_btn.setText('Stop')
        self._update_status_counts()

    def stop_logcat(self) -> None:
        """Stop the logcat stream; records already received stay visible."""
        source = self.source
        if source is None:
            return

        self.source = None
        serial = source.serial
        source.stop()
        source.deleteLater()
        if serial:
            adb_tools.force_stop_logcat(self.adb_path, serial)

        self.start_btn.setText('Start')
        self._update_status_counts()

    def restart_logcat(self) -> None:
        if self.is_running:
            self.stop_logcat()
            self.start_logcat()

    def _on_source_closed(self, exit_code: int) -> None:
        source = self.source
        self.source = None
        if source is not None:
            source.deleteLater()
        self.pipeline.flush()
        self.start_btn.setText('Start')
        if exit_code != 0:
            self.show_log_error(f'Logcat exited abnormally, exit code: {exit_code}')
        self._update_status_counts()

    def clear_logs(self) -> None:
        """Clear the view and the device buffer, restarting the stream if it was running."""
        self.pipeline.clear()

        serial = self.selected_device()
        if not serial:
            return

        was_running = self.is_running
        self.stop_logcat()
        try:
            adb_tools.clear_device_logcat(self.adb_path, serial)
        except adb_tools.AdbError as exc:
            logger.error('Failed to clear device logcat: %s', exc)
            self.show_log_error(str(exc))
        # Records that arrived while stopping belong to the old session.
        self.pipeline.clear()
        if was_running:
            self.start_logcat()

    # ──────────────────────────────────────────────────────────────────────
    # View updates
    # ──────────────────────────────────────────────────────────────────────

    def _on_view_merged(self, records: List[LogRecord], evicted: int) -> None:
        scroll_bar = self.log_table.verticalScrollBar()
        at_bottom = scroll_bar is None or scroll_bar.value() >= scroll_bar.maximum()
        self.log_model.on_merged(records, evicted)
        if at_bottom:
            self.log_table.scrollToBottom()
        self._update_status_counts()

    def _on_view_cleared(self) -> None:
        self.log_model.clear()
        self._update_status_counts()

    def _update_status_counts(self) -> None:
        total = self.log_model.rowCount()
        visible = self.log_proxy.rowCount()
        state = 'Running' if self.is_running else 'Stopped'
        if visible != total:
            self.status_label.setText(f'{state} - showing {visible}/{total} logs')
        else:
            self.status_label.setText(f'{state} - {total} logs')

    def show_log_error(self, message: str) -> None:
        self.error_label.setText(message.strip())
        self.error_label.show()

    def clear_log_error(self) -> None:
        self.error_label.clear()
        self.error_label.hide()

    # ──────────────────────────────────────────────────────────────────────
    # Filters and columns
    # ──────────────────────────────────────────────────────────────────────

    def add_filter(self) -> None:
        """Add a tag filter from the inputs."""
        tag_filter = TagFilter(self.tag_input.text(), self.level_combo.currentData() or LogLevel.VERBOSE.code)
        if not self.filter_state.add_filter(tag_filter):
            return
        self.tag_input.clear()
        self._on_filters_changed()

    def remove_filter(self, index: int) -> None:
        if self.filter_state.remove_filter_at(index) is None:
            return
        self._on_filters_changed()

    def remove_selected_filter(self) -> None:
        self.remove_filter(self.filters_list.currentRow())

    def _on_filters_changed(self) -> None:
        self.update_active_filters_list()
        self._persist_viewer_settings()
        self.log_proxy.refresh()
        self._update_status_counts()
        if not self.filter_state.frontend_filtering:
            self.restart_logcat()

    def update_active_filters_list(self) -> None:
        self.filters_list.clear()
        for tag_filter in self.filter_state.tag_filters:
            self.filters_list.addItem(str(tag_filter))

    def toggle_filter_mode(self, checked: bool) -> None:
        """Switch between adb-side and display-side tag filtering."""
        checked = bool(checked)
        if checked == self.filter_state.frontend_filtering:
            return
        self.filter_state.frontend_filtering = checked
        self._persist_viewer_settings()
        self.log_proxy.refresh()
        self._update_status_counts()
        self.restart_logcat()

    def apply_keyword(self, keyword: str) -> None:
        if self.filter_state.set_keyword(keyword):
            self.log_proxy.refresh()
            self._update_status_counts()

    def set_column_visible(self, field_name: str, visible: bool) -> None:
        if field_name == 'message' and not visible:
            self.show_log_error(MessageConstants.ERROR_MESSAGE_COLUMN)
            return
        self.column_visibility[field_name] = bool(visible)
        self._apply_column_visibility()
        self._persist_viewer_settings()

    def _apply_column_visibility(self) -> None:
        for column, field_name in enumerate(COLUMN_FIELDS):
            visible = field_name == 'message' or self.column_visibility.get(field_name, True)
            self.log_table.setColumnHidden(column, not visible)

    def _persist_viewer_settings(self) -> None:
        try:
            self._config_manager.update_viewer_settings(
                frontend_filtering=self.filter_state.frontend_filtering,
                column_visibility=dict(self.column_visibility),
                tag_filters=[tag_filter.to_dict() for tag_filter in self.filter_state.tag_filters],
            )
        except OSError as exc:
            logger.warning('Failed to persist viewer settings: %s', exc)

    # ──────────────────────────────────────────────────────────────────────
    # Clipboard and lifecycle
    # ──────────────────────────────────────────────────────────────────────

    def copy_record_at(self, index: QModelIndex) -> Optional[str]:
        """Copy the clicked record as a log line."""
        if not index.isValid():
            return None
        record = self.log_model.get_record(self.log_proxy.mapToSource(index).row())
        if record is None:
            return None

        text = record.to_line()
        clipboard = QApplication.clipboard()
        if clipboard is not None:
            clipboard.setText(text)
        self.status_label.setText(MessageConstants.INFO_COPIED)
        return text

    def closeEvent(self, event: QCloseEvent) -> None:  # type: ignore[override]
        """Stop the stream and the parser thread."""
        self.stop_logcat()
        self.pipeline.shutdown()
        super().closeEvent(event)
