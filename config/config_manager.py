"""Configuration management module for application settings."""

import json
import shutil
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Dict, Any, List, Optional

from config.constants import ApplicationConstants, LogcatConstants
from utils import common

logger = common.get_logger('config_manager')


def _default_column_visibility() -> Dict[str, bool]:
    return {
        'timestamp': True,
        'pid': False,
        'tid': False,
        'level': True,
        'tag': True,
        'message': True,
    }


@dataclass
class AdbSettings:
    """ADB executable settings."""
    adb_path: str = ''


@dataclass
class PipelineSettings:
    """Streaming pipeline tuning settings."""
    batch_size: int = LogcatConstants.BATCH_SIZE
    batch_interval_ms: int = LogcatConstants.BATCH_INTERVAL_MS
    update_interval_ms: int = LogcatConstants.LOG_UPDATE_INTERVAL_MS
    max_logs: int = LogcatConstants.MAX_LOGS


@dataclass
class ViewerSettings:
    """Viewer window preferences."""
    frontend_filtering: bool = False
    column_visibility: Dict[str, bool] = field(default_factory=_default_column_visibility)
    tag_filters: List[Dict[str, str]] = field(default_factory=list)


@dataclass
class AppConfig:
    """Main application configuration."""
    adb: AdbSettings
    pipeline: PipelineSettings
    viewer: ViewerSettings
    version: str = ApplicationConstants.APP_VERSION


class ConfigManager:
    """Manages application configuration persistence and validation."""

    DEFAULT_CONFIG_PATH = f'~/{ApplicationConstants.CONFIG_FILE_NAME}'
    BACKUP_CONFIG_PATH = f'~/{ApplicationConstants.BACKUP_CONFIG_FILE_NAME}'

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path or self.DEFAULT_CONFIG_PATH).expanduser()
        if config_path:
            self.backup_path = self.config_path.with_name(f'{self.config_path.stem}.backup.json')
        else:
            self.backup_path = Path(self.BACKUP_CONFIG_PATH).expanduser()
        self._config: Optional[AppConfig] = None
        self._ensure_config_dir()

    def _ensure_config_dir(self):
        """Ensure configuration directory exists."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

    def _create_default_config(self) -> AppConfig:
        """Create default configuration."""
        return AppConfig(
            adb=AdbSettings(),
            pipeline=PipelineSettings(),
            viewer=ViewerSettings(),
        )

    def _validate_config(self, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and clean configuration dictionary."""
        normalized: Dict[str, Any] = dict(config_dict)

        # Legacy flat layout stored only {"adbPath": "..."}
        legacy_adb_path = normalized.pop('adbPath', None)
        if isinstance(legacy_adb_path, str):
            normalized.setdefault('adb', {})['adb_path'] = legacy_adb_path

        default_config = asdict(self._create_default_config())

        def merge_dict(default: Dict, user: Dict) -> Dict:
            result = default.copy()
            for key, value in user.items():
                if key in result:
                    if isinstance(value, dict) and isinstance(result[key], dict):
                        result[key] = merge_dict(result[key], value)
                    else:
                        result[key] = value
            return result

        validated = merge_dict(default_config, normalized)

        for section in ('adb', 'pipeline', 'viewer'):
            if not isinstance(validated.get(section), dict):
                validated[section] = dict(default_config[section])
                logger.warning('Config section %s invalid, reset to defaults', section)

        adb_settings = validated['adb']
        if not isinstance(adb_settings.get('adb_path'), str):
            adb_settings['adb_path'] = ''
            logger.warning('ADB path invalid, reset to empty')

        pipeline = validated['pipeline']
        defaults = default_config['pipeline']
        minimums = {
            'batch_size': LogcatConstants.MIN_BATCH_SIZE,
            'batch_interval_ms': LogcatConstants.MIN_INTERVAL_MS,
            'update_interval_ms': LogcatConstants.MIN_INTERVAL_MS,
            'max_logs': LogcatConstants.MIN_MAX_LOGS,
        }
        for key, minimum in minimums.items():
            value = pipeline.get(key)
            if not isinstance(value, int) or isinstance(value, bool) or value < minimum:
                pipeline[key] = defaults[key]
                logger.warning('Pipeline %s invalid, reset to %s', key, defaults[key])

        viewer = validated['viewer']
        if not isinstance(viewer.get('frontend_filtering'), bool):
            viewer['frontend_filtering'] = False
            logger.warning('Frontend filtering flag invalid, reset to False')

        columns = _default_column_visibility()
        stored_columns = viewer.get('column_visibility')
        if isinstance(stored_columns, dict):
            for key, value in stored_columns.items():
                if key in columns and isinstance(value, bool):
                    columns[key] = value
        columns['message'] = True
        viewer['column_visibility'] = columns

        tag_filters = []
        stored_filters = viewer.get('tag_filters')
        for entry in stored_filters if isinstance(stored_filters, list) else []:
            if not (isinstance(entry, dict) and isinstance(entry.get('tag'), str) and entry['tag'].strip()):
                continue
            level = str(entry.get('level') or 'V').upper()
            if level not in LogcatConstants.LEVEL_CODES:
                logger.warning('Dropping tag filter %s with unknown level %s', entry['tag'], level)
                continue
            tag_filters.append({'tag': entry['tag'].strip(), 'level': level})
        viewer['tag_filters'] = tag_filters

        return validated

    def _build_config(self, validated_dict: Dict[str, Any]) -> AppConfig:
        return AppConfig(
            adb=AdbSettings(**validated_dict['adb']),
            pipeline=PipelineSettings(**validated_dict['pipeline']),
            viewer=ViewerSettings(**validated_dict['viewer']),
            version=validated_dict.get('version', ApplicationConstants.APP_VERSION),
        )

    def _read_config_file(self, path: Path) -> AppConfig:
        with open(path, 'r', encoding='utf-8') as f:
            config_dict = json.load(f)
        if not isinstance(config_dict, dict):
            raise ValueError(f'Configuration root must be an object: {path}')
        return self._build_config(self._validate_config(config_dict))

    def load_config(self) -> AppConfig:
        """Load configuration from file."""
        if self._config is not None:
            return self._config

        try:
            if self.config_path.exists():
                self._config = self._read_config_file(self.config_path)
                logger.info('Configuration loaded from %s', self.config_path)
            else:
                self._config = self._create_default_config()
                logger.info('Created default configuration')

        except (OSError, ValueError, TypeError) as e:
            logger.error('Failed to load config: %s', e)
            if self.backup_path.exists():
                try:
                    logger.info('Attempting to load from backup')
                    self._config = self._read_config_file(self.backup_path)
                    logger.info('Configuration loaded from backup')
                except (OSError, ValueError, TypeError) as backup_error:
                    logger.error('Backup config also failed: %s', backup_error)
                    self._config = self._create_default_config()
            else:
                self._config = self._create_default_config()

        return self._config

    def save_config(self, config: Optional[AppConfig] = None):
        """Save configuration to file."""
        if config is None:
            config = self._config

        if config is None:
            logger.warning('No configuration to save')
            return

        try:
            if self.config_path.exists():
                try:
                    shutil.copy2(self.config_path, self.backup_path)
                except OSError as e:
                    logger.warning('Failed to create config backup: %s', e)

            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(asdict(config), f, indent=4, ensure_ascii=False)

            self._config = config
            logger.info('Configuration saved to %s', self.config_path)

        except OSError as e:
            logger.error('Failed to save config: %s', e)
            raise

    def get_adb_settings(self) -> AdbSettings:
        """Get ADB settings."""
        return self.load_config().adb

    def get_pipeline_settings(self) -> PipelineSettings:
        """Get streaming pipeline settings."""
        return self.load_config().pipeline

    def get_viewer_settings(self) -> ViewerSettings:
        """Get viewer preferences."""
        return self.load_config().viewer

    def _update_section(self, section: str, **kwargs):
        config = self.load_config()
        target = getattr(config, section)
        for key, value in kwargs.items():
            if hasattr(target, key):
                setattr(target, key, value)
            else:
                logger.debug('Ignoring unknown %s setting: %s', section, key)
        self.save_config(config)

    def update_adb_settings(self, **kwargs):
        """Update ADB settings."""
        self._update_section('adb', **kwargs)

    def update_pipeline_settings(self, **kwargs):
        """Update streaming pipeline settings."""
        self._update_section('pipeline', **kwargs)

    def update_viewer_settings(self, **kwargs):
        """Update viewer preferences."""
        self._update_section('viewer', **kwargs)

    def reset_to_defaults(self):
        """Reset configuration to defaults."""
        self._config = self._create_default_config()
        self.save_config()
        logger.info('Configuration reset to defaults')
