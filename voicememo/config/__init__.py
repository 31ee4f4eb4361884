"""YAML configuration loader for voicememo."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    "audio": {
        "sample_rate": None,  # None: use the input device's default rate
        "frame_size": 4096,
        "input_device_index": None,
    },
    "storage": {
        "download_directory": "recordings",
    },
    "server": {
        "host": "127.0.0.1",
        "port": 8000,
        "temp_directory": "tmp-audio",
        "max_upload_bytes": 100 * 1024 * 1024,
    },
    "transcription": {
        "interpreter": "bash",
        "script_path": "scripts/transcribe.sh",
        "timeout_seconds": 300,
    },
    "client": {
        "endpoint": "http://127.0.0.1:8000/api/transcribe",
        "timeout_seconds": 120,
    },
    "logging": {
        "level": "INFO",
        "file_path": "logs/voicememo.log",
        "console_output": True,
    },
}

# Keys holding paths that are resolved relative to the config file
_PATH_KEYS = (
    "storage.download_directory",
    "server.temp_directory",
    "transcription.script_path",
    "logging.file_path",
)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class VoiceMemoConfig:
    """voicememo configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, the built-in defaults
                        are used and relative paths resolve against the working directory.
        """
        if config_path is None:
            self.config_file: Optional[Path] = None
            self.base_dir = Path.cwd()
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            self._resolve_paths(self.config)
            logger.info("No configuration file given, using defaults")
            return

        self.config_file = Path(config_path)
        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        self.base_dir = self.config_file.parent
        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ValueError(f"Failed to load configuration: {e}")

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping")

        config = _deep_merge(DEFAULT_CONFIG, loaded)
        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to the config file location."""
        for key_path in _PATH_KEYS:
            section, key = key_path.split('.')
            value = config.get(section, {}).get(key)
            if value and not os.path.isabs(value):
                config[section][key] = str(self.base_dir / value)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'server.port').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self.config
        for key in key_path.split('.'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation."""
        keys = key_path.split('.')
        config_dict = self.config

        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_download_directory(self) -> str:
        return str(Path(self.get('storage.download_directory', 'recordings')).absolute())

    def get_temp_directory(self) -> str:
        return str(Path(self.get('server.temp_directory', 'tmp-audio')).absolute())

    def get_transcription_command(self) -> list:
        """Get the command that transcribes a file, without the file argument.

        Raises:
            FileNotFoundError: If the configured script does not exist
        """
        script_path = self.get('transcription.script_path')
        if not script_path:
            raise ValueError("transcription.script_path not configured")
        if not Path(script_path).exists():
            raise FileNotFoundError(f"Transcription script not found: {script_path}")

        interpreter = self.get('transcription.interpreter')
        return [interpreter, script_path] if interpreter else [script_path]
