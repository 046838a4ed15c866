#!/usr/bin/env python3
"""
crl Settings Management
Loads and validates settings from settings.yml using Pydantic
"""

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator

from crl.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "crl" / "settings.yml"
DEFAULT_DB_PATH = Path.home() / ".local" / "share" / "crl" / "history.db"
DEFAULT_STATE_DIR = Path.home() / ".local" / "state" / "crl"

# Hard ceiling for list queries; not configurable
MAX_LIST_LIMIT = 50


def _expand(value, info: ValidationInfo) -> Optional[Path]:
    """Expand ~ and anchor relative paths to the settings file's directory.

    Settings built without a file anchor them to the current directory.
    The result is always absolute.
    """
    if value is None:
        return None
    path = Path(value).expanduser()
    if not path.is_absolute():
        base_dir = (info.context or {}).get("base_dir") or Path.cwd()
        path = Path(base_dir) / path
    return path


class StoreSettings(BaseModel):
    """History database settings"""
    db_path: Path = Field(
        default=DEFAULT_DB_PATH,
        description="SQLite file holding the clipboard history"
    )
    busy_timeout_ms: int = Field(
        default=5000,
        ge=0,
        le=60000,
        description="How long a call waits on a locked database (0-60000)"
    )

    @field_validator('db_path', mode='before')
    @classmethod
    def expand_db_path(cls, v, info: ValidationInfo):
        return _expand(v, info)


class DaemonSettings(BaseModel):
    """Background process settings"""
    poll_interval_ms: int = Field(
        default=500,
        ge=50,
        le=60000,
        description="Clipboard polling interval in milliseconds (50-60000)"
    )
    ignore_empty: bool = Field(
        default=True,
        description="Do not record an empty clipboard"
    )
    working_directory: Path = Field(default=Path("/tmp"))
    stdout_log: Path = Field(default=DEFAULT_STATE_DIR / "daemon.out")
    stderr_log: Path = Field(default=DEFAULT_STATE_DIR / "daemon.err")
    user: Optional[str] = Field(
        default=None,
        description="Drop to this user when detaching (requires privileges)"
    )
    group: Optional[str] = Field(
        default=None,
        description="Drop to this group when detaching (requires privileges)"
    )
    startup_grace_ms: int = Field(
        default=300,
        ge=0,
        le=10000,
        description="How long start() waits for the daemon to pass its readiness check"
    )

    @field_validator('working_directory', 'stdout_log', 'stderr_log', mode='before')
    @classmethod
    def expand_paths(cls, v, info: ValidationInfo):
        return _expand(v, info)


class CliSettings(BaseModel):
    """Command line settings"""
    default_list_limit: int = Field(
        default=25,
        ge=0,
        le=MAX_LIST_LIMIT,
        description="Entries shown by 'crl list' without an argument (0-50)"
    )


class LoggingSettings(BaseModel):
    level: str = Field(default="WARNING")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Ensure the level is one logging understands"""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown logging level: {v}")
        return level


class Settings(BaseModel):
    """Main settings model"""
    store: StoreSettings = Field(default_factory=StoreSettings)
    daemon: DaemonSettings = Field(default_factory=DaemonSettings)
    cli: CliSettings = Field(default_factory=CliSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


class SettingsManager:
    """Manages loading and accessing settings"""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize settings manager

        Args:
            config_path: Path to settings.yml file. Defaults to
                ~/.config/crl/settings.yml, which may be absent. An explicitly
                given file must exist and be valid.
        """
        self.explicit = config_path is not None
        self.config_path = Path(config_path).expanduser().resolve() if config_path else DEFAULT_CONFIG_PATH
        self.settings = self._load_settings()

    def _load_settings(self) -> Settings:
        """Load and validate settings from YAML file"""
        if not self.config_path.exists():
            if self.explicit:
                raise ConfigError(f"settings file not found: {self.config_path}")
            logger.debug(f"Settings file not found at {self.config_path}, using defaults")
            return Settings()

        try:
            with open(self.config_path, 'r') as f:
                config_data = yaml.safe_load(f)

            if config_data is None:
                logger.info("Settings file is empty, using defaults")
                return Settings()

            if not isinstance(config_data, dict):
                raise TypeError("settings file must contain a mapping")

            settings = Settings.model_validate(
                config_data, context={"base_dir": self.config_path.parent}
            )
            logger.debug(f"Loaded settings from {self.config_path}")
            return settings

        except (OSError, yaml.YAMLError, ValidationError, TypeError) as e:
            if self.explicit:
                raise ConfigError(f"invalid settings file {self.config_path}: {e}") from e
            logger.error(f"Error loading settings from {self.config_path}: {e}")
            logger.error("Using default settings")
            return Settings()

    @property
    def db_path(self) -> Path:
        return self.settings.store.db_path

    @property
    def busy_timeout_ms(self) -> int:
        return self.settings.store.busy_timeout_ms

    @property
    def poll_interval(self) -> float:
        """Polling interval in seconds"""
        return self.settings.daemon.poll_interval_ms / 1000.0

    @property
    def daemon(self) -> DaemonSettings:
        return self.settings.daemon

    @property
    def default_list_limit(self) -> int:
        return self.settings.cli.default_list_limit

    @property
    def log_level(self) -> str:
        return self.settings.logging.level
