"""
Configuration management using Pydantic Settings.

Sources, lowest priority first:
1. Field defaults
2. Environment variables (TIMELEDGER_*) and an optional .env file
3. settings.yaml holding the user preferences, looked up in ./config first
   and then in the user's config directory
"""

from pathlib import Path
from typing import Optional
import logging
import yaml

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from timeledger.domain.models import UserPreferences
from timeledger.infra.repository import DEFAULT_STORAGE_KEY
from timeledger.utils import platform_dir

logger = logging.getLogger(__name__)

PREFERENCES_FILE = "settings.yaml"
WORKSPACE_CONFIG_DIR = Path("config")


def load_preferences(path: Path) -> Optional[UserPreferences]:
    """Preferences from a YAML file, or None if it is missing or empty"""
    if not path.exists():
        return None
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    if not data:
        return None
    logger.debug(f"Loaded preferences from {path}")
    return UserPreferences(**data)


class Settings(BaseSettings):
    """
    Application settings: where things live, plus the user preferences.
    """
    model_config = SettingsConfigDict(
        env_prefix='TIMELEDGER_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    app_name: str = "TimeLedger"
    config_dir: Optional[Path] = None
    data_dir: Optional[Path] = None

    database_url: Optional[str] = None
    storage_key: str = DEFAULT_STORAGE_KEY

    preferences: UserPreferences = Field(default_factory=UserPreferences)

    @model_validator(mode='after')
    def prepare(self) -> 'Settings':
        self.config_dir = self.config_dir or platform_dir('config', self.app_name)
        self.data_dir = self.data_dir or platform_dir('data', self.app_name)
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        loaded = load_preferences(self.preferences_file)
        if loaded is not None:
            self.preferences = loaded
        return self

    @property
    def preferences_file(self) -> Path:
        """The workspace file if present, else the one in the user config directory"""
        workspace = WORKSPACE_CONFIG_DIR / PREFERENCES_FILE
        if workspace.exists():
            return workspace
        return self.config_dir / PREFERENCES_FILE

    def save_preferences(self) -> Path:
        """Write the current preferences to the user config directory"""
        target = self.config_dir / PREFERENCES_FILE
        with open(target, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.preferences.model_dump(mode='json'), f,
                           default_flow_style=False, allow_unicode=True)
        logger.info(f"Saved preferences to {target}")
        return target

    def get_db_url(self) -> str:
        """Explicit database URL, or a SQLite file in the data directory"""
        return self.database_url or f"sqlite+aiosqlite:///{self.data_dir / 'timeledger.db'}"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Process-wide settings, created on first use"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Re-read environment and YAML"""
    global _settings
    _settings = Settings()
    return _settings
