from __future__ import annotations
import os
import yaml
from pathlib import Path
from pydantic import BaseModel, Field, ValidationError

from search_select.errors import ConfigError

DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parents[1] / "config" / "settings.yaml"
SETTINGS_ENV_VAR = "SEARCH_SELECT_SETTINGS"

class AppConfig(BaseModel):
    name: str = "coaching-search-select"
    environment: str = "development"

class DBConfig(BaseModel):
    url: str = "sqlite:///data/coaching.db"

class SearchConfig(BaseModel):
    debounce_ms: int = Field(300, ge=0)
    min_query_length: int = Field(2, ge=1)
    result_limit: int = Field(10, ge=1)

class LoggingConfig(BaseModel):
    level: str = "INFO"

class Settings(BaseModel):
    app: AppConfig = AppConfig()
    db: DBConfig = DBConfig()
    search: SearchConfig = SearchConfig()
    logging: LoggingConfig = LoggingConfig()

def _resolve_path(path: str | Path | None) -> Path:
    if path is not None:
        return Path(path)
    env_path = os.getenv(SETTINGS_ENV_VAR)
    if env_path:
        return Path(env_path)
    return DEFAULT_SETTINGS_PATH

def load_settings(path: str | Path | None = None) -> Settings:
    """
    Loads settings from YAML. Missing sections fall back to defaults.
    Explicit path wins over $SEARCH_SELECT_SETTINGS, which wins over config/settings.yaml.
    """
    settings_path = _resolve_path(path)
    try:
        with open(settings_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ConfigError(f"Settings file not found: {settings_path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Settings file is not valid YAML: {settings_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Settings file must contain a mapping: {settings_path}")

    try:
        return Settings(
            app=AppConfig(**(data.get("app") or {})),
            db=DBConfig(**(data.get("db") or {})),
            search=SearchConfig(**(data.get("search") or {})),
            logging=LoggingConfig(**(data.get("logging") or {})),
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {settings_path}: {e}") from e
