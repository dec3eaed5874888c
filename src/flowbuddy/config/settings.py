"""Configuration management for flowbuddy.

Loads settings from a YAML configuration file with environment variable
overrides for sensitive values (API keys). Supports .env files.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Literal

import yaml
from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings

from flowbuddy.domain.models import ALLOWED_INTERVALS

if TYPE_CHECKING:
    from flowbuddy.state.session import SessionState

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/flowbuddy.yaml")
DEFAULT_BASE_URL = "https://api.helmholtz-blablador.fz-juelich.de/v1"


class ClassifierConfig(BaseModel):
    provider: Literal["http", "openai"] = Field(default="http")
    base_url: str = Field(default=DEFAULT_BASE_URL)
    vision_model: str = Field(default="llama3.2-vision:11b")
    classifier_model: str = Field(default="alias-fast")
    research_model: str = Field(default="alias-large")
    request_timeout: float = Field(default=60.0, gt=0)
    vision_timeout: float = Field(default=120.0, gt=0, le=120.0)
    client_user: str = Field(default="flowbuddy-client")
    seed: int | None = Field(default=42)


class CaptureConfig(BaseModel):
    monitor_index: int = Field(default=1, ge=0, description="mss monitor index, 0 is all monitors")
    max_width: int = Field(default=448, gt=0)
    jpeg_quality: int = Field(default=60, ge=1, le=100)


class MonitoringConfig(BaseModel):
    enabled: bool = Field(default=False)
    interval_seconds: int = Field(default=10)
    background_research: bool = Field(default=False)

    @field_validator("interval_seconds")
    @classmethod
    def _check_interval(cls, value: int) -> int:
        if value not in ALLOWED_INTERVALS:
            raise ValueError(f"interval_seconds must be one of {ALLOWED_INTERVALS}")
        return value


class FocusConfig(BaseModel):
    reposition_on_open: bool = Field(default=True)
    vertical_offset: float = Field(default=120.0)


class StorageConfig(BaseModel):
    path: str | None = Field(default=None, description="JSON file for captured thoughts")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)
    library_level: str = Field(
        default="WARNING", description="Level for httpx/openai request logging"
    )


class Settings(BaseSettings):
    """Root configuration for the flowbuddy system.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "FLOWBUDDY_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # API Keys
    api_key: SecretStr = Field(default=SecretStr(""))

    # Configuration sections
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)
    focus: FocusConfig = Field(default_factory=FocusConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    # Load .env file manually for non-prefixed vars
    _load_dotenv()

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    _apply_env_overrides(yaml_data)

    return Settings(**yaml_data)


def save_preferences(config_path: Path | str, state: SessionState) -> None:
    """Write the user-adjustable monitoring toggles back to the YAML file.

    Other sections of the file are preserved as they are.
    """
    path = Path(config_path)
    data = {}
    if path.exists():
        with open(path) as f:
            data = yaml.safe_load(f) or {}

    data["monitoring"] = {
        "enabled": state.monitoring_enabled,
        "interval_seconds": state.monitoring_interval_seconds,
        "background_research": state.background_research_enabled,
    }

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(data, f, sort_keys=False)
    logger.debug("Saved monitoring preferences to %s", path)


def _load_dotenv() -> None:
    """Load .env file into os.environ if it exists."""
    env_path = Path(".env")
    if not env_path.exists():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip().strip("\"'")
                if not os.environ.get(key):
                    os.environ[key] = value


def _apply_env_overrides(yaml_data: dict) -> None:
    """Apply environment variable overrides for non-prefixed vars."""
    api_key = os.environ.get("BLABLADOR_API_KEY", "")
    base_url = os.environ.get("BLABLADOR_BASE_URL", "")

    if api_key:
        yaml_data["api_key"] = api_key

    if "classifier" not in yaml_data:
        yaml_data["classifier"] = {}

    if base_url:
        yaml_data["classifier"]["base_url"] = base_url
