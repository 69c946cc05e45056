"""
Application settings.

Secrets and deployment switches come from environment variables (a local
.env file is honoured), presentation and tuning values from config/api.yaml.
"""
import os
from functools import lru_cache
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from src.utils.helpers import load_yaml

load_dotenv()

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "../config/api.yaml")


class CorsConfig(BaseModel):
    """CORS middleware configuration."""
    enabled: bool = True
    origins: List[str] = Field(default_factory=lambda: ["*"])
    allow_credentials: bool = False
    allow_methods: List[str] = Field(default_factory=lambda: ["*"])
    allow_headers: List[str] = Field(default_factory=lambda: ["*"])


class LoggingConfig(BaseModel):
    """Logger configuration passed to src.utils.logger.get_logger."""
    level: str = "INFO"
    file: Optional[str] = None
    console: bool = True


class Settings(BaseModel):
    """Immutable runtime configuration shared by the app and its services."""

    title: str = "Kawogo Care API"
    version: str = "1.0.0"
    description: str = "Cassava leaf disease detection and treatment advice"

    roboflow_api: Optional[str] = Field(None, description="Classification endpoint URL")
    gemini_api_key: Optional[str] = Field(None, description="Text-generation API key")
    gemini_model: str = "gemini-1.5-flash-latest"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    port: int = 5000
    environment: str = "production"

    max_upload_bytes: int = 10 * 1024 * 1024
    classification_timeout: float = 30.0
    advice_timeout: float = 15.0

    frontend_dir: Optional[str] = None
    cors: CorsConfig = Field(default_factory=CorsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def roboflow_configured(self) -> bool:
        return bool(self.roboflow_api)

    @property
    def gemini_configured(self) -> bool:
        return bool(self.gemini_api_key)


def _env(name: str) -> Optional[str]:
    """Return an environment variable, treating blank values as unset."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Build settings from the YAML file and the process environment.

    Args:
        config_path: Path to api.yaml (defaults to $KAWOGO_CONFIG, then config/api.yaml)

    Returns:
        Settings instance
    """
    path = config_path or _env("KAWOGO_CONFIG") or DEFAULT_CONFIG_PATH
    values: Dict[str, Any] = {}
    if os.path.exists(path):
        values.update((load_yaml(path) or {}).get("api", {}))

    max_upload_mb = _env("MAX_UPLOAD_MB")
    if max_upload_mb is not None:
        values["max_upload_bytes"] = int(float(max_upload_mb) * 1024 * 1024)
    elif "max_upload_mb" in values:
        values["max_upload_bytes"] = int(float(values["max_upload_mb"]) * 1024 * 1024)
    values.pop("max_upload_mb", None)

    values["roboflow_api"] = _env("ROBOFLOW_API")
    values["gemini_api_key"] = _env("GEMINI_API_KEY")

    if _env("GEMINI_MODEL"):
        values["gemini_model"] = _env("GEMINI_MODEL")
    if _env("PORT"):
        values["port"] = int(_env("PORT"))
    if _env("APP_ENV"):
        values["environment"] = _env("APP_ENV")
    if _env("LOG_LEVEL"):
        logging_values = dict(values.get("logging") or {})
        logging_values["level"] = _env("LOG_LEVEL")
        values["logging"] = logging_values

    return Settings(**values)


@lru_cache()
def get_settings() -> Settings:
    """Load settings once per process."""
    return load_settings()
