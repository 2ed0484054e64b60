"""Application configuration loader with Pydantic validation."""
import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONFIG_NAME = "app"


class WeatherSettings(BaseModel):
    """OpenWeather client settings."""
    api_key: Optional[str] = None
    base_url: str = "https://api.openweathermap.org"
    timeout_seconds: float = 15.0
    units: Literal["metric", "imperial"] = "metric"
    forecast_days: int = 5


class RegistrationSettings(BaseModel):
    """DynamoDB registrations table settings."""
    table_name: str = "registrations"
    list_limit: int = 10
    max_scan_pages: int = 100


class IdentitySettings(BaseModel):
    """Signed identity cookie settings."""
    cookie_name: str = "email"
    secret: Optional[str] = None
    max_age_seconds: int = 30 * 24 * 60 * 60


class AppConfig(BaseModel):
    """Complete application configuration."""
    default_destination: str = "London"
    weather: WeatherSettings = Field(default_factory=WeatherSettings)
    registrations: RegistrationSettings = Field(default_factory=RegistrationSettings)
    identity: IdentitySettings = Field(default_factory=IdentitySettings)


# (environment variable, section, field)
ENV_OVERRIDES = [
    ("OPENWEATHER_API_KEY", "weather", "api_key"),
    ("WEATHER_TIMEOUT_SECONDS", "weather", "timeout_seconds"),
    ("IDENTITY_COOKIE_SECRET", "identity", "secret"),
    ("REGISTRATIONS_TABLE", "registrations", "table_name"),
    ("DEFAULT_DESTINATION", None, "default_destination"),
]


def get_config_path(config_name: str = DEFAULT_CONFIG_NAME) -> Path:
    """Get the full path to an application config file.

    Args:
        config_name: Name like 'app' or a path to a YAML file

    Returns:
        Full path to the config file
    """
    if config_name.endswith((".yaml", ".yml")) and os.sep in config_name:
        return Path(config_name)

    project_root = Path(__file__).parent.parent.parent
    config_dir = project_root / "config"

    if not config_name.endswith((".yaml", ".yml")):
        config_name = f"{config_name}.yaml"

    return config_dir / config_name


def load_yaml_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Read raw settings from a YAML file."""
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw_config = yaml.safe_load(f)

    return raw_config or {}


def apply_env_overrides(raw_config: Dict[str, Any], environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Overlay non-empty environment variables onto raw settings."""
    environ = os.environ if environ is None else environ
    merged = {key: (dict(value) if isinstance(value, dict) else value) for key, value in raw_config.items()}
    for env_name, section, field in ENV_OVERRIDES:
        value = environ.get(env_name)
        if not value:
            continue
        if section is None:
            merged[field] = value
        else:
            merged.setdefault(section, {})[field] = value
    return merged


def load_app_config(config_path: Union[str, Path, None] = None, environ: Optional[Dict[str, str]] = None) -> AppConfig:
    """Load and validate the application config.

    Reads YAML defaults (from `config_path`, the APP_CONFIG environment
    variable, or config/app.yaml) and applies environment overrides.
    """
    environ = os.environ if environ is None else environ
    if config_path is None:
        config_path = get_config_path(environ.get("APP_CONFIG") or DEFAULT_CONFIG_NAME)
    raw_config = load_yaml_config(config_path)
    return AppConfig(**apply_env_overrides(raw_config, environ))
