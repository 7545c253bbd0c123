"""Configuration loader for redirectfinder.

This module loads the YAML settings file and the delivery credentials
from the environment.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from redirectfinder.core.exceptions import ConfigError
from redirectfinder.core.constants import DEFAULTS, USER_AGENT


# ============================================================================
# Configuration Paths
# ============================================================================

def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to configs directory (./configs relative to project root)
    """
    # core/ -> redirectfinder/ -> src/ -> root
    project_root = Path(__file__).parent.parent.parent.parent
    return project_root / "configs"


# ============================================================================
# Settings Model
# ============================================================================

@dataclass
class HttpSettings:
    timeout: float = DEFAULTS["timeout"]
    max_redirects: int = DEFAULTS["max_redirects"]
    user_agent: str = USER_AGENT


@dataclass
class PipelineSettings:
    concurrency: int = DEFAULTS["concurrency"]
    batch_pause: float = DEFAULTS["batch_pause"]
    base_url: Optional[str] = DEFAULTS["base_url"]


@dataclass
class DataSettings:
    db_path: Path = Path(DEFAULTS["db_path"])
    errors_file: Path = Path(DEFAULTS["errors_file"])
    products_file: Path = Path(DEFAULTS["products_file"])
    catalog_file: Path = Path(DEFAULTS["catalog_file"])
    result_file: Path = Path(DEFAULTS["result_file"])


@dataclass
class DeliverySettings:
    api_url: Optional[str] = None
    api_key: Optional[str] = None
    timeout: float = DEFAULTS["delivery_timeout"]


@dataclass
class Settings:
    """Complete runtime configuration."""
    http: HttpSettings = field(default_factory=HttpSettings)
    pipeline: PipelineSettings = field(default_factory=PipelineSettings)
    data: DataSettings = field(default_factory=DataSettings)
    delivery: DeliverySettings = field(default_factory=DeliverySettings)


# ============================================================================
# Settings Loader
# ============================================================================

def load_settings(settings_file: Path | str | None = None) -> Settings:
    """Load settings from YAML file and environment.

    Args:
        settings_file: Path to settings YAML file. If None, loads
            redirectfinder.example.yaml from the configs directory when it
            exists, otherwise uses built-in defaults.

    Returns:
        Settings object

    Raises:
        ConfigError: If file not found, YAML parsing fails, or values
            have the wrong type
    """
    if settings_file is None:
        settings_path = get_config_dir() / "redirectfinder.example.yaml"
        if not settings_path.exists():
            settings = Settings()
            _apply_environment(settings)
            return settings
    else:
        settings_path = Path(settings_file)

    if not settings_path.exists():
        raise ConfigError(f"Settings file not found: {settings_path}")

    try:
        with settings_path.open("r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse settings YAML: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read settings file: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Settings file must contain a mapping")

    settings = Settings(
        http=_parse_http(_section(data, "http")),
        pipeline=_parse_pipeline(_section(data, "pipeline")),
        data=_parse_data(_section(data, "data")),
        delivery=_parse_delivery(_section(data, "delivery")),
    )
    _apply_environment(settings)
    return settings


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' section must be a mapping")
    return section


def _number(section: dict[str, Any], key: str, default: float, *, kind: type = float) -> Any:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"'{key}' must be a number, got {value!r}")
    if value < 0:
        raise ConfigError(f"'{key}' must not be negative")
    return kind(value)


def _parse_http(section: dict[str, Any]) -> HttpSettings:
    return HttpSettings(
        timeout=_number(section, "timeout", DEFAULTS["timeout"]),
        max_redirects=_number(section, "max_redirects", DEFAULTS["max_redirects"], kind=int),
        user_agent=str(section.get("user_agent", USER_AGENT)),
    )


def _parse_pipeline(section: dict[str, Any]) -> PipelineSettings:
    concurrency = _number(section, "concurrency", DEFAULTS["concurrency"], kind=int)
    if concurrency < 1:
        raise ConfigError("'concurrency' must be at least 1")

    base_url = section.get("base_url", DEFAULTS["base_url"])
    if base_url is not None and not isinstance(base_url, str):
        raise ConfigError("'base_url' must be a string")

    return PipelineSettings(
        concurrency=concurrency,
        batch_pause=_number(section, "batch_pause", DEFAULTS["batch_pause"]),
        base_url=base_url.rstrip("/") if base_url else None,
    )


def _parse_data(section: dict[str, Any]) -> DataSettings:
    return DataSettings(
        db_path=Path(section.get("db_path", DEFAULTS["db_path"])),
        errors_file=Path(section.get("errors_file", DEFAULTS["errors_file"])),
        products_file=Path(section.get("products_file", DEFAULTS["products_file"])),
        catalog_file=Path(section.get("catalog_file", DEFAULTS["catalog_file"])),
        result_file=Path(section.get("result_file", DEFAULTS["result_file"])),
    )


def _parse_delivery(section: dict[str, Any]) -> DeliverySettings:
    return DeliverySettings(
        timeout=_number(section, "timeout", DEFAULTS["delivery_timeout"]),
    )


def _apply_environment(settings: Settings) -> None:
    """Read delivery credentials from the environment (.env included)."""
    load_dotenv()

    api_url = os.getenv("API_URL", "").strip()
    api_key = os.getenv("API_KEY", "").strip()

    settings.delivery.api_url = api_url or None
    settings.delivery.api_key = api_key or None
