"""
Configuration management for model-bindgen.

Settings are merged from defaults, the environment, an optional JSON file
and explicit overrides, in that order.
"""

import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .api.client import DEFAULT_BASE_URL, Client
from .logging_config import get_logger

logger = get_logger(__name__)

ENV_API_TOKEN = "REPLICATE_API_TOKEN"
ENV_BASE_URL = "MODEL_BINDGEN_BASE_URL"


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""

    pass


@dataclass
class BindgenConfig:
    """Settings for the API client and the binding generator."""

    # API settings
    api_token: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    timeout: Optional[float] = None
    auth_scheme: str = "Bearer"

    # Generation settings
    runtime_module: str = "model_bindgen"
    add_comments: bool = True

    # Batch generation
    max_workers: int = 4


def _env_settings(environ: Mapping[str, str]) -> Dict[str, Any]:
    settings: Dict[str, Any] = {}
    if environ.get(ENV_API_TOKEN):
        settings["api_token"] = environ[ENV_API_TOKEN]
    if environ.get(ENV_BASE_URL):
        settings["base_url"] = environ[ENV_BASE_URL]
    return settings


def _load_config_file(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load configuration from JSON file."""
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    if path.suffix.lower() != ".json":
        raise ConfigError(f"Configuration file must be JSON: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in configuration file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to load configuration file {path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"Configuration file must contain a JSON object: {path}")

    logger.debug("Loaded configuration from %s", path)
    return config


def _dict_to_config(config_dict: Dict[str, Any]) -> BindgenConfig:
    """Convert dictionary to BindgenConfig instance."""
    known_fields = {f.name for f in fields(BindgenConfig)}
    unknown = sorted(set(config_dict) - known_fields)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    config = BindgenConfig(**config_dict)
    if config.max_workers < 1:
        raise ConfigError(f"max_workers must be at least 1, got {config.max_workers}")
    if not config.runtime_module or not all(
        part.isidentifier() for part in config.runtime_module.split(".")
    ):
        raise ConfigError(f"Invalid runtime_module: {config.runtime_module!r}")
    return config


def load_config(
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> BindgenConfig:
    """
    Load configuration.

    Args:
        custom_config: Explicit overrides (highest precedence)
        config_file: Path to JSON configuration file
        environ: Environment to read (defaults to ``os.environ``)

    Returns:
        Merged configuration
    """
    merged = asdict(BindgenConfig())
    merged.update(_env_settings(os.environ if environ is None else environ))

    if config_file:
        merged.update(_load_config_file(config_file))

    if custom_config:
        merged.update({k: v for k, v in custom_config.items() if v is not None})

    return _dict_to_config(merged)


def build_client(config: BindgenConfig) -> Client:
    """Create an API client from configuration.

    Raises:
        ConfigError: If no API token is configured.
    """
    if not config.api_token:
        raise ConfigError(
            f"No API token configured; set {ENV_API_TOKEN} or 'api_token' in the config file"
        )
    return Client(
        token=config.api_token,
        base_url=config.base_url,
        timeout=config.timeout,
        auth_scheme=config.auth_scheme,
    )
