"""
Configuration loader for logstream.

Loads configuration from a YAML file with environment variable overrides.
"""

import logging
import os
from typing import Optional

import yaml

from .config import AppConfig, RenderConfig, SourceConfig

logger = logging.getLogger("logstream.config")

DEFAULT_CONFIG_PATH = "logstream.yaml"


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load configuration from file with environment variable overrides.

    Args:
        config_path: Path to YAML config file. Defaults to "logstream.yaml"

    Returns:
        AppConfig instance with loaded settings
    """
    config = AppConfig.create_default()

    config_path = config_path or DEFAULT_CONFIG_PATH
    if os.path.exists(config_path):
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            # Continue with defaults
            logger.warning("Could not load config from %s: %s", config_path, e)
            config_data = None

        if config_data:
            apply_config_data(config, config_data)

    apply_env_overrides(config)

    return config


def apply_config_data(config: AppConfig, config_data: dict) -> None:
    """Apply a parsed YAML mapping to ``config``."""
    if "source" in config_data:
        source_data = config_data["source"] or {}
        defaults = SourceConfig()
        config.source = SourceConfig(
            endpoint_url=source_data.get("endpoint_url", defaults.endpoint_url),
            region=source_data.get("region", defaults.region),
            page_size=int(source_data.get("page_size", defaults.page_size)),
            start_from_head=bool(source_data.get("start_from_head", defaults.start_from_head)),
            request_timeout=float(source_data.get("request_timeout", defaults.request_timeout)),
            rate_limit_seconds=float(source_data.get("rate_limit_seconds", defaults.rate_limit_seconds)),
            capture_file=source_data.get("capture_file", defaults.capture_file),
        )

    if "render" in config_data:
        render_data = config_data["render"] or {}
        config.render = RenderConfig(timestamps=bool(render_data.get("timestamps", False)))

    config.debug = bool(config_data.get("debug", False))
    config.log_level = str(config_data.get("log_level", "INFO")).upper()


def apply_env_overrides(config: AppConfig) -> None:
    """Apply environment variable overrides to configuration."""
    if os.getenv("LOGSTREAM_ENDPOINT_URL"):
        config.source.endpoint_url = os.getenv("LOGSTREAM_ENDPOINT_URL")

    if os.getenv("LOGSTREAM_REGION"):
        config.source.region = os.getenv("LOGSTREAM_REGION")

    page_size = os.getenv("LOGSTREAM_PAGE_SIZE")
    if page_size:
        try:
            config.source.page_size = int(page_size)
        except ValueError:
            logger.warning("Ignoring invalid LOGSTREAM_PAGE_SIZE: %r", page_size)

    if os.getenv("DEBUG"):
        config.debug = os.getenv("DEBUG").lower() in ("true", "1", "yes")

    if os.getenv("LOG_LEVEL"):
        config.log_level = os.getenv("LOG_LEVEL").upper()
