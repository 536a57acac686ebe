"""
Configuration management for logstream.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class SourceConfig:
    """Configuration for log page sources."""

    # Remote endpoint speaking the GetLogEvents request/response shape
    endpoint_url: Optional[str] = None
    region: str = "us-east-1"

    # Paging
    page_size: int = 100
    start_from_head: bool = False

    # Timeouts and rate limiting
    request_timeout: float = 10.0  # seconds
    rate_limit_seconds: float = 0.2  # seconds between requests

    # Replay
    capture_file: Optional[str] = None


@dataclass
class RenderConfig:
    """Configuration for content rendering."""

    timestamps: bool = False


@dataclass
class AppConfig:
    """Main application configuration container."""

    source: SourceConfig = field(default_factory=SourceConfig)
    render: RenderConfig = field(default_factory=RenderConfig)

    # Global settings
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def create_default(cls) -> "AppConfig":
        """Create a default configuration instance."""
        return cls()

    @classmethod
    def create_for_testing(cls) -> "AppConfig":
        """Create a configuration suitable for testing."""
        config = cls()
        config.source.page_size = 5
        config.source.request_timeout = 0.5
        config.source.rate_limit_seconds = 0.0
        config.debug = True
        config.log_level = "DEBUG"
        return config
