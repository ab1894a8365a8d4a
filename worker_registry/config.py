"""
Worker Registry - Configuration.

============================================================
CONFIGURABLE REGISTRY BEHAVIOUR
============================================================

Configurable settings:
- Registry name (used in logs and status summaries)
- Strictness of completion counting
- Logging level and format

Configuration can be loaded from:
- Default values
- Environment variables (a .env file is honoured)
- YAML config file

============================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from dotenv import load_dotenv

from .exceptions import ConfigurationError


# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMATS = ("json", "text")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# =============================================================
# REGISTRY CONFIG
# =============================================================


@dataclass
class RegistryConfig:
    """
    Configuration for a worker registry.
    """

    name: str = "worker-registry"
    """Label used in log lines and status summaries."""

    strict_completion_count: bool = True
    """Raise on completion signals beyond the expected count."""

    log_level: str = "INFO"
    """Logging level."""

    log_format: str = "json"
    """Output format (json or text)."""

    @classmethod
    def from_env(cls) -> "RegistryConfig":
        """
        Load configuration from environment variables.

        Environment variables:
        - WORKER_REGISTRY_NAME
        - WORKER_REGISTRY_STRICT_COMPLETION
        - WORKER_REGISTRY_LOG_LEVEL
        - WORKER_REGISTRY_LOG_FORMAT
        """
        return cls(
            name=os.getenv("WORKER_REGISTRY_NAME", "worker-registry"),
            strict_completion_count=_env_bool("WORKER_REGISTRY_STRICT_COMPLETION", True),
            log_level=os.getenv("WORKER_REGISTRY_LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("WORKER_REGISTRY_LOG_FORMAT", "json").lower(),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "RegistryConfig":
        """Load configuration from YAML file."""
        try:
            import yaml
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}

            section = data.get("worker_registry", data)
            config = cls()

            if 'name' in section:
                config.name = str(section['name'])
            if 'strict_completion_count' in section:
                config.strict_completion_count = bool(section['strict_completion_count'])
            if 'log_level' in section:
                config.log_level = str(section['log_level']).upper()
            if 'log_format' in section:
                config.log_format = str(section['log_format']).lower()

            return config

        except Exception as e:
            logger.warning(f"Failed to load YAML config from {path}: {e}")
            return cls()

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if not self.name or not self.name.strip():
            errors.append("name must not be blank")

        if self.log_level not in LOG_LEVELS:
            errors.append(f"log_level must be one of {', '.join(LOG_LEVELS)}")

        if self.log_format not in LOG_FORMATS:
            errors.append(f"log_format must be one of {', '.join(LOG_FORMATS)}")

        return errors

    def validate_or_raise(self) -> None:
        """Raise ConfigurationError on the first validation problem."""
        errors = self.validate()
        if errors:
            raise ConfigurationError(
                message=f"Invalid registry configuration: {'; '.join(errors)}",
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "strict_completion_count": self.strict_completion_count,
            "log_level": self.log_level,
            "log_format": self.log_format,
        }


# =============================================================
# GLOBAL CONFIG SINGLETON
# =============================================================


_default_config: Optional[RegistryConfig] = None


def get_config() -> RegistryConfig:
    """Get the global registry configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RegistryConfig.from_env()
    return _default_config


def set_config(config: Optional[RegistryConfig]) -> None:
    """Set the global registry configuration (None resets to env)."""
    global _default_config
    _default_config = config
