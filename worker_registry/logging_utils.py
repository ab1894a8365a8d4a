"""
Worker Registry - Logging Setup.

Installs a single stdout handler on the root logger, in either a
json-shaped or a pipe-separated text format. Library modules only
ever call ``logging.getLogger(__name__)``; this is for applications.
"""

import json
import logging
import sys
from typing import Optional

from .config import RegistryConfig


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    registry_name: Optional[str] = None,
) -> logging.Logger:
    """
    Set up structured logging.

    Args:
        level: Log level
        log_format: Output format (json or text)
        registry_name: Registry label added to every line

    Returns:
        Configured package logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps({
                "timestamp": "%(asctime)s",
                "level": "%(levelname)s",
                "logger": "%(name)s",
                "thread": "%(threadName)s",
                "message": "%(message)s",
                "registry": registry_name or "",
            })
        )
    else:
        formatter = logging.Formatter(
            f"%(asctime)s | %(levelname)-8s | %(name)s | %(threadName)s | "
            f"{registry_name or ''} | %(message)s"
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    return logging.getLogger("worker_registry")


def setup_logging_from_config(config: RegistryConfig) -> logging.Logger:
    """Set up logging from a registry configuration."""
    return setup_logging(
        level=config.log_level,
        log_format=config.log_format,
        registry_name=config.name,
    )
