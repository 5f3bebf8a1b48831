"""Configuration module for Maple.

This module provides a type-safe configuration system using Pydantic Settings
and the Loguru based logging setup.

Public API:
----------
settings: Settings instance
    Pydantic settings object with nested configuration

get_logger(name: str) -> Logger
    Get a context-aware logger for your module

setup_loguru_logger(verbose: bool = False) -> None
    Configure Loguru logger for the application

log_startup_info() -> None
    Log the active configuration at startup

Usage:
------
```python
from maple.config import settings
threshold = settings.persistence.batch_threshold

from maple.config import get_logger
logger = get_logger(__name__)
logger.info("Starting operation")
```
"""

from .logging import get_logger, log_startup_info, setup_loguru_logger
from .settings import Settings, settings

__all__ = [
    "Settings",
    "get_logger",
    "log_startup_info",
    "settings",
    "setup_loguru_logger",
]
