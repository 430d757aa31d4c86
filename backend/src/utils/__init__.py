"""
Utility modules for the campus events backend.

- logging_config: named application loggers (api, services, db)
"""

from backend.src.utils.logging_config import get_logger, init_logging

__all__ = [
    "get_logger",
    "init_logging",
]
