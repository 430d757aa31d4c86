"""
Configuration module for the campus events backend.

Provides centralized, environment-driven application settings.
"""

from backend.src.config.settings import AppSettings, get_settings

__all__ = [
    "AppSettings",
    "get_settings",
]
