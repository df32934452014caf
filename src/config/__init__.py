"""
Configuration module for the wardrobe API.

This module provides centralized configuration management using pydantic-settings.
All environment variables and tuning constants should be accessed through this module.

Usage:
    from config import get_settings

    settings = get_settings()
    bucket = settings.storage_bucket
"""

from config.settings import Settings, get_settings, get_settings_for_testing

__all__ = ["Settings", "get_settings", "get_settings_for_testing"]
