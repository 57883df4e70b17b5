"""Core: config, lifespan, exception handlers, and rate limiting.

Single place for settings and application bootstrap.
"""

from tasksync.core.config import ClientSettings, Settings, get_client_settings, get_settings

__all__ = ["Settings", "ClientSettings", "get_settings", "get_client_settings"]
