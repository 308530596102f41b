"""Core: config, exception handlers, lifespan, and application bootstrap.

Single place for settings and shared validation.
"""

from app.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
