"""Application configuration module.

- **settings.py**: Environment-based settings (Pydantic BaseSettings)
  - Database URL, default caller id, scheduling defaults, calendar export ids
  - Loaded from .env file via pydantic-settings
"""
from kinisi.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
