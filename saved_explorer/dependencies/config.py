"""
FastAPI dependency for injecting application settings.
"""

from saved_explorer.core.config import AppSettings, get_settings


def get_app_settings() -> AppSettings:
    """Return the process-wide settings; routes override this in tests."""
    return get_settings()


__all__ = ["get_app_settings"]
