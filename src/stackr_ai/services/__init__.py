"""Services for the Stackr AI orchestration layer."""

from .settings_store import SettingsStore

__all__ = ["SettingsStore"]
