"""Persistent configuration backed by QSettings."""

from .settings_manager import DEFAULT_SETTINGS, SettingsManager

__all__ = ['SettingsManager', 'DEFAULT_SETTINGS']
