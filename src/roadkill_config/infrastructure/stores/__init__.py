"""Backing stores. Each implements the ``SettingsStore`` port."""

from .database import DatabaseSettingsStore
from .environment import EnvironmentOverlayStore
from .json_file import JsonFileSettingsStore, parse_settings_document
from .memory import InMemorySettingsStore

__all__ = [
    "DatabaseSettingsStore",
    "EnvironmentOverlayStore",
    "InMemorySettingsStore",
    "JsonFileSettingsStore",
    "parse_settings_document",
]
