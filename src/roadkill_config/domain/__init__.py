"""Domain layer: error types. No I/O."""

from .errors import (
    ConfigStoreError,
    DuplicateSettingKeyError,
    RoadkillConfigError,
    SetupRequiredError,
    UnknownSettingError,
)

__all__ = [
    "ConfigStoreError",
    "DuplicateSettingKeyError",
    "RoadkillConfigError",
    "SetupRequiredError",
    "UnknownSettingError",
]
