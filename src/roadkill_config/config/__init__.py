"""Configuration: schema, default table and loading from a backing store."""

from .schema import (
    OPTIONAL_DEFAULTS,
    REQUIRED_KEYS,
    SECRET_KEYS,
    SETTING_KEYS,
    RoadkillSettings,
    parse_setting_value,
    resolve_setting,
)
from .loader import check_unique_keys, load_config, load_configuration, save_configuration

get_config = load_config  # alias

__all__ = [
    "OPTIONAL_DEFAULTS", "REQUIRED_KEYS", "SECRET_KEYS", "SETTING_KEYS",
    "RoadkillSettings", "parse_setting_value", "resolve_setting",
    "check_unique_keys", "load_config", "load_configuration", "save_configuration",
    "get_config",
]
