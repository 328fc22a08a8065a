"""Load settings from a backing store, apply defaults, and save them back.

``load_config()`` is the process-wide entry point: it reads the JSON file at
``ROADKILL_CONFIG_PATH`` (default ``roadkill.json``) with ``ROADKILL_*``
environment overrides on top.  It is memoised with ``functools.lru_cache`` so
the store is read at most once per process; after a save, call
``load_config.cache_clear()`` to swap in a freshly loaded instance.
"""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from roadkill_config.application.ports import RoadkillConfiguration, SettingsStore
from roadkill_config.domain.errors import ConfigStoreError, DuplicateSettingKeyError

from .schema import RoadkillSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "roadkill.json"


class _Env(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ROADKILL_", extra="ignore")
    config_path: Optional[str] = None


_env: Optional[_Env] = None


def _get_env() -> _Env:
    global _env
    if _env is None:
        _env = _Env()
    return _env


def config_path() -> Path:
    """Path of the settings file: ``ROADKILL_CONFIG_PATH`` or ``./roadkill.json``."""
    path = _get_env().config_path
    if not path or not path.strip():
        path = DEFAULT_CONFIG_PATH
    return Path(path).expanduser().resolve()


def build_store(path: Optional[str] = None, env_overlay: bool = True) -> SettingsStore:
    """JSON file store at *path* (default: ``config_path()``), optionally under the env overlay."""
    from roadkill_config.infrastructure.stores import EnvironmentOverlayStore, JsonFileSettingsStore

    store: SettingsStore = JsonFileSettingsStore(Path(path).expanduser() if path else config_path())
    if env_overlay:
        store = EnvironmentOverlayStore(store)
    return store


def check_unique_keys(values: Mapping[str, Any]) -> None:
    """Raise ``DuplicateSettingKeyError`` when two keys name the same setting.

    Keys are compared case-insensitively and ignoring underscores, so
    ``UseObjectCache``, ``useobjectcache`` and ``use_object_cache`` collide.
    """
    seen: Dict[str, str] = {}
    dupes: List[str] = []
    for key in values:
        norm = key.lower().replace("_", "")
        if norm in seen:
            if seen[norm] not in dupes:
                dupes.append(seen[norm])
            dupes.append(key)
        else:
            seen[norm] = key
    if dupes:
        raise DuplicateSettingKeyError(dupes)


def load_configuration(store: SettingsStore) -> RoadkillSettings:
    """Deserialize *store* into a ``RoadkillSettings`` with optional defaults applied.

    Raises ``ConfigStoreError`` when the store is unreadable, holds duplicate
    keys, or holds a value that does not fit its setting's type.
    """
    values = store.load()
    check_unique_keys(values)
    try:
        config = RoadkillSettings.from_store(values)
    except ValidationError as e:
        raise ConfigStoreError(f"Invalid setting value in backing store: {e}") from e
    missing = config.missing_required()
    if missing:
        logger.info("Required settings absent from backing store: %s", ", ".join(missing))
    logger.debug("Loaded %d stored settings (installed=%s)", len(values), config.installed)
    return config


def save_configuration(config: RoadkillConfiguration, store: SettingsStore) -> None:
    """Persist every setting (defaults resolved) through *store*."""
    store.save(config.to_store())
    logger.debug("Saved settings (installed=%s)", config.installed)


@functools.lru_cache(maxsize=1)
def load_config() -> RoadkillSettings:
    """Load the process-wide settings from ``config_path()`` plus env overrides.

    A missing file yields an un-installed configuration with defaults applied,
    which sends the host to its setup workflow.  Result is cached for the
    lifetime of the process; ``load_config.cache_clear()`` forces a reload.
    """
    return load_configuration(build_store())
