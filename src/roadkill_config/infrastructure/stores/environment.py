"""Environment-variable overlay on top of another settings store.

Each setting can be overridden with ``ROADKILL_<ATTRIBUTE>``, e.g.
``ROADKILL_USE_OBJECT_CACHE=false`` or ``ROADKILL_CONNECTION_STRING=...``.
Values stay strings here; the schema coerces them on load.  Saving goes to
the underlying store unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import create_model
from pydantic_settings import BaseSettings, SettingsConfigDict

from roadkill_config.application.ports import SettingsStore
from roadkill_config.config.schema import KEY_BY_ATTR

logger = logging.getLogger(__name__)

ENV_PREFIX = "ROADKILL_"


class _EnvBase(BaseSettings):
    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")


# One optional string field per setting attribute.
_EnvOverrides = create_model(
    "_EnvOverrides",
    __base__=_EnvBase,
    **{attr: (Optional[str], None) for attr in KEY_BY_ATTR},
)


def env_var_name(key: str) -> str:
    """Environment variable that overrides store key *key*."""
    attr = next(a for a, k in KEY_BY_ATTR.items() if k == key)
    return ENV_PREFIX + attr.upper()


class EnvironmentOverlayStore:
    """Overlay ``ROADKILL_*`` environment variables on *base*'s values.

    *environ* replaces ``os.environ`` as the source of overrides (names are
    matched case-insensitively, as they are for the process environment).
    """

    def __init__(self, base: SettingsStore, environ: Optional[Mapping[str, str]] = None):
        self._base = base
        self._environ = environ

    @property
    def base(self) -> SettingsStore:
        return self._base

    def overrides(self) -> Dict[str, str]:
        """Settings currently overridden by the environment, keyed by store key."""
        if self._environ is not None:
            env_values = {name.upper(): value for name, value in self._environ.items()}
            return {
                key: env_values[env_var_name(key)]
                for key in KEY_BY_ATTR.values()
                if env_var_name(key) in env_values
            }
        env = _EnvOverrides()
        return {
            KEY_BY_ATTR[attr]: value
            for attr, value in env.model_dump().items()
            if value is not None
        }

    def load(self) -> Dict[str, Any]:
        values = self._base.load()
        overrides = self.overrides()
        if overrides:
            logger.debug("Environment overrides: %s", ", ".join(sorted(overrides)))
            values.update(overrides)
        return values

    def save(self, values: Mapping[str, Any]) -> None:
        self._base.save(values)
