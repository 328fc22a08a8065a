"""Domain and application errors."""

from __future__ import annotations

from typing import List, Sequence


class RoadkillConfigError(Exception):
    """Base for roadkill-config errors."""
    pass


class ConfigStoreError(RoadkillConfigError):
    """The backing store could not be read, parsed, or written. Fatal to startup."""
    pass


class DuplicateSettingKeyError(ConfigStoreError):
    """The backing store holds the same setting twice (exact or case-variant key)."""

    def __init__(self, keys: Sequence[str]) -> None:
        self.keys: List[str] = list(keys)
        super().__init__(
            "Duplicate setting keys in backing store: " + ", ".join(repr(k) for k in self.keys)
        )


class UnknownSettingError(RoadkillConfigError, KeyError):
    """A setting name that is not part of the configuration schema."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown setting {self.name!r}"


class SetupRequiredError(RoadkillConfigError):
    """Normal operation was requested but the site still has to go through setup.

    Attributes:
        missing: Store keys of required settings absent from the backing store.
        reason: Human-readable explanation, suitable for a redirect page or CLI.
    """

    def __init__(self, reason: str, missing: Sequence[str] = ()) -> None:
        self.reason = reason
        self.missing: List[str] = list(missing)
        super().__init__(reason)
