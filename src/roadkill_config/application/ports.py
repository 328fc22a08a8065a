"""Ports (abstract interfaces) used by the application layer.

Each port is a ``Protocol`` so consumers depend only on the *shape* of the
collaborator.  ``RoadkillSettings`` satisfies ``RoadkillConfiguration``; every
backing store under ``infrastructure/stores`` satisfies ``SettingsStore``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Protocol, runtime_checkable


@runtime_checkable
class RoadkillConfiguration(Protocol):
    """Get/set access to the wiki settings by name (store key or attribute name)."""

    def get(self, name: str) -> Any:
        """Current value; optional settings resolve to their declared default."""
        ...

    def set(self, name: str, value: Any) -> None:
        """Assign in memory only. Persisting is the caller's job (``save_configuration``)."""
        ...

    def apply_defaults(self) -> "RoadkillConfiguration": ...

    def missing_required(self) -> List[str]: ...

    def to_store(self) -> Dict[str, Any]: ...


@runtime_checkable
class SettingsStore(Protocol):
    """A backing store: flat file, database settings row, environment overlay, ..."""

    def load(self) -> Dict[str, Any]:
        """Return the stored values keyed by store key. Missing store -> ``{}``.

        Raises ``ConfigStoreError`` when the store exists but cannot be read.
        """
        ...

    def save(self, values: Mapping[str, Any]) -> None: ...
