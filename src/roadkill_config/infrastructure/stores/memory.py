"""Dict-backed settings store (tests, embedding hosts)."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


class InMemorySettingsStore:
    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values: Dict[str, Any] = dict(values or {})
        self.save_count = 0

    def load(self) -> Dict[str, Any]:
        return dict(self._values)

    def save(self, values: Mapping[str, Any]) -> None:
        self._values = dict(values)
        self.save_count += 1
