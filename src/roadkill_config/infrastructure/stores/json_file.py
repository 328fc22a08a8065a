"""Flat JSON file settings store (``roadkill.json``).

The document is a single JSON object mapping store keys to scalar values.
Saves are atomic (write-to-tmp + replace) so a crash never leaves a
half-written settings file behind.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple, Union

from roadkill_config.domain.errors import ConfigStoreError, DuplicateSettingKeyError

logger = logging.getLogger(__name__)


def _reject_duplicate_pairs(pairs: List[Tuple[str, Any]]) -> Dict[str, Any]:
    keys = [k for k, _ in pairs]
    dupes = sorted({k for k in keys if keys.count(k) > 1})
    if dupes:
        raise DuplicateSettingKeyError(dupes)
    return dict(pairs)


def parse_settings_document(text: str, source: str) -> Dict[str, Any]:
    """Parse a JSON settings document; *source* names it in error messages.

    Raises ``DuplicateSettingKeyError`` for repeated keys and
    ``ConfigStoreError`` for malformed JSON or a non-object top level.
    """
    try:
        data = json.loads(text, object_pairs_hook=_reject_duplicate_pairs)
    except json.JSONDecodeError as e:
        raise ConfigStoreError(f"{source}: not valid JSON ({e})") from e
    if not isinstance(data, dict):
        raise ConfigStoreError(f"{source}: expected a JSON object, got {type(data).__name__}")
    return data


class JsonFileSettingsStore:
    """Reads and writes the settings document at *path*. Missing file -> no settings."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Dict[str, Any]:
        if not self._path.is_file():
            logger.debug("No settings file at %s", self._path)
            return {}
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigStoreError(f"Cannot read settings file {self._path}: {e}") from e
        return parse_settings_document(raw, str(self._path))

    def save(self, values: Mapping[str, Any]) -> None:
        tmp_file = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_file.write_text(
                json.dumps(dict(values), indent=2, sort_keys=True, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
            tmp_file.replace(self._path)
        except OSError as e:
            raise ConfigStoreError(f"Cannot write settings file {self._path}: {e}") from e
        logger.debug("Wrote %d settings to %s", len(values), self._path)
