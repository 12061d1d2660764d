# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Persistent key-value settings for ItemBag tools.

Settings are kept in a TYTX-encoded JSON file so typed values (int, bool)
come back with their type. Every ``set`` writes the file immediately.

Known keys:
    ItemListPath       - last ItemList.xml used for the catalog
    ItemBagFolderPath  - folder scanned for ItemBag files
    EnableFileLogging  - file logging toggle

Example:
    >>> store = SettingsStore('/tmp/itembag-settings.json')
    >>> store.set(ITEM_BAG_FOLDER_PATH, '/srv/emu/Data/Items/ItemBags')
    >>> store.get(ITEM_BAG_FOLDER_PATH)
    '/srv/emu/Data/Items/ItemBags'
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from genro_tytx import from_tytx, to_tytx

logger = logging.getLogger(__name__)

ITEM_LIST_PATH = 'ItemListPath'
ITEM_BAG_FOLDER_PATH = 'ItemBagFolderPath'
ENABLE_FILE_LOGGING = 'EnableFileLogging'

DEFAULT_SETTINGS_PATH = Path.home() / '.itembag' / 'settings.json'

_TRUE_STRINGS = ('true', '1', 'yes')
_FALSE_STRINGS = ('false', '0', 'no')


class SettingsStore:
    """Key-value settings persisted to a JSON file."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path is not None else DEFAULT_SETTINGS_PATH
        self._values: dict[str, Any] = self._read()

    def _read(self) -> dict[str, Any]:
        if not self.path.is_file():
            logger.debug("No settings file at %s", self.path)
            return {}
        try:
            data = from_tytx(self.path.read_text(encoding='utf-8'), transport=None)
        except Exception:
            logger.exception("Error reading settings from %s", self.path)
            return {}
        if not isinstance(data, dict):
            logger.error("Settings file %s does not hold a mapping", self.path)
            return {}
        return data

    def _write(self) -> None:
        result = to_tytx(self._values, transport=None)
        # Remove ::JS suffix for file (extension identifies format)
        if isinstance(result, str) and result.endswith('::JS'):
            result = result[:-4]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(result, encoding='utf-8')

    def get(self, name: str, default: str = '') -> str:
        value = self._values.get(name)
        return default if value is None else str(value)

    def get_bool(self, name: str, default: bool = False) -> bool:
        value = self._values.get(name)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        return default

    def get_int(self, name: str, default: int = 0) -> int:
        value = self._values.get(name)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass
        return default

    def set(self, name: str, value: str | int | bool) -> None:
        self._values[name] = value
        self._write()
        logger.debug("Set setting %s = %r", name, value)

    def update(self, values: Mapping[str, Any]) -> None:
        self._values.update(values)
        self._write()
        logger.info("Saved %d settings", len(values))

    def delete(self, name: str) -> None:
        if self._values.pop(name, None) is not None:
            self._write()
            logger.debug("Deleted setting %s", name)

    def clear(self) -> None:
        self._values.clear()
        self._write()
        logger.info("Cleared all settings")

    def as_dict(self) -> dict[str, str]:
        return {k: str(v) for k, v in self._values.items()}

    def __contains__(self, name: str) -> bool:
        return name in self._values
