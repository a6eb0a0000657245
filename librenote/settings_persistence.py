"""Per-document preferences that survive restarts.

One JSON object in the user's config directory maps each document's
absolute path to its preferences. Only view and session state lives here
(word wrap, last search term); the document itself is never touched.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .constants import EditorConstants

logger = logging.getLogger(__name__)

# Recognised settings and the type each must have
SETTING_TYPES: Dict[str, type] = {
    "word_wrap": bool,
    "last_search": str,
}

SETTINGS_FILENAME = "settings.json"


class SettingsPersistence:
    """Reads and writes the per-document settings file.

    The whole file is read once and cached; every store rewrites it through
    a sibling temporary file so a crash never leaves half a JSON document.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        if config_dir is None:
            config_dir = Path(platformdirs.user_config_dir(EditorConstants.APP_NAME,
                                                          EditorConstants.APP_AUTHOR))
        self._config_dir = Path(config_dir)
        self._settings_file = self._config_dir / SETTINGS_FILENAME
        self._settings_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @staticmethod
    def _key(document_path: str) -> str:
        return os.path.abspath(document_path)

    def _read_file(self) -> Dict[str, Dict[str, Any]]:
        try:
            raw = self._settings_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("Could not read %s: %s", self._settings_file, e)
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring corrupt settings file %s: %s", self._settings_file, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: top level is not an object", self._settings_file)
            return {}
        return data

    def _write_file(self, data: Dict[str, Dict[str, Any]]) -> bool:
        staging = self._settings_file.with_name(SETTINGS_FILENAME + EditorConstants.ATOMIC_SAVE_SUFFIX)
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
            staging.write_text(json.dumps(data, indent=2), encoding="utf-8")
            os.replace(staging, self._settings_file)
        except OSError as e:
            logger.warning("Could not write %s: %s", self._settings_file, e)
            try:
                staging.unlink()
            except OSError:
                pass
            return False
        return True

    def _all_settings(self) -> Dict[str, Dict[str, Any]]:
        if self._settings_cache is None:
            self._settings_cache = self._read_file()
        return self._settings_cache

    def load_settings(self, document_path: Optional[str]) -> Dict[str, Any]:
        """Return the valid settings stored for a document (empty if none)."""
        if document_path is None:
            return {}
        stored = self._all_settings().get(self._key(document_path))
        if not isinstance(stored, dict):
            if stored is not None:
                logger.warning("Settings for %s are not an object, ignoring", document_path)
            return {}
        return {key: value for key, value in stored.items() if self.validate_setting(key, value)}

    def save_settings(self, document_path: Optional[str], settings: Dict[str, Any]) -> bool:
        """Store settings for a document; returns False if nothing was written."""
        if document_path is None:
            return False
        updated = dict(self._all_settings())
        updated[self._key(document_path)] = dict(settings)
        if not self._write_file(updated):
            return False
        self._settings_cache = updated
        return True

    @staticmethod
    def validate_setting(key: str, value: Any) -> bool:
        expected = SETTING_TYPES.get(key)
        if expected is None:
            # Keys from newer versions are kept as they are
            return True
        return isinstance(value, expected)

    def clear_cache(self) -> None:
        """Forget the cached file so the next lookup rereads it."""
        self._settings_cache = None
