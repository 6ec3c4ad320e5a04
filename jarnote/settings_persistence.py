"""Settings persistence for per-note editor state.

Caret position and pending styles are remembered per note file, in a JSON
file stored in the platform's user config directory.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

logger = logging.getLogger(__name__)

BOOLEAN_SETTINGS = ('bold', 'italic', 'underline', 'strikethrough')


class SettingsPersistence:
    """Manages persistent storage of per-note settings.

    Settings are indexed by the absolute path of the note file.
    """

    def __init__(self, config_dir: Optional[str] = None):
        self._config_dir = Path(config_dir or platformdirs.user_config_dir("jarnote", "jar"))
        self._settings_file = self._config_dir / "settings.json"
        self._settings_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @property
    def settings_file(self) -> Path:
        return self._settings_file

    def _load_all_settings(self) -> Dict[str, Dict[str, Any]]:
        if self._settings_cache is not None:
            return self._settings_cache

        self._settings_cache = {}
        if not self._settings_file.exists():
            return self._settings_cache

        try:
            with open(self._settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load settings from {self._settings_file}: {e}")
            return self._settings_cache

        if isinstance(data, dict):
            self._settings_cache = data
        else:
            logger.warning("Settings file is not a JSON object, ignoring")
        return self._settings_cache

    def _save_all_settings(self, settings: Dict[str, Dict[str, Any]]) -> bool:
        """Write all settings via a temp file and rename."""
        temp_file = self._settings_file.with_suffix('.tmp')
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(settings, f, indent=2)
            temp_file.replace(self._settings_file)
        except OSError as e:
            logger.warning(f"Could not save settings to {self._settings_file}: {e}")
            try:
                temp_file.unlink(missing_ok=True)
            except OSError:
                pass
            return False
        self._settings_cache = settings
        return True

    def load_settings(self, note_path: Optional[str]) -> Dict[str, Any]:
        """Load the valid settings stored for a note.

        Returns:
            Settings dict, empty when nothing is stored or note_path is None
        """
        if note_path is None:
            return {}
        abs_path = os.path.abspath(note_path)
        note_settings = self._load_all_settings().get(abs_path, {})
        if not isinstance(note_settings, dict):
            logger.warning(f"Settings for {abs_path} are not a dict, ignoring")
            return {}
        valid = {}
        for key, value in note_settings.items():
            if self.validate_setting(key, value):
                valid[key] = value
            else:
                logger.warning(f"Ignoring invalid setting {key}={value!r} for {abs_path}")
        return valid

    def save_settings(self, note_path: Optional[str], settings: Dict[str, Any]) -> bool:
        """Save settings for a note.

        Returns:
            True if the settings were written
        """
        if note_path is None:
            return False
        all_settings = self._load_all_settings()
        all_settings[os.path.abspath(note_path)] = settings
        return self._save_all_settings(all_settings)

    @staticmethod
    def validate_setting(key: str, value: Any) -> bool:
        if value is None:
            return True
        if key in BOOLEAN_SETTINGS:
            return isinstance(value, bool)
        if key == 'caret_offset':
            return isinstance(value, int) and not isinstance(value, bool) and value >= 0
        # Unknown keys are kept for forward compatibility
        return True

    def clear_cache(self) -> None:
        self._settings_cache = None


_persistence: Optional[SettingsPersistence] = None


def get_persistence() -> SettingsPersistence:
    """Get the shared settings persistence instance."""
    global _persistence
    if _persistence is None:
        _persistence = SettingsPersistence()
    return _persistence
