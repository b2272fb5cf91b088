"""File-backed user preference store.

Each user's preferences live in their own JSON file under:
~/.config/workspace-secrets/preferences/<user_id>.json
"""
import json
from pathlib import Path
from typing import Dict
import logging

from .errors import ServerError

logger = logging.getLogger(__name__)

PREFERENCES_DIR = Path.home() / ".config" / "workspace-secrets" / "preferences"


def _preferences_file(user_id: str) -> Path:
    if not user_id or "/" in user_id or user_id in (".", ".."):
        raise ServerError(f"Invalid user id for preferences: {user_id!r}")
    return PREFERENCES_DIR / f"{user_id}.json"


def _load_preferences(user_id: str) -> Dict[str, str]:
    """
    Load a user's preferences from their JSON file.

    Returns:
        Dictionary of preferences, or empty dict if the file doesn't exist

    Raises:
        ServerError: If the file exists but cannot be read or parsed
    """
    preferences_file = _preferences_file(user_id)
    if not preferences_file.exists():
        return {}

    try:
        with open(preferences_file, 'r') as f:
            preferences = json.load(f)
    except json.JSONDecodeError as e:
        raise ServerError(f"Failed to parse preferences file {preferences_file}: {e}") from e
    except OSError as e:
        raise ServerError(f"Failed to read preferences file {preferences_file}: {e}") from e

    if not isinstance(preferences, dict):
        raise ServerError(f"Preferences file {preferences_file} does not contain an object")

    return {str(key): str(value) for key, value in preferences.items()}


def _save_preferences(user_id: str, preferences: Dict[str, str]) -> None:
    preferences_file = _preferences_file(user_id)
    try:
        PREFERENCES_DIR.mkdir(parents=True, exist_ok=True)
        with open(preferences_file, 'w') as f:
            json.dump(preferences, f, indent=2)
    except OSError as e:
        logger.error(f"Failed to save preferences to {preferences_file}: {e}")
        raise


def find_preferences(user_id: str) -> Dict[str, str]:
    """Return all preferences of a user."""
    return _load_preferences(user_id)


def set_preference(user_id: str, key: str, value: str) -> None:
    """
    Set preference value.

    Args:
        user_id: Owner of the preference
        key: Preference key
        value: Preference value, stored as a string
    """
    preferences = _load_preferences(user_id)
    preferences[key] = str(value)
    _save_preferences(user_id, preferences)
    logger.info(f"Preference '{key}' set for user {user_id}")


def clear_preference(user_id: str, key: str) -> None:
    preferences = _load_preferences(user_id)
    if key in preferences:
        del preferences[key]
        _save_preferences(user_id, preferences)
        logger.info(f"Preference '{key}' cleared for user {user_id}")
    else:
        logger.debug(f"Preference '{key}' not found for user {user_id}, nothing to clear")


class FilePreferenceManager:
    """PreferenceManager backed by the preference files."""

    def find_preferences(self, user_id: str) -> Dict[str, str]:
        return find_preferences(user_id)
