# preferences.py
# App preferences: reminder lookahead window and enabled reminder types

import logging
from typing import Any, Dict

from pydantic import ValidationError

from config import PREFERENCES_KEY
from models import AppPreferences

logger = logging.getLogger(__name__)


def _read_raw(store) -> Dict[str, Any]:
    raw = store.get(PREFERENCES_KEY)
    if not isinstance(raw, dict):
        return {}
    return raw


def get_app_preferences(store) -> AppPreferences:
    """Stored values merged over the defaults."""
    raw = _read_raw(store)
    try:
        return AppPreferences.model_validate(raw)
    except ValidationError as e:
        logger.error(f"Invalid stored preferences, using defaults: {e}")
        return AppPreferences()


def update_app_preferences(store, **changes) -> AppPreferences:
    current = get_app_preferences(store).model_dump()
    if "reminder_types_enabled" in changes:
        types = dict(current["reminder_types_enabled"])
        types.update(dict(changes.pop("reminder_types_enabled")))
        current["reminder_types_enabled"] = types
    current.update(changes)
    prefs = AppPreferences.model_validate(current)
    store.set(PREFERENCES_KEY, prefs.model_dump())
    return prefs
