# global_reminders.py
# Personal recurring reminders that are not attached to a card

import logging
from typing import Iterable, List, Union

from pydantic import ValidationError

from config import EMPTY_GLOBAL_REMINDERS, GLOBAL_REMINDERS_KEY
from models import GlobalCustomReminder

logger = logging.getLogger(__name__)


def list_global_reminders(store) -> List[GlobalCustomReminder]:
    """
    Return the stored reminders that validate. Entries missing a label, a
    title or a usable day of month are skipped rather than failing the read.
    """
    raw = store.get(GLOBAL_REMINDERS_KEY)
    if raw is None:
        return list(EMPTY_GLOBAL_REMINDERS)
    if not isinstance(raw, list):
        logger.warning(f"Ignoring global reminders payload of type {type(raw).__name__}")
        return list(EMPTY_GLOBAL_REMINDERS)

    out = []
    for item in raw:
        try:
            out.append(GlobalCustomReminder.model_validate(item))
        except ValidationError:
            logger.warning(f"Dropping malformed global reminder: {item!r}")
    return out


def replace_global_reminders(store, items: Iterable[Union[GlobalCustomReminder, dict]]) -> List[GlobalCustomReminder]:
    reminders = [
        item if isinstance(item, GlobalCustomReminder) else GlobalCustomReminder.model_validate(item)
        for item in items
    ]
    store.set(GLOBAL_REMINDERS_KEY, [r.model_dump() for r in reminders])
    return reminders
