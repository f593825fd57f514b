# dismissals.py
# Expiring acknowledgment ledger: reminder key -> dismissal time (unix ms)

import logging
import time
from datetime import datetime
from typing import Dict, Optional

from config import DISMISSALS_KEY, DISMISSAL_TTL_DAYS, EMPTY_DISMISSALS

logger = logging.getLogger(__name__)

DAY_IN_MS = 24 * 60 * 60 * 1000


def _now_ms(now: Optional[datetime] = None) -> int:
    if now is None:
        return int(time.time() * 1000)
    return int(now.timestamp() * 1000)


def load_dismissals(store) -> Dict[str, int]:
    raw = store.get(DISMISSALS_KEY)
    if raw is None:
        return dict(EMPTY_DISMISSALS)
    if not isinstance(raw, dict):
        logger.warning(f"Ignoring dismissal map of type {type(raw).__name__}")
        return dict(EMPTY_DISMISSALS)
    out = {}
    for key, stamp in raw.items():
        if isinstance(stamp, (int, float)) and not isinstance(stamp, bool):
            out[key] = int(stamp)
    return out


def save_dismissals(store, dismissals: Dict[str, int]) -> None:
    store.set(DISMISSALS_KEY, dismissals)


def dismiss_reminder(store, key: str, now: Optional[datetime] = None) -> None:
    dismissals = load_dismissals(store)
    dismissals[key] = _now_ms(now)
    save_dismissals(store, dismissals)


def clear_outdated_dismissals(store, now: Optional[datetime] = None) -> int:
    """Drop dismissals older than the TTL. Returns how many were removed."""
    dismissals = load_dismissals(store)
    cutoff = _now_ms(now) - DISMISSAL_TTL_DAYS * DAY_IN_MS
    kept = {key: stamp for key, stamp in dismissals.items() if stamp > cutoff}
    save_dismissals(store, kept)
    removed = len(dismissals) - len(kept)
    if removed:
        logger.info(f"Cleared {removed} outdated reminder dismissal(s)")
    return removed


def reset_all_dismissals(store) -> None:
    save_dismissals(store, {})
