# cards.py
# Card records over the key-value store (CRUD, bulk set/delete), ordering & search

import logging
import time
from typing import Any, Dict, Iterable, List

from pydantic import ValidationError

from config import CARDS_KEY, EMPTY_CARDS
from models import Card

logger = logging.getLogger(__name__)


class CardNotFoundError(KeyError):
    pass


def _dump(cards: Iterable[Card]) -> List[Dict[str, Any]]:
    return [c.model_dump() for c in cards]


def list_cards(store) -> List[Card]:
    raw = store.get(CARDS_KEY)
    if raw is None:
        return list(EMPTY_CARDS)
    if not isinstance(raw, list):
        logger.warning(f"Ignoring cards payload of type {type(raw).__name__}")
        return list(EMPTY_CARDS)
    cards = []
    for item in raw:
        try:
            cards.append(Card.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping malformed card record: {e.error_count()} error(s)")
    return cards


def set_cards(store, cards: Iterable[Card]) -> None:
    store.set(CARDS_KEY, _dump(cards))


def delete_all_cards(store) -> None:
    store.remove(CARDS_KEY)


def save_card(store, card: Card) -> Card:
    """Insert, or replace the card with the same id."""
    updated, found = [], False
    for c in list_cards(store):
        if c.id == card.id:
            updated.append(card)
            found = True
        else:
            updated.append(c)
    if not found:
        updated.append(card)
    set_cards(store, updated)
    return card


def update_card(store, card_id: str, **changes) -> Card:
    cards = list_cards(store)
    for i, c in enumerate(cards):
        if c.id == card_id:
            merged = Card.model_validate({**c.model_dump(), **changes})
            cards[i] = merged
            set_cards(store, cards)
            return merged
    raise CardNotFoundError(card_id)


def delete_card(store, card_id: str) -> None:
    set_cards(store, [c for c in list_cards(store) if c.id != card_id])


def increment_usage(store, card_id: str) -> Card:
    card = next((c for c in list_cards(store) if c.id == card_id), None)
    if card is None:
        raise CardNotFoundError(card_id)
    return update_card(store, card_id, usage_count=card.usage_count + 1,
                       last_used_at=int(time.time() * 1000))


def toggle_pin(store, card_id: str) -> Card:
    card = next((c for c in list_cards(store) if c.id == card_id), None)
    if card is None:
        raise CardNotFoundError(card_id)
    return update_card(store, card_id, is_pinned=not card.is_pinned)


def sort_cards(cards: Iterable[Card]) -> List[Card]:
    """Pinned first (most recently used first), then by usage count and recency."""
    cards = list(cards)
    pinned = sorted((c for c in cards if c.is_pinned), key=lambda c: -c.last_used_at)
    unpinned = sorted((c for c in cards if not c.is_pinned),
                      key=lambda c: (-c.usage_count, -c.last_used_at))
    return pinned + unpinned


def filter_cards(cards: Iterable[Card], query: str) -> List[Card]:
    """Case-insensitive match of every query term against bank and cardholder name."""
    cards = list(cards)
    terms = [t for t in (query or "").lower().split() if t]
    if not terms:
        return cards
    out = []
    for c in cards:
        info = f"{c.bank_name.lower()} {c.cardholder_name.lower()}"
        if all(t in info for t in terms):
            out.append(c)
    return out
