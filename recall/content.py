import uuid
from typing import Iterable, List, Mapping, Optional

from .models import Card, DEFAULT_EASINESS
from .sm2 import now_ms


def new_card(front: str, back: str, owner_id: str = "local", now: Optional[int] = None,
             card_id: Optional[str] = None) -> Card:
    """A fresh card, due immediately."""
    if now is None:
        now = now_ms()
    return Card(
        id=card_id or str(uuid.uuid4()),
        owner_id=owner_id,
        front=front,
        back=back,
        interval=0,
        repetition=0,
        easiness_factor=DEFAULT_EASINESS,
        due_at=now,
    )


def cards_from_pairs(pairs: Iterable[Mapping[str, str]], owner_id: str = "local",
                     now: Optional[int] = None) -> List[Card]:
    """
    Wraps generated {front, back} pairs into new cards.
    Pairs with an empty front or back are skipped.
    """
    if now is None:
        now = now_ms()
    cards = []
    for pair in pairs:
        front = (pair.get('front') or '').strip()
        back = (pair.get('back') or '').strip()
        if not front or not back:
            continue
        cards.append(new_card(front, back, owner_id=owner_id, now=now))
    return cards
