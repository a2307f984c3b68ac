from typing import Iterable, List

from .models import Card

DEFAULT_CAP = 15


def select_session(pool: Iterable[Card], reference_time: int, cap: int = DEFAULT_CAP) -> List[Card]:
    """
    Picks the cards for one review session.

    Only cards with due_at <= reference_time are kept, most overdue first.
    Equal due_at values keep their pool order. The result is cut at cap and
    never padded with cards that are not due yet.
    """
    if cap < 0:
        raise ValueError(f"cap must be >= 0, got {cap}")
    due = [card for card in pool if card.due_at <= reference_time]
    # sorted() is stable
    due = sorted(due, key=lambda c: c.due_at)
    return due[:cap]


def pool_stats(pool: Iterable[Card], reference_time: int, cap: int = DEFAULT_CAP) -> dict:
    cards = list(pool)
    learned = sum(1 for c in cards if c.interval > 15)
    return {
        "total": len(cards),
        "learned": learned,
        "learning": len(cards) - learned,
        "due": len(select_session(cards, reference_time, cap)),
    }
