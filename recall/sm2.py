import math
import time
from typing import Optional

from .errors import InvalidRating
from .models import Card, SchedulingState, MIN_EASINESS

DAY_MS = 86_400_000
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6
PASSING_QUALITY = 3


def now_ms() -> int:
    return int(time.time() * 1000)


def _round_half_up(value: float) -> int:
    # Builtin round() is banker's rounding; intervals round .5 upwards.
    return int(math.floor(value + 0.5))


def validate_quality(quality) -> int:
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidRating(quality)
    if quality < 0 or quality > 5:
        raise InvalidRating(quality)
    return quality


def next_easiness(easiness_factor: float, quality: int) -> float:
    """
    EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), floored at 1.3.
    Applied on both passing and failing ratings.
    """
    miss = 5 - quality
    easiness = easiness_factor + (0.1 - miss * (0.08 + miss * 0.02))
    if easiness < MIN_EASINESS:
        easiness = MIN_EASINESS
    return easiness


def apply(state: SchedulingState, quality: int, now: Optional[int] = None) -> SchedulingState:
    """
    Pure SM-2 step.

    Args:
        state: current interval, repetition and easiness factor.
        quality: recall rating, an integer in [0, 5].
        now: epoch milliseconds at which the rating happened (defaults to the wall clock).

    Returns:
        SchedulingState: the next state, with due_at = now + interval days.

    Raises:
        InvalidRating: if quality is not an integer in [0, 5].
    """
    quality = validate_quality(quality)
    if now is None:
        now = now_ms()

    easiness = next_easiness(state.easiness_factor, quality)

    if quality >= PASSING_QUALITY:
        if state.repetition == 0:
            interval = FIRST_INTERVAL
        elif state.repetition == 1:
            interval = SECOND_INTERVAL
        else:
            # growth uses the easiness factor from before this review
            interval = _round_half_up(state.interval * state.easiness_factor)
        repetition = state.repetition + 1
    else:
        repetition = 0
        interval = FIRST_INTERVAL

    return SchedulingState(
        interval=interval,
        repetition=repetition,
        easiness_factor=easiness,
        due_at=now + interval * DAY_MS,
    )


def mastery_level(interval: int) -> int:
    if interval > 30:
        return 5
    if interval > 14:
        return 4
    if interval > 5:
        return 3
    if interval > 1:
        return 2
    return 1


def review_card(card: Card, quality: int, now: Optional[int] = None) -> Card:
    """Returns an updated copy of card after one rating; card itself is left as is."""
    if now is None:
        now = now_ms()
    state = apply(card.state, quality, now)
    return card.model_copy(update={
        "interval": state.interval,
        "repetition": state.repetition,
        "easiness_factor": state.easiness_factor,
        "due_at": state.due_at,
        "last_reviewed": now,
        "mastery_level": mastery_level(state.interval),
    })
