import pytest

from recall import sm2
from recall.content import new_card
from recall.errors import InvalidRating
from recall.models import SchedulingState

NOW = 1_700_000_000_000
FRESH = SchedulingState(interval=0, repetition=0, easiness_factor=2.5)
MATURE = SchedulingState(interval=6, repetition=2, easiness_factor=2.5)


@pytest.mark.parametrize("quality,easiness", [(5, 2.6), (4, 2.5), (3, 2.36)])
def test_first_passing_review(quality, easiness):
    state = sm2.apply(FRESH, quality, NOW)
    assert state.easiness_factor == pytest.approx(easiness)
    assert state.repetition == 1
    assert state.interval == 1
    assert state.due_at == NOW + sm2.DAY_MS


def test_second_passing_review_is_six_days():
    state = sm2.apply(SchedulingState(interval=1, repetition=1, easiness_factor=2.5), 4, NOW)
    assert state.interval == 6
    assert state.repetition == 2
    assert state.due_at == NOW + 6 * sm2.DAY_MS


def test_failure_resets_progress():
    state = sm2.apply(MATURE, 0, NOW)
    assert state.easiness_factor == pytest.approx(1.7)
    assert state.repetition == 0
    assert state.interval == 1


def test_growth_uses_previous_easiness():
    state = sm2.apply(MATURE, 5, NOW)
    # 6 * 2.5, not 6 * 2.6
    assert state.interval == 15
    assert state.repetition == 3
    assert state.easiness_factor == pytest.approx(2.6)


def test_interval_rounds_half_up():
    state = sm2.apply(SchedulingState(interval=5, repetition=3, easiness_factor=2.5), 4, NOW)
    # 12.5; builtin round() would give 12
    assert state.interval == 13


def test_easiness_floor():
    state = SchedulingState(interval=10, repetition=4, easiness_factor=1.3)
    for _ in range(5):
        state = sm2.apply(state, 0, NOW)
        assert state.easiness_factor >= 1.3
    assert state.easiness_factor == 1.3


@pytest.mark.parametrize("quality", [0, 1, 2, 3, 4, 5])
def test_invariants_and_branch_law(quality):
    for start in (FRESH, MATURE, SchedulingState(interval=40, repetition=7, easiness_factor=1.31)):
        state = sm2.apply(start, quality, NOW)
        assert state.easiness_factor >= 1.3
        assert state.interval >= 0
        assert state.repetition >= 0
        if quality >= 3:
            assert state.repetition == start.repetition + 1
        else:
            assert state.repetition == 0
            assert state.interval == 1


def test_deterministic():
    assert sm2.apply(MATURE, 3, NOW) == sm2.apply(MATURE, 3, NOW)


@pytest.mark.parametrize("quality", [-1, 6, 2.5, "4", True, None])
def test_invalid_rating(quality):
    with pytest.raises(InvalidRating):
        sm2.apply(FRESH, quality, NOW)


def test_invalid_rating_is_a_value_error():
    with pytest.raises(ValueError):
        sm2.apply(FRESH, 9, NOW)


@pytest.mark.parametrize("interval,level", [(1, 1), (2, 2), (6, 3), (15, 4), (31, 5)])
def test_mastery_level(interval, level):
    assert sm2.mastery_level(interval) == level


def test_review_card_returns_updated_copy():
    card = new_card("Capital of Peru?", "Lima", now=NOW)
    reviewed = sm2.review_card(card, 5, NOW + 1000)

    assert card.repetition == 0
    assert card.last_reviewed is None
    assert reviewed.id == card.id
    assert reviewed.repetition == 1
    assert reviewed.last_reviewed == NOW + 1000
    assert reviewed.due_at == NOW + 1000 + sm2.DAY_MS
    assert reviewed.mastery_level == 1


def test_review_card_rejects_bad_rating_without_change():
    card = new_card("Q", "A", now=NOW)
    with pytest.raises(InvalidRating):
        sm2.review_card(card, 7, NOW)
    assert card.repetition == 0
    assert card.due_at == NOW
