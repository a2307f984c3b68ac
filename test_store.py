import pandas as pd
import pytest

from recall.content import cards_from_pairs, new_card
from recall.errors import PersistenceFailure
from recall.sm2 import review_card
from recall.session import Phase, ReviewSessionController
from recall.store import CsvCardStore, MemoryCardStore

NOW = 1_700_000_000_000


def test_memory_store_scopes_by_owner():
    store = MemoryCardStore([
        new_card("Q1", "A1", owner_id="ana", now=NOW),
        new_card("Q2", "A2", owner_id="ben", now=NOW),
    ])
    assert [c.front for c in store.fetch_due("ana")] == ["Q1"]
    assert store.fetch_due("nobody") == []


def test_memory_store_last_write_wins():
    card = new_card("Q", "A", now=NOW)
    store = MemoryCardStore([card])
    store.persist(review_card(card, 5, NOW))
    store.persist(review_card(card, 0, NOW))
    assert store.fetch_due("local")[0].repetition == 0


def test_csv_missing_file_is_empty_pool(tmp_path):
    store = CsvCardStore(str(tmp_path / "cards.csv"))
    assert store.fetch_due("local") == []


def test_csv_add_and_reload(tmp_path):
    path = str(tmp_path / "cards.csv")
    store = CsvCardStore(path)
    store.add(cards_from_pairs([{"front": "Q1", "back": "A1"}, {"front": "Q2", "back": "A2"}], now=NOW))

    reloaded = CsvCardStore(path).fetch_due("local")
    assert [c.front for c in reloaded] == ["Q1", "Q2"]
    assert all(c.easiness_factor == 2.5 and c.interval == 0 and c.due_at == NOW for c in reloaded)
    assert all(c.last_reviewed is None for c in reloaded)


def test_csv_persist_updates_row(tmp_path):
    path = str(tmp_path / "cards.csv")
    card = new_card("Q", "A", now=NOW, card_id="c1")
    store = CsvCardStore(path)
    store.add([card])

    store.persist(review_card(card, 4, NOW + 5))

    reloaded = CsvCardStore(path).fetch_due("local")
    assert len(reloaded) == 1
    assert reloaded[0].id == "c1"
    assert reloaded[0].repetition == 1
    assert reloaded[0].last_reviewed == NOW + 5
    assert reloaded[0].due_at == NOW + 5 + 86_400_000


def test_csv_persist_unknown_card_appends(tmp_path):
    store = CsvCardStore(str(tmp_path / "cards.csv"))
    store.persist(new_card("Q", "A", now=NOW, card_id="x"))
    assert [c.id for c in store.fetch_due("local")] == ["x"]


def test_csv_legacy_columns_get_defaults(tmp_path):
    path = tmp_path / "legacy.csv"
    pd.DataFrame([
        {"id": "1", "question": "Q1", "answer": "A1", "ease_factor": 2.2, "repetitions": 3},
        {"id": "", "question": "Q2", "answer": "A2", "ease_factor": 2.5, "repetitions": 0},
    ]).to_csv(path, index=False)

    cards = CsvCardStore(str(path)).fetch_due("local")
    assert len(cards) == 2
    assert cards[0].front == "Q1"
    assert cards[0].easiness_factor == pytest.approx(2.2)
    assert cards[0].repetition == 3
    assert cards[0].due_at == 0
    assert cards[1].id


def test_csv_write_failure_raises_persistence_failure(tmp_path):
    store = CsvCardStore(str(tmp_path / "missing_dir" / "cards.csv"))
    with pytest.raises(PersistenceFailure):
        store.persist(new_card("Q", "A", now=NOW))
    with pytest.raises(PersistenceFailure):
        store.add([new_card("Q", "A", now=NOW, card_id="x")])
    # nothing that failed to reach disk stays in the pool
    assert store.fetch_due("local") == []


def write_corrupt_csv(path):
    path.write_text('id,front,back\n1,Q1,A1\n2,"unterminated,A2\n', encoding="utf-8")


def test_csv_unreadable_file_raises_persistence_failure(tmp_path):
    path = tmp_path / "cards.csv"
    write_corrupt_csv(path)
    store = CsvCardStore(str(path))
    with pytest.raises(PersistenceFailure):
        store.persist(new_card("Q", "A", now=NOW))
    with pytest.raises(PersistenceFailure):
        store.add([new_card("Q", "A", now=NOW)])


def test_session_continues_when_csv_is_unreadable(tmp_path):
    path = tmp_path / "cards.csv"
    write_corrupt_csv(path)
    store = CsvCardStore(str(path))

    controller = ReviewSessionController(persist=store.persist)
    controller.start([new_card("Q1", "A1", now=NOW, card_id="c1"), new_card("Q2", "A2", now=NOW, card_id="c2")])
    controller.reveal()
    controller.rate(4, NOW)

    assert controller.phase == Phase.PRESENTING
    assert controller.current.id == "c2"
    assert controller.state.cards[0].repetition == 1
    assert len(controller.warnings) == 1
    assert "c1" in controller.warnings[0]
