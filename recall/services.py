import logging
import threading
from functools import partial
from typing import Callable, Iterable, List, Mapping, Optional, Tuple

from .config import Settings, settings as default_settings
from .content import cards_from_pairs, new_card
from .models import Card, SessionView
from .presets import preset_pairs
from .selector import pool_stats, select_session
from .session import Phase, ReviewSessionController
from .sm2 import now_ms
from .store import CardStore


class ReviewService:
    """
    One reviewer's view of the engine: a store plus at most one active session.

    Rated cards are not persisted here: rate() hands back a callable that
    runs the PersistCard commands, so the HTTP layer can put it in a
    background task.
    """

    def __init__(self, store: CardStore, config: Optional[Settings] = None):
        self.store = store
        self.config = config or default_settings
        self.controller: Optional[ReviewSessionController] = None
        # endpoints run in a thread pool; one event at a time per session
        self._lock = threading.RLock()

    def start_session(self, owner_id: Optional[str] = None, cap: Optional[int] = None,
                      now: Optional[int] = None) -> SessionView:
        owner_id = owner_id or self.config.default_owner
        cap = self.config.session_cap if cap is None else cap
        # sampled once per session
        reference_time = now_ms() if now is None else now

        pool = self.store.fetch_due(owner_id)
        session = select_session(pool, reference_time, cap)
        logging.info(f"Selected {len(session)} of {len(pool)} cards for {owner_id}")

        with self._lock:
            # A new session replaces any unfinished one; earlier ratings stay persisted.
            self.controller = ReviewSessionController(persist=self.store.persist, run_commands=False)
            self.controller.start(session)
            return self.current()

    def _active(self) -> ReviewSessionController:
        if self.controller is None:
            self.controller = ReviewSessionController(persist=self.store.persist, run_commands=False)
        return self.controller

    def current(self) -> SessionView:
        with self._lock:
            controller = self._active()
            state = controller.state
            warnings = list(controller.warnings)
        card = state.current
        view = SessionView(
            phase=state.phase.value,
            length=len(state.cards),
            reviewed=state.reviewed,
            warnings=warnings,
        )
        if card is not None:
            view.index = state.index
            view.card_id = card.id
            view.front = card.front
            if state.phase == Phase.REVEALED:
                view.back = card.back
        return view

    def reveal(self) -> SessionView:
        with self._lock:
            self._active().reveal()
            return self.current()

    def rate(self, quality: int, now: Optional[int] = None) -> Tuple[SessionView, Callable[[], None]]:
        """
        Applies a rating.

        Returns the new session view and a callable that persists the rated
        card through the controller that produced it.
        """
        with self._lock:
            controller = self._active()
            commands = controller.rate(quality, now)
            return self.current(), partial(controller.execute, commands)

    def add_card(self, front: str, back: str, owner_id: Optional[str] = None) -> Card:
        card = new_card(front, back, owner_id=owner_id or self.config.default_owner)
        self.store.add([card])
        return card

    def add_generated(self, pairs: Iterable[Mapping[str, str]], owner_id: Optional[str] = None) -> List[Card]:
        cards = cards_from_pairs(pairs, owner_id=owner_id or self.config.default_owner)
        self.store.add(cards)
        logging.info(f"Added {len(cards)} generated cards")
        return cards

    def add_preset(self, preset_id: str, owner_id: Optional[str] = None) -> List[Card]:
        """Raises KeyError for an unknown preset."""
        cards = cards_from_pairs(preset_pairs(preset_id), owner_id=owner_id or self.config.default_owner)
        self.store.add(cards)
        logging.info(f"Added preset {preset_id} ({len(cards)} cards)")
        return cards

    def get_stats(self, owner_id: Optional[str] = None, now: Optional[int] = None) -> dict:
        owner_id = owner_id or self.config.default_owner
        pool = self.store.fetch_due(owner_id)
        return pool_stats(pool, now_ms() if now is None else now, self.config.session_cap)
