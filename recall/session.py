"""
Review session state machine.

A session moves Idle -> Presenting(i) -> Revealed(i) -> ... -> Completed.
`transition` is pure: it maps (state, event) to (next state, commands) and
leaves side effects to whoever runs the commands. `ReviewSessionController`
is the small host that keeps the current state and runs PersistCard
commands through a store callable.
"""
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .errors import InvalidTransition, PersistenceFailure
from .models import Card
from .sm2 import review_card


class Phase(str, Enum):
    IDLE = "idle"
    PRESENTING = "presenting"
    REVEALED = "revealed"
    COMPLETED = "completed"


@dataclass(frozen=True)
class SessionState:
    phase: Phase = Phase.IDLE
    cards: Tuple[Card, ...] = ()
    index: int = 0
    reviewed: int = 0

    @property
    def current(self) -> Optional[Card]:
        if self.phase in (Phase.PRESENTING, Phase.REVEALED):
            return self.cards[self.index]
        return None


# Events
@dataclass(frozen=True)
class Start:
    cards: Tuple[Card, ...]


@dataclass(frozen=True)
class Reveal:
    pass


@dataclass(frozen=True)
class Rate:
    quality: int


Event = Union[Start, Reveal, Rate]


# Commands
@dataclass(frozen=True)
class PersistCard:
    card: Card


Command = PersistCard


def transition(state: SessionState, event: Event, now: Optional[int] = None) -> Tuple[SessionState, List[Command]]:
    """
    Applies one event to a session state.

    Raises:
        InvalidTransition: the event is not accepted in the current phase.
        InvalidRating: a Rate event carries a quality outside [0, 5].
    """
    if isinstance(event, Start):
        if state.phase != Phase.IDLE:
            raise InvalidTransition("start", state.phase.value)
        cards = tuple(event.cards)
        if not cards:
            return SessionState(phase=Phase.COMPLETED), []
        return SessionState(phase=Phase.PRESENTING, cards=cards), []

    if isinstance(event, Reveal):
        if state.phase != Phase.PRESENTING:
            raise InvalidTransition("reveal", state.phase.value)
        return replace(state, phase=Phase.REVEALED), []

    if isinstance(event, Rate):
        if state.phase != Phase.REVEALED:
            raise InvalidTransition("rate", state.phase.value)
        updated = review_card(state.cards[state.index], event.quality, now)
        cards = state.cards[:state.index] + (updated,) + state.cards[state.index + 1:]
        reviewed = state.reviewed + 1
        if state.index + 1 >= len(cards):
            next_state = SessionState(phase=Phase.COMPLETED, cards=cards, index=state.index, reviewed=reviewed)
        else:
            next_state = SessionState(phase=Phase.PRESENTING, cards=cards, index=state.index + 1, reviewed=reviewed)
        return next_state, [PersistCard(updated)]

    raise TypeError(f"Unknown session event: {event!r}")


class ReviewSessionController:
    def __init__(self, persist: Optional[Callable[[Card], None]] = None, run_commands: bool = True):
        self.state = SessionState()
        self.warnings: List[str] = []
        self._persist = persist
        # False leaves running the commands to the host, e.g. a background task
        self._run_commands = run_commands

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def completed(self) -> bool:
        return self.state.phase == Phase.COMPLETED

    @property
    def reviewed(self) -> int:
        return self.state.reviewed

    @property
    def current(self) -> Optional[Card]:
        return self.state.current

    def start(self, cards: Sequence[Card]) -> List[Command]:
        commands = self._dispatch(Start(tuple(cards)))
        if self.completed:
            logging.info("Nothing due, session completed immediately")
        else:
            logging.info(f"Session started with {len(self.state.cards)} cards")
        return commands

    def reveal(self) -> List[Command]:
        return self._dispatch(Reveal())

    def rate(self, quality: int, now: Optional[int] = None) -> List[Command]:
        """
        Rates the revealed card and advances the cursor.

        Returns the commands produced by the rating. When the controller was
        built with run_commands=True they have already been run.
        """
        commands = self._dispatch(Rate(quality), now)
        if self.completed:
            logging.info(f"Session completed, {self.reviewed} cards reviewed")
        return commands

    def execute(self, commands: Sequence[Command]):
        """Runs PersistCard commands. Failures are logged and kept in warnings, never raised."""
        if self._persist is None:
            return
        for command in commands:
            try:
                self._persist(command.card)
            except PersistenceFailure as e:
                logging.warning(f"Keeping local state for card {command.card.id}: {e}")
                self.warnings.append(str(e))

    def _dispatch(self, event: Event, now: Optional[int] = None) -> List[Command]:
        self.state, commands = transition(self.state, event, now)
        if self._run_commands:
            self.execute(commands)
        return commands
