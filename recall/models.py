from pydantic import BaseModel, Field, StrictInt
from typing import Optional, List

MIN_EASINESS = 1.3
DEFAULT_EASINESS = 2.5


class SchedulingState(BaseModel):
    """Scheduling fields of a card, as consumed and produced by SM-2."""
    interval: int = Field(default=0, ge=0)  # days
    repetition: int = Field(default=0, ge=0)
    easiness_factor: float = Field(default=DEFAULT_EASINESS, ge=MIN_EASINESS)
    due_at: int = 0  # epoch ms

    model_config = {"frozen": True}


class Card(BaseModel):
    id: str
    owner_id: str = "local"
    front: str
    back: str
    interval: int = Field(default=0, ge=0)
    repetition: int = Field(default=0, ge=0)
    easiness_factor: float = Field(default=DEFAULT_EASINESS, ge=MIN_EASINESS)
    due_at: int = 0
    last_reviewed: Optional[int] = None
    mastery_level: int = Field(default=0, ge=0, le=5)

    @property
    def state(self) -> SchedulingState:
        return SchedulingState(
            interval=self.interval,
            repetition=self.repetition,
            easiness_factor=self.easiness_factor,
            due_at=self.due_at,
        )


class NewCard(BaseModel):
    front: str
    back: str


class RateRequest(BaseModel):
    # JSON true and "4" are rejected
    quality: StrictInt


class StudyRequest(BaseModel):
    owner_id: Optional[str] = None
    cap: Optional[int] = Field(default=None, ge=0)


class PresetInfo(BaseModel):
    id: str
    title: str
    size: int


class PoolStats(BaseModel):
    total: int
    learned: int
    learning: int
    due: int


class SessionView(BaseModel):
    phase: str  # "idle", "presenting", "revealed", "completed"
    index: Optional[int] = None
    length: int = 0
    reviewed: int = 0
    front: Optional[str] = None
    back: Optional[str] = None
    card_id: Optional[str] = None
    warnings: List[str] = []
