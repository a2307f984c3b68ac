import os
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .errors import PersistenceFailure
from .models import Card, DEFAULT_EASINESS


class CardStore(ABC):
    """Where cards live between sessions."""

    @abstractmethod
    def fetch_due(self, owner_id: str) -> List[Card]:
        """Returns the owner's card pool. Due filtering is left to select_session."""

    @abstractmethod
    def persist(self, card: Card) -> None:
        """Saves one card, last write wins. Raises PersistenceFailure."""

    @abstractmethod
    def add(self, cards: Iterable[Card]) -> None:
        ...


class MemoryCardStore(CardStore):
    def __init__(self, cards: Iterable[Card] = ()):
        self.cards: Dict[str, Card] = {c.id: c for c in cards}

    def fetch_due(self, owner_id: str) -> List[Card]:
        return [c for c in self.cards.values() if c.owner_id == owner_id]

    def persist(self, card: Card) -> None:
        self.cards[card.id] = card

    def add(self, cards: Iterable[Card]) -> None:
        for card in cards:
            self.cards[card.id] = card


class CsvCardStore(CardStore):
    COLUMNS = {
        'id': '',
        'owner_id': 'local',
        'front': '',
        'back': '',
        'interval': 0,
        'repetition': 0,
        'easiness_factor': DEFAULT_EASINESS,
        'due_at': 0,
        'last_reviewed': None,
        'mastery_level': 0,
    }

    def __init__(self, file_path: str = "flashcards.csv"):
        self.file_path = file_path
        self.df = None
        self._lock = threading.Lock()

    def load_data(self) -> pd.DataFrame:
        """Loads cards from CSV, or starts an empty table if the file is missing."""
        if not os.path.exists(self.file_path):
            logging.warning(f"File not found: {self.file_path}, starting with an empty pool")
            self.df = pd.DataFrame(columns=list(self.COLUMNS))
            return self.df

        self.df = pd.read_csv(self.file_path, encoding='utf-8-sig', dtype={'id': str, 'owner_id': str})
        self._ensure_columns()
        return self.df

    def _ensure_columns(self):
        # Handle legacy column names
        column_mappings = {
            'question': 'front', 'answer': 'back',
            'ease_factor': 'easiness_factor', 'repetitions': 'repetition',
        }
        for old, new in column_mappings.items():
            if old in self.df.columns and new not in self.df.columns:
                self.df[new] = self.df[old]

        for col, default in self.COLUMNS.items():
            if col not in self.df.columns:
                self.df[col] = default
            elif default is not None:
                self.df[col] = self.df[col].fillna(default)

        missing = self.df['id'] == ''
        if missing.any():
            self.df.loc[missing, 'id'] = [str(uuid.uuid4()) for _ in range(int(missing.sum()))]

    def save_data(self, df: Optional[pd.DataFrame] = None):
        if df is None:
            df = self.df
        if df is not None:
            df[list(self.COLUMNS)].to_csv(self.file_path, index=False, encoding='utf-8-sig')

    def _table(self) -> pd.DataFrame:
        if self.df is None:
            self.load_data()
        return self.df

    @staticmethod
    def _row_to_card(row: dict) -> Card:
        last_reviewed = row.get('last_reviewed')
        return Card(
            id=str(row['id']),
            owner_id=str(row['owner_id']),
            front=str(row['front']),
            back=str(row['back']),
            interval=int(float(row['interval'])),
            repetition=int(float(row['repetition'])),
            easiness_factor=float(row['easiness_factor']),
            due_at=int(float(row['due_at'])),
            last_reviewed=None if pd.isna(last_reviewed) else int(float(last_reviewed)),
            mastery_level=int(float(row['mastery_level'])),
        )

    def fetch_due(self, owner_id: str) -> List[Card]:
        with self._lock:
            df = self._table()
            rows = df[df['owner_id'] == owner_id].to_dict('records')
        return [self._row_to_card(row) for row in rows]

    def persist(self, card: Card) -> None:
        record = card.model_dump()
        with self._lock:
            try:
                df = self._table().copy()
                matches = df.index[df['id'] == card.id].tolist()
                if matches:
                    idx = matches[0]
                    for k, v in record.items():
                        if v is not None:
                            df.at[idx, k] = v
                else:
                    df = pd.concat([df, pd.DataFrame([record])], ignore_index=True)
                self.save_data(df)
            except (OSError, ValueError, pd.errors.ParserError) as e:
                raise PersistenceFailure(card.id, str(e)) from e
            self.df = df

    def add(self, cards: Iterable[Card]) -> None:
        records = [c.model_dump() for c in cards]
        if not records:
            return
        with self._lock:
            try:
                df = pd.concat([self._table(), pd.DataFrame(records)], ignore_index=True)
                self.save_data(df)
            except (OSError, ValueError, pd.errors.ParserError) as e:
                raise PersistenceFailure(records[0]['id'], str(e)) from e
            # only keep the new rows once they are on disk
            self.df = df
