"""
Storage: a key-value store of whole collections (JSON arrays as bytes).

Backends:
  - MemoryStore   → tests / throwaway sessions
  - JsonFileStore → one <key>.json file per key in a folder
  - SheetsStore   → Google Sheets (core/sheets.py)

PropertyState reads the four collections once and writes back one whole
collection after every change.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.bookings import infer_units
from core.models import (
    BaseExpense, BookingRecord, MonthlyExpense, UnitDefinition, expense_from_dict,
)
from parsers.booking_csv import parse_booking_text
from config import (
    DATA_DIR, INITIAL_BOOKINGS_CSV,
    STORE_KEY_BASE_EXPENSES, STORE_KEY_BOOKINGS, STORE_KEY_MONTHLY_EXPENSES, STORE_KEY_UNITS,
)

logger = logging.getLogger(__name__)


class KeyValueStore:
    """load(key) → bytes or None if missing; save(key, bytes)."""

    def load(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    def save(self, key: str, data: bytes) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._data: Dict[str, bytes] = dict(initial or {})

    def load(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def save(self, key: str, data: bytes) -> None:
        self._data[key] = data


class JsonFileStore(KeyValueStore):
    def __init__(self, folder: str = None):
        self.folder = folder or DATA_DIR

    def _path(self, key: str) -> str:
        # "expenses:base" is not a valid file name on Windows
        return os.path.join(self.folder, key.replace(":", "_") + ".json")

    def load(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with open(path, "rb") as f:
            return f.read()

    def save(self, key: str, data: bytes) -> None:
        os.makedirs(self.folder, exist_ok=True)
        path = self._path(key)
        tmp_path = path + ".tmp"
        with open(tmp_path, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)


def _load_list(store: KeyValueStore, key: str) -> List[dict]:
    """Reads a JSON array. Missing or unreadable key → empty list."""
    raw = store.load(key)
    if not raw:
        return []
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        logger.warning("Unreadable data under key %r, ignored: %s", key, e)
        return []
    if not isinstance(data, list):
        logger.warning("Key %r does not hold a list, ignored", key)
        return []
    return data


def _save_list(store: KeyValueStore, key: str, items) -> None:
    payload = json.dumps([i.to_dict() for i in items], ensure_ascii=False)
    store.save(key, payload.encode("utf-8"))


def _load_bookings(store: KeyValueStore) -> List[BookingRecord]:
    """Saved bookings; records without a usable stay (dates) are skipped."""
    bookings = []
    for d in _load_list(store, STORE_KEY_BOOKINGS):
        if not isinstance(d, dict):
            logger.warning("Booking entry is not an object, ignored: %r", d)
            continue
        b = BookingRecord.from_dict(d)
        if b.check_in is None or b.check_out is None or b.check_out <= b.check_in:
            logger.warning(
                "Booking %r (%s) has invalid dates %r → %r, ignored",
                b.booking_reference, b.unit, d.get("check_in"), d.get("check_out"),
            )
            continue
        bookings.append(b)
    return bookings


def seed_bookings() -> List[BookingRecord]:
    bookings, _ = parse_booking_text(INITIAL_BOOKINGS_CSV)
    return bookings


@dataclass
class PropertyState:
    """In-memory collections of the property, backed by a store."""
    store: KeyValueStore
    bookings: List[BookingRecord] = field(default_factory=list)
    units: List[UnitDefinition] = field(default_factory=list)
    base_expenses: List[BaseExpense] = field(default_factory=list)
    monthly_expenses: List[MonthlyExpense] = field(default_factory=list)

    @classmethod
    def load(cls, store: KeyValueStore) -> "PropertyState":
        """
        Reads all collections. Without saved bookings the sample data is
        loaded and saved, as on a first start. Saved bookings without units
        get their units rebuilt from the bookings.
        """
        state = cls(store=store)
        bookings = _load_bookings(store)
        units = [UnitDefinition.from_dict(d) for d in _load_list(store, STORE_KEY_UNITS)]
        if not bookings:
            logger.info("No saved bookings: loading sample data")
            state._reseed()
        else:
            state.bookings = bookings
            if units:
                state.units = units
            else:
                logger.info("No saved units: rebuilding them from %d bookings", len(bookings))
                state.save_units(infer_units(bookings))

        expenses = [expense_from_dict(d) for d in _load_list(store, STORE_KEY_BASE_EXPENSES)]
        state.base_expenses = [e for e in expenses if isinstance(e, BaseExpense)]
        expenses = [expense_from_dict(d) for d in _load_list(store, STORE_KEY_MONTHLY_EXPENSES)]
        state.monthly_expenses = [e for e in expenses if isinstance(e, MonthlyExpense)]
        return state

    def _reseed(self) -> None:
        self.bookings = seed_bookings()
        self.units = infer_units(self.bookings)
        self.save_bookings(self.bookings)
        self.save_units(self.units)

    def save_bookings(self, bookings: List[BookingRecord]) -> None:
        self.bookings = list(bookings)
        _save_list(self.store, STORE_KEY_BOOKINGS, self.bookings)

    def save_units(self, units: List[UnitDefinition]) -> None:
        self.units = list(units)
        _save_list(self.store, STORE_KEY_UNITS, self.units)

    def save_expenses(self, base_expenses: List[BaseExpense], monthly_expenses: List[MonthlyExpense]) -> None:
        self.base_expenses = list(base_expenses)
        self.monthly_expenses = list(monthly_expenses)
        _save_list(self.store, STORE_KEY_BASE_EXPENSES, self.base_expenses)
        _save_list(self.store, STORE_KEY_MONTHLY_EXPENSES, self.monthly_expenses)

    def reset(self) -> None:
        """Back to the sample bookings and units. Expenses are kept."""
        self._reseed()
