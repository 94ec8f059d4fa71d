"""
Data models: BookingRecord (unit stay), AddOn (extra sale), UnitDefinition,
BaseExpense / MonthlyExpense (fixed costs).

Money is always Decimal. to_dict() produces the JSON shape kept in the
store (money as float with 2 decimals, dates as YYYY-MM-DD); from_dict()
accepts whatever is in the store, missing keys and unknown enum values
included.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import List, Optional, Union

CENT = Decimal("0.01")


def to_money(val) -> Decimal:
    """Converts a number/string to Decimal with 2 decimals. Invalid → 0.00."""
    if val is None or isinstance(val, bool):
        return Decimal("0.00")
    try:
        d = Decimal(str(val).strip())
        if not d.is_finite():
            return Decimal("0.00")
        # beyond 28 significant digits quantize raises InvalidOperation
        return d.quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return Decimal("0.00")


def new_id() -> str:
    return str(uuid.uuid4())


class _FallbackEnum(str, Enum):
    """str Enum that maps unknown values to a fallback member."""

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls._fallback()

    @classmethod
    def _fallback(cls):
        raise NotImplementedError


class Platform(_FallbackEnum):
    DIRECT = "Direct"
    AIRBNB = "Airbnb"
    BOOKING_COM = "Booking.com"
    AGODA = "Agoda"
    ICAL = "iCal"
    WEBSITE = "Website"

    @classmethod
    def _fallback(cls):
        return cls.DIRECT


class AddOnState(_FallbackEnum):
    FORECASTED = "forecasted"
    PRE_SOLD = "pre_sold"
    ACTUAL = "actual"

    @classmethod
    def _fallback(cls):
        return cls.FORECASTED


class AddOnCategory(_FallbackEnum):
    TOURS = "Tours"
    ISLAND_HOPPING = "Island Hopping"
    FOOD_BEVERAGE = "Food & Beverage"
    TRANSPORTATION = "Transportation"  # pass-through
    OTHER = "Other"

    @classmethod
    def _fallback(cls):
        return cls.OTHER

    @property
    def is_profit_generating(self) -> bool:
        return self is not AddOnCategory.TRANSPORTATION


class ExpenseCategory(_FallbackEnum):
    LABOR = "Labor"
    FUEL = "Fuel"
    FOOD_BEVERAGE = "Food & Beverage"
    PROFESSIONAL_SERVICES = "Professional Services"
    CLEANING_SUPPLIES = "Cleaning & Supplies"
    REPAIRS_MAINTENANCE = "Repairs & Maintenance"
    UTILITIES_TELECOM = "Utilities / Telecom"
    OTHER = "Other"

    @classmethod
    def _fallback(cls):
        return cls.OTHER


class UnitType(_FallbackEnum):
    PRIVATE_ROOM = "Private Room"
    ENTIRE_UNIT = "Entire Unit"
    DORM_BED_MIXED = "Dorm Bed (Mixed)"
    DORM_BED_FEMALE = "Dorm Bed (Female)"
    DORM_BED_MALE = "Dorm Bed (Male)"
    CAPSULE = "Capsule"
    OTHER = "Other"

    @classmethod
    def _fallback(cls):
        return cls.OTHER


def _fmt_date(d: Optional[date]) -> str:
    return d.strftime("%Y-%m-%d") if d else ""


def _parse_date(val) -> Optional[date]:
    if isinstance(val, date):
        return val
    if not val:
        return None
    try:
        return datetime.strptime(str(val).strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


@dataclass
class AddOn:
    """An extra sale attached to a booking (tour, island hopping, transfer...)."""
    category: AddOnCategory
    name: str
    amount: Decimal
    state: AddOnState = AddOnState.FORECASTED
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category.value,
            "name": self.name,
            "amount": float(self.amount),
            "status": self.state.value,
            "date": self.created_at,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "AddOn":
        return cls(
            id=d.get("id") or new_id(),
            category=AddOnCategory.parse(d.get("category")),
            name=d.get("name", ""),
            amount=to_money(d.get("amount")),
            state=AddOnState.parse(d.get("status")),
            created_at=d.get("date") or "",
        )


@dataclass
class BookingRecord:
    """One unit stay. Sibling records of a multi-unit booking share booking_reference."""
    booking_reference: str
    guest_name: str
    unit: str
    platform: Platform
    guests: int
    check_in: date
    check_out: date
    amount: Decimal          # room only
    paid: Decimal            # collected against amount only
    add_ons: List[AddOn] = field(default_factory=list)
    internal_id: str = field(default_factory=new_id)
    notes: str = ""

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def to_dict(self) -> dict:
        return {
            "internal_id": self.internal_id,
            "booking_reference": self.booking_reference,
            "guest_name": self.guest_name,
            "unit": self.unit,
            "platform": self.platform.value,
            "guests": self.guests,
            "check_in": _fmt_date(self.check_in),
            "check_out": _fmt_date(self.check_out),
            "amount": float(self.amount),
            "paid": float(self.paid),
            "notes": self.notes,
            "add_ons": [a.to_dict() for a in self.add_ons],
        }

    @classmethod
    def from_dict(cls, d: dict) -> "BookingRecord":
        try:
            guests = int(d.get("guests") or 1)
        except (TypeError, ValueError):
            guests = 1
        return cls(
            internal_id=d.get("internal_id") or new_id(),
            booking_reference=str(d.get("booking_reference", "")),
            guest_name=d.get("guest_name", ""),
            unit=d.get("unit", ""),
            platform=Platform.parse(d.get("platform")),
            guests=guests,
            check_in=_parse_date(d.get("check_in")),
            check_out=_parse_date(d.get("check_out")),
            amount=to_money(d.get("amount")),
            paid=to_money(d.get("paid")),
            notes=d.get("notes") or "",
            add_ons=[AddOn.from_dict(a) for a in d.get("add_ons") or []],
        )


@dataclass
class UnitDefinition:
    """A rentable unit. name is the key used by BookingRecord.unit."""
    name: str
    type: UnitType = UnitType.ENTIRE_UNIT
    max_guests: int = 4
    base_nightly_rate: Decimal = Decimal("0.00")
    include_in_occupancy: bool = True
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "maxGuests": self.max_guests,
            "baseNightlyRate": float(self.base_nightly_rate),
            "includeInOccupancy": self.include_in_occupancy,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "UnitDefinition":
        return cls(
            id=d.get("id") or new_id(),
            name=d.get("name", ""),
            type=UnitType.parse(d.get("type")),
            max_guests=int(d.get("maxGuests") or 0),
            base_nightly_rate=to_money(d.get("baseNightlyRate")),
            include_in_occupancy=bool(d.get("includeInOccupancy", True)),
        )


@dataclass
class BaseExpense:
    """Recurring expense, counted in every month while active."""
    name: str
    category: ExpenseCategory
    amount: Decimal
    active: bool = True
    id: str = field(default_factory=new_id)

    is_recurring = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "amount": float(self.amount),
            "isRecurring": True,
            "active": self.active,
        }


@dataclass
class MonthlyExpense:
    """One-off expense tied to a single month (YYYY-MM)."""
    name: str
    category: ExpenseCategory
    amount: Decimal
    month: str
    id: str = field(default_factory=new_id)

    is_recurring = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "amount": float(self.amount),
            "month": self.month,
            "isRecurring": False,
        }


Expense = Union[BaseExpense, MonthlyExpense]


def expense_from_dict(d: dict) -> Expense:
    """Builds the right Expense variant from the isRecurring tag."""
    common = dict(
        id=d.get("id") or new_id(),
        name=d.get("name", ""),
        category=ExpenseCategory.parse(d.get("category")),
        amount=to_money(d.get("amount")),
    )
    if d.get("isRecurring", "month" not in d):
        return BaseExpense(active=bool(d.get("active", True)), **common)
    return MonthlyExpense(month=d.get("month", ""), **common)
