"""
Parser for reservation tables pasted or uploaded as CSV text.

Format (exported template or channel manager export):
  booking_id,guest_name,platform,unit,check_in,check_out,total_amount,paid_amount,guests

  - The header is not necessarily on the first line: the first line that
    contains booking_id, guest_name and unit (any order, any case, extra
    columns allowed) is taken as header.
  - Dates are YYYY-MM-DD.
  - Multi-unit bookings appear as one row per unit with the same booking_id.
    If all the rows of the group carry the same positive total, that total
    was entered once for the whole booking and is split across the units.
    If the totals differ, each row already holds its own unit amount.
"""

import csv
import io
import logging
import uuid
from collections import OrderedDict
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, List, Optional, Tuple

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.dates import parse_iso_date
from core.models import BookingRecord, Platform, CENT, to_money
from config import PLATFORM_RULES, REQUIRED_HEADER_FIELDS, TEMPLATE_COLUMNS

logger = logging.getLogger(__name__)

MISSING_HEADER_ERROR = (
    "CSV missing required headers: " + ", ".join(REQUIRED_HEADER_FIELDS)
)


class ImportOutcome(Enum):
    PARSED = "parsed"      # at least one booking
    NO_DATA = "no_data"    # header found, no rows, no errors
    FAILED = "failed"      # nothing usable, with errors


def _split_line(line: str) -> List[str]:
    """Splits a CSV line into trimmed fields without surrounding quotes."""
    fields = next(csv.reader([line], skipinitialspace=True), [])
    return [f.strip().strip('"').strip() for f in fields]


def _find_header(lines: List[str]) -> Tuple[Optional[Dict[str, int]], int]:
    """
    Returns (column name → index, index of the first data line).
    (None, 0) if no line has all the required fields.
    """
    for i, line in enumerate(lines):
        if not line.strip():
            continue
        tokens = [t.lower() for t in _split_line(line)]
        if all(h in tokens for h in REQUIRED_HEADER_FIELDS):
            header_map = {}
            for idx, token in enumerate(tokens):
                header_map[token] = idx
            return header_map, i + 1
    return None, 0


def detect_platform(val: str) -> Platform:
    """Maps a free-text platform/channel to Platform. Unknown → Direct."""
    val_lower = (val or "").lower()
    for keyword, platform in PLATFORM_RULES:
        if keyword in val_lower:
            return Platform(platform)
    return Platform.DIRECT


def _to_int(val: str, default: int) -> int:
    try:
        n = int(Decimal(val.strip()))
    except (ArithmeticError, ValueError):
        return default
    return n if n > 0 else default


def _generated_reference() -> str:
    # Real references are numeric or alphanumeric codes, never prefixed GEN-
    return f"GEN-{uuid.uuid4().hex[:6]}"


def _split_amount(values: List[Decimal]) -> List[Decimal]:
    """
    Same positive amount on every row → one total to split (rounded to cents).
    Otherwise every row keeps its own amount.
    """
    count = len(values)
    if count < 2:
        return list(values)
    first = values[0]
    all_same = all(abs(v - first) < CENT for v in values)
    if all_same and first > 0:
        share = (first / count).quantize(CENT, rounding=ROUND_HALF_UP)
        return [share] * count
    return list(values)


def parse_booking_text(text: str) -> Tuple[List[BookingRecord], List[str]]:
    """
    Reads the CSV text and returns (bookings, errors).

    - No header line → ([], [error]) without looking at the rows
    - Rows without unit, check_in or check_out → skipped (blank/footer lines)
    - Invalid dates or check_out not after check_in → row rejected with error
    - Unreadable amounts → 0, unreadable guests → 1
    """
    clean = (text or "").lstrip("\ufeff")
    lines = clean.splitlines()
    logger.debug("Parsing CSV with %d lines", len(lines))

    header_map, data_start = _find_header(lines)
    if header_map is None:
        logger.info("Import rejected: no header line found")
        return [], [MISSING_HEADER_ERROR]

    errors: List[str] = []
    rows = []
    for line_num in range(data_start, len(lines)):
        line = lines[line_num].strip()
        if not line:
            continue

        parts = _split_line(line)

        def get_value(key: str) -> str:
            idx = header_map.get(key)
            if idx is not None and idx < len(parts):
                return parts[idx]
            return ""

        unit = get_value("unit")
        check_in_str = get_value("check_in")
        check_out_str = get_value("check_out")
        if not unit or not check_in_str or not check_out_str:
            continue

        check_in = parse_iso_date(check_in_str)
        check_out = parse_iso_date(check_out_str)
        if check_in is None or check_out is None:
            errors.append(
                f"Row {line_num + 1}: invalid date "
                f"(check_in={check_in_str!r}, check_out={check_out_str!r}), expected YYYY-MM-DD"
            )
            continue
        if check_out <= check_in:
            errors.append(
                f"Row {line_num + 1}: check_out {check_out_str} is not after check_in {check_in_str}"
            )
            continue

        rows.append({
            "booking_reference": get_value("booking_id") or _generated_reference(),
            "guest_name": get_value("guest_name") or "Unknown",
            "unit": unit,
            "platform": detect_platform(get_value("platform")),
            "check_in": check_in,
            "check_out": check_out,
            "amount": to_money(get_value("total_amount")),
            "paid": to_money(get_value("paid_amount")),
            "guests": _to_int(get_value("guests"), 1),
        })

    # Group by reference, keeping first-seen order
    groups: "OrderedDict[str, list]" = OrderedDict()
    for row in rows:
        groups.setdefault(row["booking_reference"], []).append(row)

    bookings = []
    for group_rows in groups.values():
        amounts = _split_amount([r["amount"] for r in group_rows])
        paids = _split_amount([r["paid"] for r in group_rows])
        for r, amount, paid in zip(group_rows, amounts, paids):
            bookings.append(BookingRecord(
                booking_reference=r["booking_reference"],
                guest_name=r["guest_name"],
                unit=r["unit"],
                platform=r["platform"],
                guests=r["guests"],
                check_in=r["check_in"],
                check_out=r["check_out"],
                amount=amount,
                paid=paid,
                add_ons=[],
            ))

    logger.info(
        "Parsed %d bookings in %d groups, %d row errors",
        len(bookings), len(groups), len(errors),
    )
    return bookings, errors


def import_outcome(bookings: List[BookingRecord], errors: List[str]) -> ImportOutcome:
    """Tells an empty/header-only file apart from a malformed one."""
    if bookings:
        return ImportOutcome.PARSED
    if errors:
        return ImportOutcome.FAILED
    return ImportOutcome.NO_DATA


def template_csv() -> str:
    """Blank template: header line only."""
    return ",".join(TEMPLATE_COLUMNS)


def _group_totals(bookings: List[BookingRecord], attr: str) -> Dict[str, Decimal]:
    """
    Reference → total to write on each row, only for groups whose units all
    hold the same share (so that a new import splits them back the same way).
    """
    by_ref: Dict[str, List[Decimal]] = {}
    for b in bookings:
        by_ref.setdefault(b.booking_reference, []).append(getattr(b, attr))
    totals = {}
    for ref, values in by_ref.items():
        if len(values) > 1 and values[0] > 0 and all(v == values[0] for v in values):
            totals[ref] = values[0] * len(values)
    return totals


def bookings_to_csv(bookings: List[BookingRecord]) -> str:
    """
    Exports bookings in the template format (one row per unit).

    Evenly split groups are written with the group total on every row,
    which is what the parser expects for a combined amount.
    """
    amount_totals = _group_totals(bookings, "amount")
    paid_totals = _group_totals(bookings, "paid")

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(TEMPLATE_COLUMNS)
    for b in bookings:
        amount = amount_totals.get(b.booking_reference, b.amount)
        paid = paid_totals.get(b.booking_reference, b.paid)
        writer.writerow([
            b.booking_reference,
            b.guest_name,
            b.platform.value,
            b.unit,
            b.check_in.strftime("%Y-%m-%d"),
            b.check_out.strftime("%Y-%m-%d"),
            f"{amount:.2f}",
            f"{paid:.2f}",
            b.guests,
        ])
    return buf.getvalue()
