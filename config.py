"""
Centralized configuration - edit paths, store keys and mappings here.
"""

import os

# Folder for the JSON file store (one file per key)
DATA_DIR = os.environ.get(
    "AFFITTI_DATA_DIR",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "data"),
)

LOG_LEVEL = os.environ.get("AFFITTI_LOG_LEVEL", "INFO")

# Store keys - each holds a JSON array (whole collection)
STORE_KEY_BOOKINGS = "pc_bookings"
STORE_KEY_UNITS = "pc_units"
STORE_KEY_BASE_EXPENSES = "expenses:base"
STORE_KEY_MONTHLY_EXPENSES = "expenses:monthly"

# Google Sheets worksheet holding the key/value rows
SHEET_STORE = "store"

# Platform keyword → platform value (substring case-insensitive, first match wins)
PLATFORM_RULES = [
    ("airbnb", "Airbnb"),
    ("booking", "Booking.com"),
    ("front", "Direct"),
    ("web", "Website"),
    ("agoda", "Agoda"),
    ("ical", "iCal"),
]

# Fields that make a line the header (any order, extra columns allowed)
REQUIRED_HEADER_FIELDS = ("booking_id", "guest_name", "unit")

# Blank export template
TEMPLATE_COLUMNS = [
    "booking_id", "guest_name", "platform", "unit",
    "check_in", "check_out", "total_amount", "paid_amount", "guests",
]
TEMPLATE_FILENAME = "palawan_collective_export.csv"

# Island Hopping cost per realized trip
ISLAND_HOPPING_LABOR = 600
ISLAND_HOPPING_FUEL = 2000

# Defaults for units inferred from bookings
DEFAULT_UNIT_MAX_GUESTS = 4
DEFAULT_UNIT_NIGHTLY_RATE = 5000

# Add-on names rejected by the add-on manager (managed by the channel manager)
BLOCKED_ADDON_KEYWORDS = ("extended stay",)

CURRENCY_SYMBOL = "₱"

# Months selectable in the dashboard
MONTHS = [
    "2025-10", "2025-11", "2025-12",
    "2026-01", "2026-02", "2026-03",
    "2026-04", "2026-05", "2026-06",
    "2026-07", "2026-08", "2026-09",
]

# Sample data loaded on first start and on reset
INITIAL_BOOKINGS_CSV = """booking_id,guest_name,platform,unit,check_in,check_out,total_amount,paid_amount,guests
26304,Mattias Lindberg,Booking.com,G3,2025-12-15,2025-12-18,26077.5,0,2
26236,Jiří Kubricht,Airbnb,G3,2025-12-18,2025-12-22,26001.92,0,3
26363,Kenny Puyong,Front desk,G1,2025-12-20,2025-12-21,9500,4500,8
26363,Kenny Puyong,Front desk,G2,2025-12-20,2025-12-21,9500,4500,8
26322,Luca Angelucci,Booking.com,G1,2025-12-21,2025-12-25,58560,0,4
26322,Luca Angelucci,Booking.com,G2,2025-12-21,2025-12-25,58560,0,4
26332,Alexa Kieker,Website,G3,2025-12-22,2025-12-29,52500,26250,5
26325,Anaïs Sounack,Airbnb,G2,2025-12-26,2025-12-30,23999.36,0,3
26327,Andreas Jaegerman,Website,G1,2025-12-27,2025-12-29,12000,6000,3"""
