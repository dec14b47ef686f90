import re
from typing import Optional

from vehicle_valuation_service.app.models import ValuationResponseDB

MULTIPLIERS = {
    "l": 100_000,
    "lac": 100_000,
    "lacs": 100_000,
    "lakh": 100_000,
    "lakhs": 100_000,
    "cr": 10_000_000,
    "crore": 10_000_000,
    "crores": 10_000_000,
}

_AMOUNT = r"(\d[\d,]*(?:\.\d+)?)\s*(crores?|cr|lakhs?|lacs?|l)?\b"


def _range_pattern(label: str) -> re.Pattern:
    # "<label>" then anything but digits on the same line, then the first amount
    return re.compile(rf"\b{label}\b[^\d\n]*?{_AMOUNT}", re.IGNORECASE)


RANGE_PATTERNS = {
    "low_range": _range_pattern("low"),
    "mid_range": _range_pattern("mid"),
    "high_range": _range_pattern("high"),
}


def parse_inr_amount(digits: str, unit: Optional[str] = None) -> float:
    try:
        amount = float(digits.replace(",", ""))
    except ValueError:
        return 0.0
    if unit:
        amount *= MULTIPLIERS.get(unit.lower(), 1)
    return round(amount, 2)


def parse_valuation_ranges(text: Optional[str]) -> ValuationResponseDB:
    """
    Extracts the Low / Mid / High INR amounts from the assistant's answer.

    Each range is the first amount after its label, e.g. "Low: ₹7,50,000" or
    "Mid: ₹8.2 L". A range that cannot be found is 0.
    """
    text = text or ""
    ranges = {}
    for field_name, pattern in RANGE_PATTERNS.items():
        match = pattern.search(text)
        ranges[field_name] = parse_inr_amount(match.group(1), match.group(2)) if match else 0.0
    return ValuationResponseDB(raw_response=text, **ranges)
