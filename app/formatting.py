# app/formatting.py
"""
Display formatting for prices and timestamps (en-IN conventions).

Prices use Indian digit grouping: the last three digits, then groups of two
(7500000 -> 75,00,000). Timestamps are shown in IST.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Union

RUPEE_SIGN = "₹"
IST = timezone(timedelta(hours=5, minutes=30), "IST")

# Matches Number.toLocaleString('en-IN') default precision
MAX_FRACTION_DIGITS = 3

Number = Union[int, float]


def group_indian(digits: str) -> str:
    """Group a string of digits the Indian way: 1234567 -> 12,34,567."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_number_en_in(value: Number) -> str:
    """Format a number with Indian grouping and up to three decimals."""
    sign = "-" if value < 0 else ""
    rounded = round(abs(float(value)), MAX_FRACTION_DIGITS)
    whole, _, fraction = f"{rounded:.{MAX_FRACTION_DIGITS}f}".partition(".")
    fraction = fraction.rstrip("0")
    text = group_indian(whole)
    if fraction:
        text = f"{text}.{fraction}"
    if text == "0":
        sign = ""
    return f"{sign}{text}"


def format_inr(value: Number) -> str:
    """Format a Rupee amount: 7500000 -> '₹75,00,000'."""
    return f"{RUPEE_SIGN}{format_number_en_in(value)}"


def format_price_range(price_range: Optional[dict]) -> Optional[str]:
    """'₹70,00,000 - ₹80,00,000', or None when min/max are not numbers."""
    if not isinstance(price_range, dict):
        return None
    low, high = price_range.get("min"), price_range.get("max")
    if not _is_number(low) or not _is_number(high):
        return None
    return f"{format_inr(low)} - {format_inr(high)}"


def format_timestamp_en_in(value: Union[str, datetime]) -> str:
    """
    Format a stored timestamp as '17 October 2026, 09:35 pm' in IST.

    Naive timestamps are taken as UTC.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    local = value.astimezone(IST)
    hour = local.hour % 12 or 12
    meridiem = "am" if local.hour < 12 else "pm"
    return f"{local.day} {local.strftime('%B')} {local.year}, {hour:02d}:{local.minute:02d} {meridiem}"


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
