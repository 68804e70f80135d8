# -*- coding: utf-8 -*-
"""Date / number formatting shared by the dashboard view-models."""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Optional, Union

DateLike = Union[date, datetime, str]

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def parse_date(value: DateLike) -> date:
    """Accepts a date, a datetime or an ISO string (`YYYY-MM-DD` or a full timestamp)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        raise ValueError("empty date")
    return date.fromisoformat(text[:10])


def format_date(value: DateLike) -> str:
    return parse_date(value).isoformat()


def current_date() -> str:
    return date.today().isoformat()


def format_display_date(value: DateLike) -> str:
    """`Monday, January 1, 2023`"""
    d = parse_date(value)
    return f"{_WEEKDAYS[d.weekday()]}, {_MONTHS[d.month - 1]} {d.day}, {d.year}"


def format_short_date(value: DateLike) -> str:
    """`January 1, 2023`"""
    d = parse_date(value)
    return f"{_MONTHS[d.month - 1]} {d.day}, {d.year}"


def format_compact_date(value: DateLike) -> str:
    """`Jan 01, 2023`"""
    d = parse_date(value)
    return f"{_MONTHS[d.month - 1][:3]} {d.day:02d}, {d.year}"


def format_chart_label(value: DateLike) -> str:
    """`Mar 04`"""
    d = parse_date(value)
    return f"{_MONTHS[d.month - 1][:3]} {d.day:02d}"


def format_time_12h(value: str) -> str:
    """`HH:MM[:SS]` -> `9:30 AM`."""
    parts = str(value).strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"invalid time: {value!r}")
    hours = int(parts[0])
    minutes = int(parts[1])
    period = "PM" if hours >= 12 else "AM"
    hours12 = hours % 12 or 12
    return f"{hours12}:{minutes:02d} {period}"


def is_today(value: DateLike, *, today: Optional[date] = None) -> bool:
    return parse_date(value) == (today or date.today())


def is_date_in_past(value: DateLike, *, today: Optional[date] = None) -> bool:
    return parse_date(value) < (today or date.today())


def days_between(a: DateLike, b: DateLike) -> int:
    return abs((parse_date(b) - parse_date(a)).days)


def format_number(value: Optional[float], digits: int = 0) -> str:
    if value is None:
        return "0"
    return f"{float(value):.{digits}f}"


def format_delta(value: Optional[float], unit: str = "", digits: int = 1) -> Optional[str]:
    """Signed change text: `+1.5 kg`, `-0.3 %`; None stays None."""
    if value is None:
        return None
    sign = "+" if value > 0 else ""
    text = f"{sign}{float(value):.{digits}f}"
    return f"{text} {unit}" if unit else text


def round_half_up(value: float, digits: int = 0):
    """Halves round up: `2.5 -> 3`, `-2.5 -> -2` (the built-in `round` goes to even)."""
    scale = 10 ** digits
    rounded = math.floor(float(value) * scale + 0.5) / scale
    return int(rounded) if digits == 0 else rounded
