from __future__ import annotations

import calendar
from typing import Optional

from smbdash.services.aggregation import parse_timestamp

TYPE_LABELS = {
    "sale": "Sale",
    "purchase": "Purchase",
    "expense": "Operating expense",
    "capital": "Capital / donation",
}


def money(value: Optional[float]) -> str:
    if value is None:
        return "n/a"
    return f"{float(value):,.2f}"


def month_label(month: str) -> str:
    year, _, mm = month.partition("-")
    try:
        return f"{calendar.month_name[int(mm)]} {year}"
    except (ValueError, IndexError):
        return month


def timestamp_label(value: str) -> str:
    dt = parse_timestamp(value)
    return dt.strftime("%Y-%m-%d %H:%M") if dt else (value or "")


def day_label(value: str) -> str:
    # "YYYY-MM-DD" -> "DD/MM"
    return f"{value[8:10]}/{value[5:7]}" if len(value) >= 10 else value


def type_label(type_: str) -> str:
    return TYPE_LABELS.get(type_, type_)
