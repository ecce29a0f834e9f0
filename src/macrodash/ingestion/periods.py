"""Period label parsing and formatting.

Adapters turn provider period encodings into one label vocabulary:

    monthly    "Jan 2024"
    quarterly  "2024 Q1"
    annual     "2024"
    daily      "2024-01-31"   (also weekly)

parse_label() reads any of those back (plus the raw provider codes
"2024Q1" and "2024M01") so labels can be sorted and advanced.
"""

import re
from datetime import date, datetime

import pandas as pd

_QUARTER_RE = re.compile(r"^(\d{4})\s*Q([1-4])$")
_MONTH_CODE_RE = re.compile(r"^(\d{4})\s*M(\d{2})$")
_YEAR_RE = re.compile(r"^\d{4}$")


def month_label(year: int, month: int) -> str:
    """Format a year/month pair as "Mon YYYY"."""
    return date(int(year), int(month), 1).strftime("%b %Y")


def quarter_label(year: int, quarter: int) -> str:
    """Format a year/quarter pair as "YYYY Q#"."""
    return f"{int(year)} Q{int(quarter)}"


def label_for_date(value: date | datetime | pd.Timestamp, frequency: str) -> str:
    """Format an observation date according to the series frequency."""
    ts = pd.Timestamp(value)
    freq = (frequency or "").lower()
    if freq.startswith("q"):
        return quarter_label(ts.year, ts.quarter)
    if freq.startswith("m"):
        return month_label(ts.year, ts.month)
    if freq.startswith("a") or freq.startswith("y"):
        return str(ts.year)
    return ts.strftime("%Y-%m-%d")


def parse_provider_period(period: str) -> str:
    """Convert a BEA-style period code ("2023Q1", "2023M04", "2023") to a label.

    Unrecognized codes are returned unchanged.
    """
    code = str(period).strip()
    match = _QUARTER_RE.match(code)
    if match:
        return quarter_label(match.group(1), match.group(2))
    match = _MONTH_CODE_RE.match(code)
    if match and 1 <= int(match.group(2)) <= 12:
        return month_label(match.group(1), match.group(2))
    return code


def parse_label(label: str) -> pd.Timestamp | None:
    """Return the start timestamp of a period label, or None if unparseable."""
    text = str(label).strip()
    if not text:
        return None

    match = _QUARTER_RE.match(text)
    if match:
        return pd.Period(f"{match.group(1)}Q{match.group(2)}", freq="Q").to_timestamp()

    match = _MONTH_CODE_RE.match(text)
    if match:
        month = int(match.group(2))
        return pd.Timestamp(int(match.group(1)), month, 1) if 1 <= month <= 12 else None

    if _YEAR_RE.match(text):
        return pd.Timestamp(int(text), 1, 1)

    for fmt in ("%b %Y", "%Y-%m-%d", "%B %Y", "%Y-%m"):
        try:
            return pd.Timestamp(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return None


def advance_months(label: str, periods: int) -> list[str]:
    """Return `periods` "Mon YYYY" labels, one month apart, after `label`.

    Falls back to "+1", "+2", ... when the label cannot be parsed.
    """
    start = parse_label(label)
    if start is None:
        return [f"+{i + 1}" for i in range(periods)]

    labels = []
    for i in range(periods):
        ts = start + pd.DateOffset(months=i + 1)
        labels.append(month_label(ts.year, ts.month))
    return labels
