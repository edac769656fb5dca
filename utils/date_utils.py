import pandas as pd
from datetime import date as dt_date, datetime, timedelta
from typing import Iterator, Optional


def normalise_date(input_date) -> dt_date:
    """
    Convert input to a datetime.date object.
    Supports date, datetime, pd.Timestamp and strings like
    '2025-07-07', '2025/07/07', '20250707', 'Mon 2025-07-07'.
    """
    if isinstance(input_date, dt_date) and not isinstance(input_date, datetime):
        return input_date
    elif isinstance(input_date, pd.Timestamp):
        return input_date.date()
    elif isinstance(input_date, datetime):
        return input_date.date()
    elif isinstance(input_date, str):
        try:
            # pandas handles all common formats using dateutil.parser under the hood
            return pd.to_datetime(input_date.strip(), errors="raise").date()
        except Exception as e:
            raise ValueError(f"Could not parse date string '{input_date}': {e}")
    raise ValueError(f"Unsupported date type: {type(input_date)}")


def normalise_datetime(value):
    """Convert input to a datetime, or None when empty."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    try:
        return pd.to_datetime(value, errors="raise").to_pydatetime()
    except Exception as e:
        raise ValueError(f"Could not parse datetime '{value}': {e}")


def days_until(target: dt_date, today: dt_date) -> int:
    """
    Calendar-day difference between two days, both taken at midnight.
    Negative when the target is in the past.
    """
    return (normalise_date(target) - normalise_date(today)).days


def date_range(start: dt_date, days: int) -> Iterator[dt_date]:
    """Yield `days` consecutive dates starting at `start`."""
    for offset in range(days):
        yield start + timedelta(days=offset)


def iso(day) -> Optional[str]:
    return day.isoformat() if day is not None else None


def system_clock() -> datetime:
    """Default wall clock; engines accept any zero-argument callable instead."""
    return datetime.now()
