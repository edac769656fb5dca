from datetime import date
from typing import Any

from exceptions.custom_errors import ValidationFailedError
from utils.date_utils import normalise_date


def require_fields(**fields: Any) -> None:
    """
    Raise `ValidationFailedError` naming every field that is None or empty.

    Example:
        require_fields(regionId=region_id, date=day)
    """
    missing = [
        name for name, value in fields.items() if value is None or value == "" or value == []
    ]
    if missing:
        raise ValidationFailedError(
            f"Missing required field(s): {', '.join(missing)}", missingFields=missing
        )


def parse_day(value: Any, field: str = "date") -> date:
    """Normalise a date-like input, reporting malformed values as validation failures."""
    if value is None or value == "":
        raise ValidationFailedError(
            f"Missing required field(s): {field}", missingFields=[field]
        )
    try:
        return normalise_date(value)
    except ValueError as e:
        raise ValidationFailedError(str(e), field=field)


def non_negative_int(value: Any, field: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationFailedError(f"'{field}' must be an integer", field=field)
    if number < 0:
        raise ValidationFailedError(f"'{field}' must not be negative", field=field)
    return number
