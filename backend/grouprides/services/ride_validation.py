"""
Single validation entry point for ride records.

Both the create and update paths run the full (merged) record through
``validate_ride`` so cross-field rules cannot be bypassed by a partial update.
"""
import re
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional
from grouprides.core.exceptions import ValidationError
from grouprides.models.ride import Difficulty, RecurringType

REQUIRED_FIELDS = ("title", "date", "start_time", "start_location", "difficulty")

_START_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

# Largest values the Numeric/Integer ride columns can hold
NUMERIC_LIMITS = {"distance": Decimal("9999.99"), "duration": Decimal("99.99")}
MAX_PARTICIPANTS_LIMIT = 2_147_483_647


def parse_ride_date(value: Any) -> datetime:
    """
    Parse an ISO date or datetime into a naive UTC datetime.

    ``"2024-06-01"`` becomes midnight of that day; offset-aware datetimes
    (including a trailing ``Z``) are converted to UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid date: {value!r}")
    else:
        raise ValueError(f"Invalid date: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_filter_date(value: str) -> date:
    """Parse the ``date`` list filter down to a calendar day."""
    try:
        return parse_ride_date(value).date()
    except ValueError:
        raise ValidationError.for_field("date", "Invalid date filter")


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not a number: {value!r}")
    if not number.is_finite():
        raise ValueError(f"Not a number: {value!r}")
    return number


def validate_ride(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate and normalize a complete ride record.

    Returns a new dict with enums coerced, the date parsed and decimals
    normalized. Raises ``ValidationError`` listing every failing field.
    """
    errors: List[Dict[str, str]] = []
    cleaned = dict(record)

    def fail(field: str, message: str):
        errors.append({"field": field, "message": message})

    for field in REQUIRED_FIELDS:
        value = cleaned.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            fail(field, f"{field} is required")

    if cleaned.get("date") is not None and not any(e["field"] == "date" for e in errors):
        try:
            cleaned["date"] = parse_ride_date(cleaned["date"])
        except ValueError:
            fail("date", "date must be an ISO date")

    difficulty = _enum_value(cleaned.get("difficulty"))
    if difficulty is not None and not any(e["field"] == "difficulty" for e in errors):
        try:
            cleaned["difficulty"] = Difficulty(difficulty)
        except ValueError:
            fail("difficulty", "difficulty must be one of: easy, intermediate, advanced")

    start_time = cleaned.get("start_time")
    if isinstance(start_time, str) and start_time.strip() and not _START_TIME_RE.match(start_time):
        fail("start_time", "start_time must be HH:MM (24-hour)")

    is_recurring = bool(cleaned.get("is_recurring") or False)
    cleaned["is_recurring"] = is_recurring
    recurring_type = _enum_value(cleaned.get("recurring_type"))
    if recurring_type is not None:
        if not is_recurring:
            fail("recurring_type", "recurring_type is only allowed on recurring rides")
        else:
            try:
                cleaned["recurring_type"] = RecurringType(recurring_type)
            except ValueError:
                fail("recurring_type", "recurring_type must be one of: weekly, monthly, custom")

    max_participants = cleaned.get("max_participants")
    if max_participants is not None:
        if isinstance(max_participants, bool) or not isinstance(max_participants, int) or max_participants < 1:
            fail("max_participants", "max_participants must be a positive integer")
        elif max_participants > MAX_PARTICIPANTS_LIMIT:
            fail("max_participants", f"max_participants must be at most {MAX_PARTICIPANTS_LIMIT}")

    for field, upper in NUMERIC_LIMITS.items():
        try:
            number = _to_decimal(cleaned.get(field))
        except ValueError:
            fail(field, f"{field} must be a number")
            continue
        if number is not None and number < 0:
            fail(field, f"{field} must not be negative")
        elif number is not None and number > upper:
            fail(field, f"{field} must be at most {upper}")
        cleaned[field] = number

    for field, limit in (("start_latitude", 90), ("start_longitude", 180)):
        try:
            number = _to_decimal(cleaned.get(field))
        except ValueError:
            fail(field, f"{field} must be a number")
            continue
        if number is not None and not -limit <= number <= limit:
            fail(field, f"{field} must be between -{limit} and {limit}")
        cleaned[field] = number

    for flag in ("requires_approval", "has_route_map"):
        cleaned[flag] = bool(cleaned.get(flag) or False)

    if errors:
        raise ValidationError("Invalid ride data", errors=errors)
    return cleaned
