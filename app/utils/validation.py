"""
Request payload helpers shared by the CRUD blueprints.

Form values arrive the way the admin screens send them: numbers and dates
as strings, optional fields as empty strings. These helpers turn empty input
into ``None`` and raise ``ValidationError`` for anything unusable.
"""
import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ValidationError(Exception):
    """Raised when a request payload fails a form check (returned as 400)."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field


def is_blank(value):
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def missing_fields(data, required):
    """Return the names in ``required`` that are absent or blank in ``data``."""
    data = data or {}
    return [name for name in required if is_blank(data.get(name))]


def require_fields(data, required, message=None):
    missing = missing_fields(data, required)
    if missing:
        raise ValidationError(
            message or f"Please fill in required fields: {', '.join(missing)}",
            field=missing[0],
        )


def parse_int(value, field="value"):
    if is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a whole number", field=field)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValidationError(f"{field} must be a whole number", field=field)


def parse_float(value, field="value"):
    if is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", field=field)
    try:
        result = float(value) if isinstance(value, (int, float)) else float(str(value).strip())
    except ValueError:
        raise ValidationError(f"{field} must be a number", field=field)
    if not math.isfinite(result):
        raise ValidationError(f"{field} must be a number", field=field)
    return result


def parse_decimal(value, field="value"):
    """Money fields are stored as DECIMAL; keep them exact."""
    if is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", field=field)
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number", field=field)
    if not result.is_finite():
        raise ValidationError(f"{field} must be a number", field=field)
    return result


def parse_date(value, field="date"):
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    # Accept full ISO timestamps from date pickers, keep the date part
    try:
        return datetime.strptime(text[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD format", field=field)


def parse_bool(value, field="value", default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    text = str(value).strip().lower()
    if text in ("true", "1", "yes", "on"):
        return True
    if text in ("false", "0", "no", "off", ""):
        return False
    raise ValidationError(f"{field} must be true or false", field=field)


def require_text(value, field="value"):
    """Strip a required text field; numbers and objects are rejected."""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be text", field=field)
    return value.strip()


def optional_str(value):
    if is_blank(value):
        return None
    return str(value).strip()


def check_choice(field, value, choices):
    if value not in choices:
        raise ValidationError(
            f"Invalid {field} '{value}'. Expected one of: {', '.join(choices)}",
            field=field,
        )
    return value


def check_email(value, field="email"):
    if is_blank(value):
        return None
    value = str(value).strip()
    if not EMAIL_PATTERN.match(value):
        raise ValidationError(f"{field} is not a valid email address", field=field)
    return value
