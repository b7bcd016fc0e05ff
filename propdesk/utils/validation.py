import re
from decimal import Decimal, InvalidOperation

from ..errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_email(email: str) -> bool:
    """Basic local@domain.tld shape check."""
    return bool(EMAIL_PATTERN.match(email or ""))


def normalize_email(email) -> str:
    if email is not None and not isinstance(email, str):
        raise ValidationError("email must be a string")
    email = (email or "").strip().lower()
    if not email:
        raise ValidationError("email is required")
    if not validate_email(email):
        raise ValidationError("Invalid email address")
    return email


def require_text(data, field, max_length=255) -> str:
    value = data.get(field)
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field} is required")
    if len(value) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return value


def optional_text(data, field, max_length=255) -> str:
    """Like require_text, but a missing or blank value gives "" instead of an error."""
    value = data.get(field)
    if value is None or (isinstance(value, str) and not value.strip()):
        return ""
    return require_text(data, field, max_length=max_length)


def parse_rent(value) -> Decimal:
    if value is None or value == "":
        raise ValidationError("rent is required")
    if isinstance(value, bool):
        raise ValidationError("rent must be a valid number")
    try:
        rent = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError("rent must be a valid number")
    if not rent.is_finite():
        raise ValidationError("rent must be a valid number")
    if rent < 0:
        raise ValidationError("rent must not be negative")
    return rent.quantize(Decimal("0.01"))


def parse_id(value, field):
    """Optional integer foreign key from a JSON payload ("" and None mean unset)."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer")
