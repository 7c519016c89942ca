"""Input validation predicates.

All format checks trim their input first; ``None`` and blank strings fail
every format check.
"""

import re
from decimal import Decimal
from typing import Optional, Union

from pydantic import AnyUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@(.+)$")
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]{3,20}$")
NAME_PATTERN = re.compile(r"^[a-zA-Z\s'-]{2,50}$")
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$", re.ASCII)
PHONE_SEPARATORS = re.compile(r"[\s\-()]")

Number = Union[int, float, Decimal]

_url_adapter = TypeAdapter(AnyUrl)


def _matches(pattern: re.Pattern, value: Optional[str]) -> bool:
    if value is None or not value.strip():
        return False
    return pattern.fullmatch(value.strip()) is not None


def is_valid_email(email: Optional[str]) -> bool:
    return _matches(EMAIL_PATTERN, email)


def is_valid_username(username: Optional[str]) -> bool:
    return _matches(USERNAME_PATTERN, username)


def is_valid_name(name: Optional[str]) -> bool:
    return _matches(NAME_PATTERN, name)


def is_valid_phone(phone: Optional[str]) -> bool:
    if phone is None or not phone.strip():
        return False
    return _matches(PHONE_PATTERN, PHONE_SEPARATORS.sub("", phone))


def is_not_empty(value: Optional[str]) -> bool:
    return value is not None and bool(value.strip())


def is_in_range(value: Optional[Number], minimum: Number, maximum: Number) -> bool:
    """Inclusive on both bounds."""
    return value is not None and minimum <= value <= maximum


def is_positive(value: Optional[Number]) -> bool:
    return value is not None and value > 0


def is_not_negative(value: Optional[Number]) -> bool:
    return value is not None and value >= 0


def is_string_length_valid(
    value: Optional[str], min_length: int, max_length: int
) -> bool:
    if value is None:
        return min_length <= 0
    return min_length <= len(value) <= max_length


def is_valid_url(url: Optional[str]) -> bool:
    if not is_not_empty(url):
        return False
    try:
        _url_adapter.validate_python(url.strip())
    except PydanticValidationError:
        return False
    return True
