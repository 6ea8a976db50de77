"""Input validation for user write paths."""

import re
from typing import Optional

from userservice.exceptions import InvalidEmailError

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
EMAIL_ADDRESS_CANNOT_BE_NULL = "Email address cannot be null"
INVALID_EMAIL_ADDRESS_FORMAT = "Invalid email address format"


def validate_email(email: Optional[str]) -> None:
    """Raise InvalidEmailError unless `email` is present and well-formed."""
    if email is None:
        raise InvalidEmailError(EMAIL_ADDRESS_CANNOT_BE_NULL)
    if not EMAIL_PATTERN.match(email):
        raise InvalidEmailError(INVALID_EMAIL_ADDRESS_FORMAT)
