"""Shared validation utilities"""

import math
import re
from typing import Optional, Union

HEX_COLOR_PATTERN = re.compile(r"^#?[0-9a-f]{6}$")
DEFAULT_COLOR = "#000000"


def validate_us_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize US phone number to E.164 format.

    Args:
        phone: Phone number string in various formats

    Returns:
        Normalized phone number in E.164 format (+1XXXXXXXXXX)

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    # Remove all non-digit characters
    digits = re.sub(r"\D", "", phone)

    # Handle +1 prefix
    if digits.startswith("1") and len(digits) == 11:
        digits = digits[1:]

    # US phone numbers should have 10 digits
    if len(digits) != 10:
        raise ValueError("Phone number must be 10 digits for US numbers")

    return f"+1{digits}"


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def ensure_valid_color(color: Optional[str]) -> str:
    """Normalize a hex colour to '#rrggbb', falling back to black"""
    if not color:
        return DEFAULT_COLOR
    normalized = re.sub(r"\s", "", color.lower())
    if not HEX_COLOR_PATTERN.match(normalized):
        return DEFAULT_COLOR
    return normalized if normalized.startswith("#") else f"#{normalized}"


def parse_cost(value: Union[str, float, int, None]) -> Optional[float]:
    """
    Parse a stored cost such as "$1,250.00" or "85".

    Returns None for empty, unparseable or non-finite input instead of
    raising, so aggregations can count and skip bad rows.
    """
    if value is None:
        return None
    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        cleaned = value.replace("$", "").replace(",", "").strip()
        if not cleaned:
            return None
        try:
            amount = float(cleaned)
        except ValueError:
            return None
    return amount if math.isfinite(amount) else None


def normalize_cost(value: Optional[str]) -> Optional[str]:
    """
    Strip the currency symbol from a cost before it is persisted.

    Raises:
        ValueError: If the remaining text is not a finite number
    """
    if value is None:
        return None
    cleaned = str(value).strip().lstrip("$").strip().replace(",", "")
    if not cleaned:
        return None
    try:
        amount = float(cleaned)
    except ValueError as e:
        raise ValueError("Cost must be a number") from e
    if not math.isfinite(amount):
        raise ValueError("Cost must be a number")
    return cleaned


def format_amount(amount: float) -> str:
    """Storage form of a computed cost"""
    return f"{amount:.2f}"


def format_price(value: Optional[str]) -> str:
    """Display form of a stored cost; never doubles the '$'"""
    if value is None or str(value).strip() == "":
        return "$0.00"
    value = str(value).strip()
    return value if value.startswith("$") else f"${value}"
