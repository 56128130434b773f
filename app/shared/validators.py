"""Shared validation utilities"""

import re
from datetime import datetime, timezone
from typing import Optional

from ..config import PHONE_COUNTRY_CODE


def normalize_phone(value: str) -> str:
    """Strip spaces, dashes and brackets, keeping a leading +"""
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"\D", "", value[1:])
    return re.sub(r"\D", "", value)


def validate_phone(phone: Optional[str], country_code: str = PHONE_COUNTRY_CODE) -> Optional[str]:
    """
    Validate and normalize a phone number to +<country><8-9 digits>.

    Args:
        phone: Phone number string, separators allowed
        country_code: Country calling code without the plus sign

    Returns:
        Normalized phone number, e.g. +967712345678

    Raises:
        ValueError: If the number does not match the expected format
    """
    if phone is None:
        return phone

    normalized = normalize_phone(phone)
    if not re.fullmatch(rf"\+{re.escape(country_code)}\d{{8,9}}", normalized):
        raise ValueError(
            f"Phone number must look like +{country_code} followed by 8 or 9 digits"
        )
    return normalized


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC for storage; naive values are assumed UTC"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def utc_now() -> datetime:
    """Current time as naive UTC, matching what the database stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
