"""
Booking-specific Validators

Validation of raw request parameters before they reach the booking
services. Failures raise BookingValidationError (HTTP 417).
"""

import re
from typing import Any, Dict, Optional

import frappe
from frappe import _

from constellation_booking.constellation_booking.scheduling.errors import BookingValidationError


def validate_date_string(date_str: str, field_name: str = "date") -> str:
    """
    Validate date string format (YYYY-MM-DD).

    Args:
        date_str: Date string to validate
        field_name: Name of field for error messages

    Returns:
        str: Validated date string

    Raises:
        BookingValidationError: If date format is invalid
    """
    if not date_str:
        frappe.throw(_("{0} is required").format(field_name), BookingValidationError)

    date_str = str(date_str).strip()

    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        frappe.throw(
            _("Invalid {0} format. Use YYYY-MM-DD").format(field_name), BookingValidationError
        )

    return date_str


def validate_docname(name: str, field_name: str = "name") -> str:
    """
    Validate a document name (ID).

    Ensures the name is not too long and doesn't contain injection patterns.

    Args:
        name: Document name to validate
        field_name: Name of field for error messages

    Returns:
        str: Validated document name

    Raises:
        BookingValidationError: If name is invalid
    """
    if not name:
        frappe.throw(_("{0} is required").format(field_name), BookingValidationError)

    name = str(name).strip()

    if len(name) > 140:
        frappe.throw(_("{0} is too long").format(field_name), BookingValidationError)

    dangerous_patterns = [
        r"<script",
        r"javascript:",
        r"onclick",
        r"onerror",
        r"SELECT\s+",
        r"INSERT\s+",
        r"UPDATE\s+",
        r"DELETE\s+",
        r"DROP\s+",
        r"UNION\s+",
        r"--",
        r";",
    ]

    for pattern in dangerous_patterns:
        if re.search(pattern, name, re.IGNORECASE):
            frappe.throw(_("Invalid {0}").format(field_name), BookingValidationError)

    return name


def parse_flag(value: Any) -> bool:
    """Interpret query-string booleans ("1", "true", "yes", 1, True)."""
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in ("1", "true", "yes", "on")


def parse_patch(patch: Any, field_name: str = "patch") -> Dict[str, Any]:
    """
    Accept a patch as dict or JSON object string.

    Raises:
        BookingValidationError: If the value is not a JSON object
    """
    try:
        parsed = frappe.parse_json(patch or "{}")
    except ValueError:
        parsed = None

    if not isinstance(parsed, dict):
        frappe.throw(_("{0} must be a JSON object").format(field_name), BookingValidationError)
    return parsed


def optional_docname(name: Optional[str], field_name: str) -> Optional[str]:
    return validate_docname(name, field_name) if name else None
