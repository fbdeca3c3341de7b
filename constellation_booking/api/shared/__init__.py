"""
Shared utilities for Constellation Booking API.

Security helpers (rate limiting, session checks, sanitization), request
validators and response serializers used by every endpoint package.
"""

from constellation_booking.api.security import (
    # Authentication
    get_current_user,
    require_login,
    # Rate limiting
    check_rate_limit,
    get_client_ip,
    # Security
    check_honeypot,
    # Sanitization
    sanitize_string,
)

from .validators import (
    optional_docname,
    parse_flag,
    parse_patch,
    validate_date_string,
    validate_docname,
)

from .serializers import serialize_record, serialize_records

__all__ = [
    "get_current_user",
    "require_login",
    "check_rate_limit",
    "get_client_ip",
    "check_honeypot",
    "sanitize_string",
    "optional_docname",
    "parse_flag",
    "parse_patch",
    "validate_date_string",
    "validate_docname",
    "serialize_record",
    "serialize_records",
]
