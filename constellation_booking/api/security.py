"""
Security Utilities for Booking APIs

Rate limiting, session checks, honeypot validation and input
sanitization shared by every whitelisted endpoint.
"""

import re
from typing import Optional

import frappe
from frappe import _
from frappe.utils import cint

from constellation_booking.constellation_booking.scheduling.settings import get_rate_limit


# ===================
# Authentication
# ===================

def get_current_user() -> Optional[str]:
    """
    Return the logged-in user, or None for guests.

    Returns:
        str | None: User name (email) of the session user
    """
    user = frappe.session.user
    if not user or user == "Guest":
        return None
    return user


def require_login() -> str:
    """
    Return the session user or fail for guests.

    Raises:
        frappe.AuthenticationError: If the request is anonymous
    """
    user = get_current_user()
    if not user:
        frappe.throw(
            _("Authentication required. Please log in first."),
            frappe.AuthenticationError
        )
    return user


# ===================
# Rate Limiting
# ===================

def check_rate_limit(action: str, limit: Optional[int] = None, seconds: Optional[int] = None) -> None:
    """
    Check rate limit for an action by IP address.

    Uses Frappe's cache (Redis) to track request counts per IP. Limits
    default to the booking_rate_limits site config (see settings.py).

    Args:
        action: Identifier for the action being rate limited
        limit: Maximum number of requests allowed
        seconds: Time window in seconds

    Raises:
        frappe.TooManyRequestsError: If rate limit exceeded
    """
    default_limit, default_seconds = get_rate_limit(action)
    limit = limit or default_limit
    seconds = seconds or default_seconds

    ip = get_client_ip()
    cache_key = f"rate_limit:constellation_booking:{action}:{ip}"

    current = cint(frappe.cache.get_value(cache_key) or 0)

    if current >= limit:
        frappe.logger("constellation_booking").warning(
            f"Rate limit exceeded. IP: {ip}, Action: {action}, Limit: {limit}/{seconds}s"
        )
        frappe.throw(
            _("Too many requests. Please wait a moment and try again."),
            frappe.TooManyRequestsError
        )

    frappe.cache.set_value(cache_key, current + 1, expires_in_sec=seconds)


def get_client_ip() -> str:
    """
    Get the real client IP address, handling proxies.

    Returns:
        str: Client IP address
    """
    request = getattr(frappe.local, "request", None)
    if not request:
        return "local"

    # X-Forwarded-For can contain multiple IPs, take the first one
    forwarded_for = request.headers.get('X-Forwarded-For', '')
    if forwarded_for:
        return forwarded_for.split(',')[0].strip()

    real_ip = request.headers.get('X-Real-IP', '')
    if real_ip:
        return real_ip.strip()

    return request.remote_addr or 'unknown'


# ===================
# Honeypot Validation
# ===================

def check_honeypot(honeypot_value: Optional[str] = None) -> None:
    """
    Reject submissions whose hidden honeypot field was filled in.

    Raises:
        frappe.ValidationError: If honeypot is filled (bot detected)
    """
    if honeypot_value:
        frappe.log_error(
            title=_("Bot Detected (Honeypot)"),
            message=f"IP: {get_client_ip()}, Honeypot value: {honeypot_value[:100]}"
        )
        # Generic error so the check is not revealed
        frappe.throw(_("Invalid request"), frappe.ValidationError)


# ===================
# Input Sanitization
# ===================

def sanitize_string(value: Optional[str], max_length: int = 500) -> Optional[str]:
    """
    General string sanitization.

    Args:
        value: String to sanitize
        max_length: Maximum allowed length

    Returns:
        str | None: Trimmed, truncated string without control characters
    """
    if not value:
        return None

    value = str(value).strip()

    if len(value) > max_length:
        value = value[:max_length]

    # Remove null bytes and other control characters
    value = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', value)

    return value
