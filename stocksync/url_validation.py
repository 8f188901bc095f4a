"""Validation of scrape target URLs before the browser navigates to them."""

import re
from typing import Optional, Set
from urllib.parse import urlparse

__all__ = [
    "validate_url",
    "sanitize_url",
    "URLValidationError",
]


class URLValidationError(Exception):
    """Raised when URL validation fails."""
    pass


DANGEROUS_SCHEMES = {"javascript", "data", "vbscript", "file"}

SUSPICIOUS_PATTERNS = [
    r"\.\./",            # Path traversal
    r"%2e%2e",           # Encoded path traversal
    r"<script",
    r"javascript:",
]


def sanitize_url(url: str) -> str:
    """Strip whitespace and control characters from a URL."""
    if not url:
        return ""
    url = url.strip()
    url = re.sub(r"[\x00-\x1f\x7f-\x9f]", "", url)
    return url.replace("%00", "")


def validate_url(url: str, allowed_domains: Optional[Set[str]] = None) -> str:
    """Validate a scrape target URL.

    Args:
        url: URL to validate
        allowed_domains: Optional set of allowed hosts (default: any host)

    Returns:
        Sanitized URL

    Raises:
        URLValidationError: If the URL is unsafe or malformed
    """
    url = sanitize_url(url)
    if not url:
        raise URLValidationError("URL is empty")

    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    if scheme in DANGEROUS_SCHEMES:
        raise URLValidationError(f"Dangerous URL scheme: {scheme}")
    if scheme not in ("http", "https"):
        raise URLValidationError(f"Invalid URL scheme: {scheme or '(none)'}")

    host = (parsed.hostname or "").lower()
    if not host:
        raise URLValidationError("URL has no domain")
    if allowed_domains and host not in allowed_domains:
        raise URLValidationError(f"URL domain '{host}' not in allowed domains: {allowed_domains}")

    url_lower = url.lower()
    for pattern in SUSPICIOUS_PATTERNS:
        if re.search(pattern, url_lower):
            raise URLValidationError(f"URL contains suspicious pattern: {pattern}")

    return url
