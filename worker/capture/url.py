"""URL and identifier validation.

Both checks run before any external call or storage access.
"""

import re
from urllib.parse import urlparse

from api.exceptions import ValidationError

ALLOWED_SCHEMES = frozenset(["http", "https"])

# Report and screenshot identifiers are uuid4 strings
IDENTIFIER_PATTERN = re.compile(r"[a-f0-9-]+")
MAX_IDENTIFIER_LENGTH = 64


def validate_url(url: str | None, field: str = "url") -> str:
    """
    Validate an absolute http(s) URL.

    Args:
        url: Candidate URL
        field: Request field name reported on failure

    Returns:
        The URL, stripped of surrounding whitespace

    Raises:
        ValidationError: If the URL is empty, relative, has no host, or uses
            a scheme other than http/https
    """
    candidate = (url or "").strip()
    if not candidate:
        raise ValidationError("A valid URL (http/https) is required.", field=field)

    try:
        parsed = urlparse(candidate)
    except ValueError as e:
        raise ValidationError(f"Invalid URL: {candidate}", field=field) from e

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        scheme = f"{parsed.scheme}:" if parsed.scheme else "(none)"
        raise ValidationError(
            f"Invalid URL protocol: {scheme}. Only http and https are supported.",
            field=field,
        )

    if not parsed.netloc or not parsed.hostname:
        raise ValidationError(f"Invalid URL: {candidate}", field=field)

    return candidate


def validate_identifier(identifier: str, resource: str = "report") -> str:
    """
    Validate a report/screenshot identifier before it is used to address storage.

    Raises:
        ValidationError: If the identifier contains anything but lowercase hex
            digits and hyphens, or is implausibly long
    """
    if (
        not identifier
        or len(identifier) > MAX_IDENTIFIER_LENGTH
        or not IDENTIFIER_PATTERN.fullmatch(identifier)
    ):
        raise ValidationError(f"Invalid {resource} ID.", field="id", code="invalid_id")
    return identifier
