"""Input validation utilities for keywords and market settings."""

import re

MAX_KEYWORD_LENGTH = 200

_COUNTRY_RE = re.compile(r"^[a-zA-Z]{2}$")
_LANGUAGE_RE = re.compile(r"^[a-zA-Z]{2}(?:-[a-zA-Z]{2})?$")


def validate_keyword(keyword: str) -> tuple[bool, str]:
    """Validate a seed keyword.

    Returns:
        Tuple of (is_valid, error_message).  error_message is empty on success.
    """
    if not keyword or not isinstance(keyword, str):
        return False, "Keyword is empty or not a string."
    stripped = keyword.strip()
    if not stripped:
        return False, "Keyword must contain at least one non-space character."
    if len(stripped) > MAX_KEYWORD_LENGTH:
        return False, f"Keyword exceeds maximum length ({MAX_KEYWORD_LENGTH} chars)."
    if not re.search(r"\w", stripped):
        return False, "Keyword must contain at least one letter or digit."
    return True, ""


def validate_market(country: str, language: str) -> tuple[bool, str]:
    """Validate an ISO country code and language code pair."""
    if not country or not _COUNTRY_RE.match(country):
        return False, f"Invalid country code: {country!r}. Use two letters, e.g. 'us'."
    if not language or not _LANGUAGE_RE.match(language):
        return False, f"Invalid language code: {language!r}. Use e.g. 'en' or 'en-gb'."
    return True, ""
