"""Text canonicalization used for identity comparisons."""

import unicodedata
from datetime import date


def normalize_name(text: str) -> str:
    """Normalize a person's name for comparison.

    Applies NFD decomposition, removes combining marks, lower-cases and
    trims surrounding whitespace. The result is only used for comparison
    and never stored.

    Args:
        text: Raw name as typed by the user.

    Returns:
        Normalized name.
    """
    decomposed = unicodedata.normalize('NFD', text)
    stripped = ''.join(ch for ch in decomposed if unicodedata.category(ch) != 'Mn')
    return stripped.lower().strip()


def normalize_email(text: str) -> str:
    """Normalize an email address (lower-case, trimmed)."""
    return text.lower().strip()


def date_only(value) -> str:
    """Return the date part of an ISO date or timestamp.

    ``'1990-05-01T00:00:00+00:00'`` and ``'1990-05-01'`` both give
    ``'1990-05-01'``.
    """
    if isinstance(value, date):
        return value.isoformat()[:10]
    return str(value).split('T')[0].strip()
