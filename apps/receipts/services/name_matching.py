"""Student name normalization and comparison."""

from typing import Optional


def normalize_name(name: Optional[str]) -> str:
    """
    Normalize a student name for comparison.

    Lower-cases and trims surrounding whitespace. Internal whitespace is
    kept as-is, so "Jane  Doe" and "Jane Doe" stay different.

    Args:
        name: Name to normalize (None is treated as empty)

    Returns:
        Normalized name
    """
    return (name or '').lower().strip()


def names_match(a: Optional[str], b: Optional[str]) -> bool:
    """Return True if both names normalize to the same key."""
    return normalize_name(a) == normalize_name(b)


def name_contains(haystack: Optional[str], needle: Optional[str]) -> bool:
    """Return True if the normalized needle is a substring of the normalized haystack."""
    return normalize_name(needle) in normalize_name(haystack)
