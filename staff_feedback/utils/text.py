"""
Unit name normalization and LIKE pattern escaping.
"""
import re

_WHITESPACE_RE = re.compile(r'\s+')
_LIKE_SPECIAL_RE = re.compile(r'([\\%_])')


def normalize_unit_name(value) -> str:
    """
    Collapse runs of whitespace to a single space and trim.

    Args:
        value: Raw unit name (None is treated as empty)

    Returns:
        str: Normalized unit name
    """
    if value is None:
        return ''
    return _WHITESPACE_RE.sub(' ', str(value)).strip()


def escape_like(value: str) -> str:
    """
    Escape characters that LIKE/ILIKE treat as wildcards.

    Backslash is escaped first so literal backslashes stay literal.

    Args:
        value: Text to match literally

    Returns:
        str: Text with backslash, percent and underscore prefixed by a backslash
    """
    return _LIKE_SPECIAL_RE.sub(r'\\\1', value)


def build_unit_pattern(unit_name: str) -> str:
    """
    Build a case-insensitive substring pattern for a unit name.

    The name is normalized and escaped; the single spaces left after
    normalization become '%' so stored values with wider whitespace still
    match. Callers narrow the result back to a literal substring match.

    Args:
        unit_name: Unit name to look for

    Returns:
        str: ILIKE pattern such as '%North%Campus%'
    """
    words = normalize_unit_name(unit_name).split(' ')
    return '%' + '%'.join(escape_like(word) for word in words if word) + '%'


def contains_unit_name(candidate, unit_name: str) -> bool:
    """
    Check that a stored unit value contains unit_name, ignoring case and
    whitespace differences.
    """
    needle = normalize_unit_name(unit_name).casefold()
    return needle in normalize_unit_name(candidate).casefold()
