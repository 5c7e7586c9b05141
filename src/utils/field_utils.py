"""
Field normalization shared by the CSV and XML parsers.
"""
from typing import Optional


def normalize_field(value: Optional[str]) -> str:
    """
    Strip surrounding whitespace, then one layer of wrapping double quotes,
    then whitespace again. Quoted and unquoted values come out identical.

    Args:
        value: Raw field text, or None for an absent field

    Returns:
        The normalized string ('' for None)
    """
    if value is None:
        return ''
    value = value.strip()
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        value = value[1:-1]
    return value.strip()
