"""
Utility functions for extracting typed values from puzzle catalog cells.
"""

from typing import Tuple


def parse_xp(value: str) -> int:
    """
    Parse an experience value, ignoring the "approximately" marker.

    Args:
        value: Cell text such as "50" or "~50"

    Returns:
        The experience value as an integer
    """
    s = str(value).replace('~', '').strip()
    try:
        return int(s)
    except ValueError:
        raise ValueError(f"Cannot convert XP '{value}' to an integer.")


def parse_size(value: str, delimiter: str = 'x') -> Tuple[int, int]:
    """
    Split a "WxH" size into its two dimensions.

    Exactly two parts are accepted and both must be positive integers.

    Args:
        value: Cell text such as "10x15"
        delimiter: Separator between width and height

    Returns:
        Tuple of (width, height)
    """
    parts = str(value).split(delimiter)
    if len(parts) != 2:
        raise ValueError(f"Size field is invalid '{value}'")

    if not all(part.isascii() and part.isdigit() for part in parts):
        raise ValueError(f"Size field is invalid '{value}'")

    width, height = int(parts[0]), int(parts[1])

    if width <= 0 or height <= 0:
        raise ValueError(f"Size field is invalid '{value}'")
    return width, height


def contains_marker(value: str, marker: str) -> bool:
    """Return True if the cell text contains *marker*."""
    return value is not None and marker in str(value)
