"""Hex color parsing for untrusted color strings.

Accepted forms: #RGB, #RRGGBB and #AARRGGBB (leading '#' optional).
"""
import re
from typing import Optional

DEFAULT_ELEMENT_COLOR = "#CCCCCC"
DEFAULT_FEED_COLOR = "#FFFFFF"

_HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


def parse_hex_color(value: Optional[str]) -> Optional[tuple[int, int, int, int]]:
    """Return (r, g, b, a) for a valid hex color, None otherwise."""
    if not isinstance(value, str):
        return None
    match = _HEX_PATTERN.match(value.strip())
    if match is None:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        r, g, b = (int(c, 16) * 17 for c in digits)
        return r, g, b, 255
    number = int(digits, 16)
    if len(digits) == 6:
        return number >> 16, (number >> 8) & 0xFF, number & 0xFF, 255
    return (number >> 16) & 0xFF, (number >> 8) & 0xFF, number & 0xFF, number >> 24


def normalize_color_hex(value: Optional[str], fallback: str = DEFAULT_ELEMENT_COLOR) -> str:
    """Canonical upper-case #RRGGBB (#AARRGGBB when alpha was given), or fallback."""
    rgba = parse_hex_color(value)
    if rgba is None:
        return fallback
    r, g, b, a = rgba
    digits = value.strip().lstrip("#")
    if len(digits) == 8:
        return f"#{a:02X}{r:02X}{g:02X}{b:02X}"
    return f"#{r:02X}{g:02X}{b:02X}"
