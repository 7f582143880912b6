"""
Text helpers for exports: middle truncation, date display and label contrast colors.
"""
import math
from typing import Optional

from normalize.dates import parse_timestamp

INVALID_DATE = 'Invalid Date'


def truncate_middle(text: Optional[str], max_length: int = 100, separator: str = ' [...] ') -> str:
    """Truncate text from the middle, keeping ~60% of the budget for the start and ~40% for the end.

    >>> truncate_middle('This is a very long title that should be truncated in the middle', 40)
    'This is a very long [...] in the middle'
    """
    if text is None:
        return ''
    text = str(text)
    if len(text) <= max_length:
        return text
    available = max_length - len(separator)
    if available <= 0:
        return text[:max_length]
    start_length = math.ceil(available * 0.6)
    end_length = available - start_length
    start = text[:start_length].strip()
    end = text[len(text) - end_length:].strip()
    return f"{start}{separator}{end}"


def format_date(value: Optional[str]) -> str:
    """Render a timestamp as M/D/YYYY (UTC date), or 'Invalid Date' when it cannot be parsed."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return INVALID_DATE
    return f"{parsed.month}/{parsed.day}/{parsed.year}"


def contrast_color(hex_color: Optional[str]) -> str:
    """Black or white text for a label background, by YIQ brightness."""
    value = str(hex_color).lstrip('#') if hex_color else ''
    try:
        r = int(value[0:2], 16)
        g = int(value[2:4], 16)
        b = int(value[4:6], 16)
    except ValueError:
        return '#000'
    yiq = (r * 299 + g * 587 + b * 114) / 1000
    return '#000' if yiq >= 128 else '#fff'
