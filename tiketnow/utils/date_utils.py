"""
Date Utilities - Parse free-text event dates typed into the sheet
"""

import logging
from datetime import datetime
from typing import Optional

from dateutil import parser

logger = logging.getLogger(__name__)


def _parse_one(text: str) -> Optional[datetime]:
    # ISO dates first, dayfirst would otherwise swap month and day in 2025-11-05
    try:
        return parser.isoparse(text)
    except ValueError:
        pass
    try:
        return parser.parse(text, dayfirst=True)
    except (ValueError, OverflowError):
        return None


def parse_event_datetime(date_string: str, hour_string: str = '') -> Optional[datetime]:
    """
    Parse an event date such as '15/11/2025' or '2025-11-15' plus an optional
    hour like '22:00'. Day-first is assumed for ambiguous dates.
    Returns None when nothing sensible can be parsed.
    """
    if not date_string or not date_string.strip():
        return None

    candidates = [date_string.strip()]
    if hour_string and hour_string.strip():
        candidates.insert(0, f"{date_string.strip()} {hour_string.strip()}")

    for text in candidates:
        parsed = _parse_one(text)
        if parsed is not None:
            return parsed.replace(tzinfo=None)

    logger.warning(f"Could not parse event date: {date_string!r}")
    return None
