"""
CSV Utilities - Decode spreadsheet CSV exports into rows of fields
"""

import logging
from typing import List

logger = logging.getLogger(__name__)


def decode_csv(text: str) -> List[List[str]]:
    """
    Split a full CSV export into rows of raw string fields.

    Quoted fields may contain commas, newlines and doubled quotes ("" -> ").
    Carriage returns outside quotes are dropped and no field is trimmed.
    The whole body is needed up front; this is not a streaming decoder.
    """
    rows: List[List[str]] = []
    current: List[str] = []
    field: List[str] = []
    in_quotes = False

    i = 0
    length = len(text)
    while i < length:
        c = text[i]
        if in_quotes:
            if c == '"':
                if i + 1 < length and text[i + 1] == '"':
                    field.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                field.append(c)
        elif c == '"':
            in_quotes = True
        elif c == ',':
            current.append(''.join(field))
            field = []
        elif c == '\n':
            current.append(''.join(field))
            rows.append(current)
            current = []
            field = []
        elif c != '\r':
            field.append(c)
        i += 1

    if field or current:
        current.append(''.join(field))
        rows.append(current)

    return rows


def cell(row: List[str], index: int) -> str:
    """Return the cell at index, or an empty string when the row is short"""
    if index is None or index < 0 or index >= len(row):
        return ''
    return row[index]
