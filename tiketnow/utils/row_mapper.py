"""
Row Mapper - Turn decoded sheet rows into Purchase and Event records

Columns are positional by default. A layout can also be resolved from the
header row by name, with any unknown column falling back to its position.
"""

import math
import re
import logging
from dataclasses import dataclass, replace
from typing import List, Dict, Optional, Iterable

from tiketnow.models import Purchase, Event, PurchaseStatus, EventStatus
from tiketnow.utils.csv_utils import cell

logger = logging.getLogger(__name__)

_INT_PREFIX = re.compile(r'^\s*[+-]?\d+')
_FLOAT_PREFIX = re.compile(r'^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')

# Checked in order; the first match wins. Spanish words match anywhere in the
# cell, English ones only as whole words, and a leading "no"/"not" negates.
_NEGATED = r'(?<!\bno )(?<!\bnot )'
STATUS_KEYWORDS = [
    (PurchaseStatus.SENT, re.compile(_NEGATED + r'(?:enviado|\bsent\b)')),
    (PurchaseStatus.CONFIRMED, re.compile(_NEGATED + r'(?:confirmado|\bconfirmed\b)')),
]

INACTIVE_KEYWORDS = ('inactive', 'inactivo')


def parse_int(text) -> int:
    """Parse the leading base-10 integer of a cell; 0 when absent or negative"""
    if text is None:
        return 0
    match = _INT_PREFIX.match(str(text))
    if not match:
        return 0
    return max(0, int(match.group()))


def parse_float(text) -> float:
    """Parse the leading decimal number of a cell; 0.0 when absent or negative"""
    if text is None:
        return 0.0
    match = _FLOAT_PREFIX.match(str(text))
    if not match:
        return 0.0
    try:
        value = float(match.group())
    except (ValueError, OverflowError):
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def parse_status(status_text: Optional[str]) -> PurchaseStatus:
    """Map free-text status cells like 'Confirmado el 5/1' to a PurchaseStatus"""
    status = (status_text or '').lower()
    for purchase_status, pattern in STATUS_KEYWORDS:
        if pattern.search(status):
            return purchase_status
    return PurchaseStatus.PENDING


def parse_event_status(status_text: Optional[str]) -> EventStatus:
    status = (status_text or '').strip().lower()
    if status in INACTIVE_KEYWORDS:
        return EventStatus.INACTIVE
    return EventStatus.ACTIVE


@dataclass(frozen=True)
class PurchaseColumns:
    """Column indexes of the purchases sheet"""
    timestamp: int = 0
    first_name: int = 1
    last_name: int = 2
    phone: int = 3
    email: int = 4
    ticket_qty: int = 5
    addon_qty: int = 6
    payment_method: int = 7
    total: int = 8
    status: int = 9
    event_id: int = 10
    event_name: int = 11


@dataclass(frozen=True)
class EventColumns:
    """Column indexes of the events sheet"""
    id: int = 0
    name: int = 1
    date: int = 2
    hour: int = 3
    description: int = 4
    location: int = 5
    image: int = 6
    ticket_price: int = 7
    vip_price: int = 8
    capacity: int = 9
    created_by: int = 10
    created_at: int = 11
    status: int = 12


PURCHASE_HEADER_ALIASES: Dict[str, Iterable[str]] = {
    'timestamp': ('timestamp', 'marca temporal', 'fecha'),
    'first_name': ('firstname', 'first name', 'nombre'),
    'last_name': ('lastname', 'last name', 'apellido'),
    'phone': ('phone', 'telefono', 'teléfono'),
    'email': ('email', 'correo'),
    'ticket_qty': ('ticketqty', 'tickets', 'entradas'),
    'addon_qty': ('coolerqty', 'addons', 'vip', 'conservadora', 'conservadoras'),
    'payment_method': ('paymentmethod', 'payment method', 'mediopago', 'medio de pago'),
    'total': ('total',),
    'status': ('status', 'estado'),
    'event_id': ('eventid', 'event id', 'id evento'),
    'event_name': ('eventname', 'event name', 'evento'),
}

EVENT_HEADER_ALIASES: Dict[str, Iterable[str]] = {
    'id': ('id',),
    'name': ('name', 'nombre'),
    'date': ('date', 'fecha'),
    'hour': ('hour', 'time', 'hora'),
    'description': ('description', 'descripcion', 'descripción'),
    'location': ('location', 'ubicacion', 'ubicación', 'lugar'),
    'image': ('image', 'imagen'),
    'ticket_price': ('ticketprice', 'ticket price', 'precio'),
    'vip_price': ('vipprice', 'vip price', 'precio vip'),
    'capacity': ('capacity', 'capacidad'),
    'created_by': ('createdby', 'created by', 'creado por'),
    'created_at': ('createdat', 'created at', 'creado'),
    'status': ('status', 'estado'),
}


def _resolve_layout(header: List[str], default, aliases: Dict[str, Iterable[str]]):
    """Build a column layout from header names, keeping positions for misses"""
    positions = {name.strip().lower(): index for index, name in enumerate(header)}
    found = {}
    for attribute, names in aliases.items():
        for name in names:
            if name in positions:
                found[attribute] = positions[name]
                break
    missing = [a for a in aliases if a not in found]
    if missing:
        logger.debug(f"Header lookup fell back to positions for: {', '.join(missing)}")
    return replace(default, **found)


def purchase_columns_from_header(header: List[str]) -> PurchaseColumns:
    return _resolve_layout(header, PurchaseColumns(), PURCHASE_HEADER_ALIASES)


def event_columns_from_header(header: List[str]) -> EventColumns:
    return _resolve_layout(header, EventColumns(), EVENT_HEADER_ALIASES)


def map_purchase_rows(rows: List[List[str]], columns: Optional[PurchaseColumns] = None,
                      use_header: bool = False) -> List[Purchase]:
    """Map decoded purchase rows (header first) to Purchases, newest first"""
    if not rows:
        return []
    if columns is None:
        columns = purchase_columns_from_header(rows[0]) if use_header else PurchaseColumns()

    purchases = []
    skipped = 0
    for i in range(1, len(rows)):
        cols = rows[i]
        first_name = cell(cols, columns.first_name)
        if not first_name.strip():
            skipped += 1
            continue

        last_name = cell(cols, columns.last_name)
        timestamp = cell(cols, columns.timestamp)
        purchases.append(Purchase(
            id=f"{i}-{first_name}-{last_name}-{timestamp}",
            row_number=i + 1,
            timestamp=timestamp,
            first_name=first_name,
            last_name=last_name,
            phone=cell(cols, columns.phone),
            email=cell(cols, columns.email),
            ticket_qty=parse_int(cell(cols, columns.ticket_qty)),
            addon_qty=parse_int(cell(cols, columns.addon_qty)),
            payment_method=cell(cols, columns.payment_method),
            total=parse_float(cell(cols, columns.total)),
            status=parse_status(cell(cols, columns.status)),
            event_id=cell(cols, columns.event_id).strip(),
            event_name=cell(cols, columns.event_name),
        ))

    if skipped:
        logger.info(f"Skipped {skipped} purchase rows without a first name")

    purchases.reverse()
    return purchases


def map_event_rows(rows: List[List[str]], columns: Optional[EventColumns] = None,
                   use_header: bool = False) -> List[Event]:
    """Map decoded event rows (header first) to Events, newest first"""
    if not rows:
        return []
    if columns is None:
        columns = event_columns_from_header(rows[0]) if use_header else EventColumns()

    events = []
    for i in range(1, len(rows)):
        cols = rows[i]
        name = cell(cols, columns.name)
        if not name.strip():
            continue

        events.append(Event(
            id=cell(cols, columns.id).strip() or f"row-{i + 1}",
            name=name,
            date=cell(cols, columns.date),
            hour=cell(cols, columns.hour),
            description=cell(cols, columns.description),
            location=cell(cols, columns.location),
            image=cell(cols, columns.image),
            ticket_price=parse_float(cell(cols, columns.ticket_price)),
            vip_price=parse_float(cell(cols, columns.vip_price)),
            capacity=parse_int(cell(cols, columns.capacity)),
            created_by=cell(cols, columns.created_by),
            created_at=cell(cols, columns.created_at),
            status=parse_event_status(cell(cols, columns.status)),
        ))

    events.reverse()
    return events
