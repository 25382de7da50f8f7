#!/usr/bin/env python3
"""
Data Models for the Tiket Now ticketing backend
Purchases, events, admin users and ticket QR codes
"""

import math
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from dataclasses import dataclass, field, asdict
from enum import Enum


class PurchaseStatus(Enum):
    """Purchase lifecycle states, as written in the status column"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SENT = "sent"


class EventStatus(Enum):
    """Event visibility on the storefront"""
    ACTIVE = "active"
    INACTIVE = "inactive"


class UserRole(Enum):
    """Admin roles; super-admins see every event"""
    ADMIN = "admin"
    SUPER_ADMIN = "super-admin"


@dataclass
class Purchase:
    """One ticket order read from the purchases sheet"""
    id: str
    row_number: int
    timestamp: str
    first_name: str
    last_name: str
    phone: str
    email: str
    ticket_qty: int = 0
    addon_qty: int = 0
    payment_method: str = ""
    total: float = 0.0
    status: PurchaseStatus = PurchaseStatus.PENDING

    # Scoping fields (blank for orders placed before events existed)
    event_id: str = ""
    event_name: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary"""
        result = asdict(self)
        result['status'] = self.status.value
        return result


@dataclass
class Event:
    """One sellable occasion from the events sheet"""
    id: str
    name: str
    date: str = ""
    hour: str = ""
    description: str = ""
    location: str = ""
    image: str = ""
    ticket_price: float = 0.0
    vip_price: float = 0.0
    capacity: int = 0
    created_by: str = ""
    created_at: str = ""
    status: EventStatus = EventStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == EventStatus.ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary"""
        result = asdict(self)
        result['status'] = self.status.value
        return result


@dataclass
class User:
    """Signed-in admin identity"""
    username: str
    role: UserRole = UserRole.ADMIN

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN

    def to_dict(self) -> Dict[str, Any]:
        return {'username': self.username, 'role': self.role.value}


@dataclass
class QRCode:
    """A single ticket code rendered by the QR image service"""
    id: str
    content: str
    url: str
    ticket_index: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class OrderRequest:
    """A storefront submission before it is written to the sheet"""
    first_name: str
    last_name: str
    phone: str
    email: str
    ticket_qty: int = 1
    addon_qty: int = 0
    payment_method: str = "efectivo"
    event_id: str = ""
    event_name: str = ""
    total: float = 0.0
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class ValidationError(Exception):
    """Custom validation error for data models"""
    pass


class EventNotFound(LookupError):
    """Requested event does not exist or is outside the caller's scope"""
    pass


def _coerce_non_negative(value: Any, name: str, cast=int):
    try:
        number = cast(value)
    except (ValueError, TypeError, OverflowError):
        raise ValidationError(f"Invalid {name}: {value}")
    if not math.isfinite(number):
        raise ValidationError(f"Invalid {name}: {value}")
    if number < 0:
        raise ValidationError(f"{name} cannot be negative")
    return number


def validate_order(order_data: Dict[str, Any]) -> OrderRequest:
    """Validate and create an OrderRequest from a storefront payload"""
    required_fields = ['first_name', 'last_name', 'phone', 'email']

    for name in required_fields:
        value = order_data.get(name)
        if not value or not str(value).strip():
            raise ValidationError(f"Required field '{name}' is missing or empty")

    ticket_qty = _coerce_non_negative(order_data.get('ticket_qty', 1), 'ticket_qty')
    if ticket_qty < 1:
        raise ValidationError("At least one ticket is required")
    addon_qty = _coerce_non_negative(order_data.get('addon_qty', 0), 'addon_qty')

    return OrderRequest(
        first_name=str(order_data['first_name']).strip(),
        last_name=str(order_data['last_name']).strip(),
        phone=str(order_data['phone']).strip(),
        email=str(order_data['email']).strip(),
        ticket_qty=ticket_qty,
        addon_qty=addon_qty,
        payment_method=str(order_data.get('payment_method') or 'efectivo'),
        event_id=str(order_data.get('event_id') or ''),
    )


def validate_event(event_data: Dict[str, Any], event_id: Optional[str] = None) -> Event:
    """Validate an admin event payload and build an Event

    The id and creation timestamp are assigned by the caller for new events.
    """
    name = str(event_data.get('name') or '').strip()
    if not name:
        raise ValidationError("Required field 'name' is missing or empty")

    status_text = str(event_data.get('status') or EventStatus.ACTIVE.value).lower()
    try:
        status = EventStatus(status_text)
    except ValueError:
        raise ValidationError(f"Invalid event status: {status_text}")

    return Event(
        id=event_id or str(event_data.get('id') or ''),
        name=name,
        date=str(event_data.get('date') or ''),
        hour=str(event_data.get('hour') or ''),
        description=str(event_data.get('description') or ''),
        location=str(event_data.get('location') or ''),
        image=str(event_data.get('image') or ''),
        ticket_price=_coerce_non_negative(event_data.get('ticket_price', 0), 'ticket_price', float),
        vip_price=_coerce_non_negative(event_data.get('vip_price', 0), 'vip_price', float),
        capacity=_coerce_non_negative(event_data.get('capacity', 0), 'capacity'),
        created_by=str(event_data.get('created_by') or ''),
        created_at=str(event_data.get('created_at') or ''),
        status=status,
    )
