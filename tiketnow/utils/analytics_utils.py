"""
Analytics Utilities - Scope purchases to events and compute sales aggregates
"""

import logging
from collections import defaultdict
from typing import List, Dict, Any, Optional, Set

from tiketnow.models import Purchase, Event, PurchaseStatus, EventNotFound
from tiketnow.utils.date_utils import parse_event_datetime

logger = logging.getLogger(__name__)

NO_EVENT = 'no-event'
SORT_KEYS = ('date', 'capacity')


def owned_events(events: List[Event], owner: Optional[str]) -> List[Event]:
    """Events created by owner; every event when owner is None"""
    if owner is None:
        return list(events)
    return [event for event in events if event.created_by == owner]


def _matches_event(purchase: Purchase, event_ids: Set[str], event_names: Set[str]) -> bool:
    if purchase.event_id:
        return purchase.event_id in event_ids
    return bool(purchase.event_name) and purchase.event_name in event_names


def scope_purchases(purchases: List[Purchase], events: List[Event],
                    owner: Optional[str] = None) -> List[Purchase]:
    """
    Restrict purchases to events owned by owner.

    A purchase is matched by event id, or by event name when the id cell is
    blank. Purchases for unknown events drop out of every scoped view.
    With no owner the purchase list is returned unchanged (as a copy).
    """
    if owner is None:
        return list(purchases)

    scoped = owned_events(events, owner)
    event_ids = {event.id for event in scoped}
    event_names = {event.name for event in scoped}
    return [p for p in purchases if _matches_event(p, event_ids, event_names)]


def filter_by_event(purchases: List[Purchase], event: Optional[Event]) -> List[Purchase]:
    """Purchases for a single event; all purchases when event is None"""
    if event is None:
        return list(purchases)
    return [p for p in purchases if _matches_event(p, {event.id}, {event.name})]


def resolve_event_key(purchase: Purchase, events_by_id: Dict[str, Event],
                      events_by_name: Dict[str, Event]) -> str:
    """Event id a purchase belongs to, or NO_EVENT for unscoped purchases"""
    if purchase.event_id:
        return purchase.event_id if purchase.event_id in events_by_id else NO_EVENT
    event = events_by_name.get(purchase.event_name) if purchase.event_name else None
    return event.id if event else NO_EVENT


def summarize_purchases(purchases: List[Purchase]) -> Dict[str, Any]:
    """Totals, status counts and payment method counts for a purchase list"""
    total_revenue = 0.0
    total_tickets = 0
    total_addons = 0
    by_status = {status.value: 0 for status in PurchaseStatus}
    by_payment_method = defaultdict(int)

    for purchase in purchases:
        total_revenue += purchase.total
        total_tickets += purchase.ticket_qty
        total_addons += purchase.addon_qty
        by_status[purchase.status.value] += 1
        method = (purchase.payment_method or '').strip().lower() or 'unknown'
        by_payment_method[method] += 1

    return {
        'total_revenue': round(total_revenue, 2),
        'total_tickets': total_tickets,
        'total_addons': total_addons,
        'purchase_count': len(purchases),
        'by_status': by_status,
        'by_payment_method': dict(by_payment_method),
    }


def calculate_occupancy(event: Event, purchases: List[Purchase]) -> Dict[str, Any]:
    """Tickets sold against capacity for one event (display only, never enforced)"""
    sold = sum(p.ticket_qty for p in filter_by_event(purchases, event))
    capacity = event.capacity
    ratio = round(sold / capacity, 4) if capacity > 0 else None

    return {
        'event_id': event.id,
        'event_name': event.name,
        'sold': sold,
        'capacity': capacity,
        'remaining': capacity - sold if capacity > 0 else None,
        'ratio': ratio,
    }


def calculate_event_breakdown(purchases: List[Purchase], events: List[Event]) -> Dict[str, Dict[str, Any]]:
    """Per-event revenue and ticket sums, with unscoped purchases under NO_EVENT"""
    events_by_id = {event.id: event for event in events}
    events_by_name = {event.name: event for event in events}
    breakdown = defaultdict(lambda: {'revenue': 0.0, 'tickets': 0, 'addons': 0, 'purchases': 0})

    for purchase in purchases:
        key = resolve_event_key(purchase, events_by_id, events_by_name)
        entry = breakdown[key]
        entry['revenue'] += purchase.total
        entry['tickets'] += purchase.ticket_qty
        entry['addons'] += purchase.addon_qty
        entry['purchases'] += 1

    return {k: {**v, 'revenue': round(v['revenue'], 2)} for k, v in breakdown.items()}


def sort_events(events: List[Event], sort_by: str = 'date', descending: bool = False) -> List[Event]:
    """
    Sort events by date or capacity.

    The sort is stable so equal keys keep their sheet order in both
    directions. Events whose date cannot be parsed always go last.
    """
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unsupported sort key: {sort_by}")

    if sort_by == 'capacity':
        return sorted(events, key=lambda e: e.capacity, reverse=descending)

    dated = []
    undated = []
    for event in events:
        moment = parse_event_datetime(event.date, event.hour)
        if moment is None:
            undated.append(event)
        else:
            dated.append((moment, event))

    dated.sort(key=lambda pair: pair[0], reverse=descending)
    return [event for _, event in dated] + undated


def calculate_sales_analytics(purchases: List[Purchase], events: List[Event],
                              owner: Optional[str] = None,
                              event_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the dashboard aggregate set.

    Inputs are never mutated, so repeated calls on the same lists give
    identical results.
    """
    scoped_events = owned_events(events, owner)
    scoped = scope_purchases(purchases, events, owner)

    selected_event = None
    if event_id:
        selected_event = next((e for e in scoped_events if e.id == event_id), None)
        if selected_event is None:
            raise EventNotFound(f"Event not found: {event_id}")

    filtered = filter_by_event(scoped, selected_event)
    occupancy_events = [selected_event] if selected_event else scoped_events

    logger.info(f"Aggregated {len(filtered)} of {len(purchases)} purchases "
                f"(owner={owner or 'all'}, event={event_id or 'all'})")

    return {
        'owner': owner,
        'event_id': event_id,
        'summary': summarize_purchases(filtered),
        'by_event': calculate_event_breakdown(filtered, scoped_events),
        'occupancy': [calculate_occupancy(e, scoped) for e in occupancy_events],
        'purchases': [p.to_dict() for p in filtered],
    }
