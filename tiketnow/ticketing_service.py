#!/usr/bin/env python3
"""
Main ticketing service - wires the sheet-backed services together
"""

import logging
from typing import Any, Dict, List, Optional

from tiketnow.config import AppConfig
from tiketnow.models import Event, User, PurchaseStatus, validate_order, validate_event, ValidationError
from tiketnow.services.auth_service import AuthService, CredentialTableAuthService
from tiketnow.services.cache import TimedCache
from tiketnow.services.event_service import GoogleSheetsEventService
from tiketnow.services.purchase_service import GoogleSheetsPurchaseService
from tiketnow.services.qr_service import QRService, QuickChartQRService
from tiketnow.services.script_client import ScriptWriteClient
from tiketnow.services.sheet_source import SheetSource, build_sheet_source
from tiketnow.services.whatsapp_service import WhatsAppService, WaMeWhatsAppService
from tiketnow.utils.analytics_utils import (
    calculate_sales_analytics, calculate_occupancy, owned_events, scope_purchases, sort_events,
)

logger = logging.getLogger(__name__)


class TicketingService:
    """Main service with focused service components"""

    def __init__(self, config: AppConfig,
                 source: Optional[SheetSource] = None,
                 writer: Optional[ScriptWriteClient] = None,
                 qr: Optional[QRService] = None,
                 whatsapp: Optional[WhatsAppService] = None,
                 auth: Optional[AuthService] = None,
                 clock=None, sleep=None):
        self.config = config
        source = source or build_sheet_source(config)
        writer = writer or ScriptWriteClient(config.script_url, timeout=config.request_timeout)

        cache_kwargs = {'clock': clock} if clock else {}
        event_kwargs = {'sleep': sleep} if sleep else {}

        self.events = GoogleSheetsEventService(
            source, writer,
            sheet_name=config.events_sheet_name,
            cache=TimedCache(config.cache_ttl_seconds, **cache_kwargs),
            load_attempts=config.event_load_attempts,
            retry_delay=config.event_load_retry_delay,
            use_header=config.use_header_columns,
            **event_kwargs,
        )
        self.purchases = GoogleSheetsPurchaseService(
            source, writer,
            sheet_name=config.purchases_sheet_name,
            cache=TimedCache(config.cache_ttl_seconds, **cache_kwargs),
            use_header=config.use_header_columns,
        )
        self.qr = qr or QuickChartQRService(config.qr_base_url, config.qr_size)
        self.whatsapp = whatsapp or WaMeWhatsAppService(config.country_code, config.organizer_phone)
        self.auth = auth or CredentialTableAuthService(config.admin_users)
        self.dashboards = TimedCache(config.cache_ttl_seconds, **cache_kwargs)

    @staticmethod
    def owner_scope(user: Optional[User]) -> Optional[str]:
        """Owner filter for a user: super-admins see everything"""
        if user is None or user.is_super_admin:
            return None
        return user.username

    # Dashboard operations
    def get_dashboard(self, user: Optional[User], event_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Aggregates for the user's events, optionally narrowed to one event.

        A fresh cached result skips the whole load. When the sheet cannot be
        read the aggregates are built from the last good rows and flagged
        'stale'; they are not cached so the next request tries again.
        Without any earlier rows SheetLoadError propagates.
        """
        owner = self.owner_scope(user)
        key = (owner, event_id or None)

        cached = self.dashboards.get(key)
        if cached is not None:
            return cached

        sequence = self.dashboards.begin()
        events = self.events.get_events()
        purchases = self.purchases.get_all_purchases()
        stale = self.events.serving_stale or self.purchases.serving_stale

        dashboard = calculate_sales_analytics(purchases, events, owner=owner, event_id=event_id)
        dashboard['stale'] = stale
        if stale:
            logger.warning(f"Dashboard for {owner or 'all'} built from cached rows after a failed load")
        else:
            self.dashboards.put(key, dashboard, sequence)
        return dashboard

    def refresh(self):
        """Manual refresh: the next read of every view goes back to the sheet"""
        self.events.refresh()
        self.purchases.refresh()
        self.dashboards.invalidate()

    # Event operations
    def list_events(self, user: Optional[User], sort_by: str = 'date', descending: bool = False) -> List[Dict[str, Any]]:
        """Admin listing of the user's events with sold/capacity figures"""
        events = owned_events(self.events.get_events(), self.owner_scope(user))
        purchases = self.purchases.get_all_purchases()
        listing = []
        for event in sort_events(events, sort_by, descending):
            item = event.to_dict()
            item['occupancy'] = calculate_occupancy(event, purchases)
            listing.append(item)
        return listing

    def list_public_events(self, sort_by: str = 'date', descending: bool = False) -> List[Event]:
        return sort_events(self.events.get_public_events(), sort_by, descending)

    def get_owned_event(self, user: Optional[User], event_id: str) -> Optional[Event]:
        owner = self.owner_scope(user)
        event = self.events.get_event(event_id)
        if event is None or (owner is not None and event.created_by != owner):
            return None
        return event

    def create_event(self, user: User, payload: Dict[str, Any]) -> Event:
        event = validate_event({**payload, 'id': '', 'created_by': user.username, 'created_at': ''})
        event = self.events.create_event(event)
        self.dashboards.invalidate()
        return event

    def update_event(self, user: User, event_id: str, payload: Dict[str, Any]) -> Optional[Event]:
        existing = self.get_owned_event(user, event_id)
        if existing is None:
            return None
        merged = {**existing.to_dict(), **payload,
                  'id': existing.id, 'created_by': existing.created_by, 'created_at': existing.created_at}
        event = self.events.update_event(validate_event(merged))
        self.dashboards.invalidate()
        return event

    def delete_event(self, user: User, event_id: str) -> bool:
        if self.get_owned_event(user, event_id) is None:
            return False
        self.events.delete_event(event_id)
        self.dashboards.invalidate()
        return True

    # Purchase operations
    def list_purchases(self, user: Optional[User], event_id: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.get_dashboard(user, event_id)['purchases']

    def confirm_and_send(self, user: Optional[User], purchase_id: str) -> Optional[Dict[str, Any]]:
        """
        Build one QR per ticket and the wa.me link that delivers them.

        The confirm write is fire-and-forget, the purchase is shown as sent
        right away whatever the sheet ends up holding.
        """
        purchase = self._visible_purchase(user, purchase_id)
        if purchase is None:
            return None

        qr_codes = self.qr.generate_ticket_qrs(purchase)
        link = self.whatsapp.build_qr_link(purchase, qr_codes)
        purchase = self.purchases.record_confirmation(purchase, [qr.url for qr in qr_codes])
        self.dashboards.invalidate()

        return {
            'purchase': purchase.to_dict(),
            'qr_codes': [qr.to_dict() for qr in qr_codes],
            'whatsapp_url': link,
        }

    def update_purchase_status(self, user: Optional[User], purchase_id: str, status_text: str):
        try:
            status = PurchaseStatus(str(status_text).lower())
        except ValueError:
            raise ValidationError(f"Invalid purchase status: {status_text}")

        if self._visible_purchase(user, purchase_id) is None:
            return None
        purchase = self.purchases.update_purchase_status(purchase_id, status)
        self.dashboards.invalidate()
        return purchase

    def _visible_purchase(self, user: Optional[User], purchase_id: str):
        owner = self.owner_scope(user)
        purchase = self.purchases.get_purchase(purchase_id)
        if purchase is None or owner is None:
            return purchase
        scoped = scope_purchases([purchase], self.events.get_events(), owner)
        return purchase if scoped else None

    # Storefront operations
    def quote_order(self, payload: Dict[str, Any]):
        """Validate a storefront order and price it from its event (or defaults)"""
        order = validate_order(payload)
        ticket_price = self.config.default_ticket_price
        vip_price = self.config.default_vip_price

        if order.event_id:
            event = self.events.get_event(order.event_id)
            if event is None or not event.is_active:
                raise ValidationError(f"Event is not on sale: {order.event_id}")
            ticket_price = event.ticket_price
            vip_price = event.vip_price
            order.event_name = event.name

        order.total = order.ticket_qty * ticket_price + order.addon_qty * vip_price
        return order

    def submit_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Write a pending purchase row and return the organizer notice link"""
        order = self.quote_order(payload)
        saved = self.purchases.submit_order(order)
        self.dashboards.invalidate()
        logger.info(f"Order submitted for {order.first_name} {order.last_name}: {order.ticket_qty} tickets")

        return {
            'total': order.total,
            'event_name': order.event_name,
            'saved': saved,
            'whatsapp_url': self.whatsapp.build_order_notice_link(order),
        }
