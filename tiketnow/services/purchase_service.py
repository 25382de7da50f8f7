#!/usr/bin/env python3
"""
Purchase operations against the purchases sheet
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import List, Optional

from tiketnow.models import Purchase, PurchaseStatus, OrderRequest
from tiketnow.services.cache import TimedCache
from tiketnow.services.script_client import ScriptWriteClient, format_amount
from tiketnow.services.sheet_source import SheetSource, SheetLoadError
from tiketnow.utils.row_mapper import map_purchase_rows

logger = logging.getLogger(__name__)

PURCHASES_KEY = 'purchases'

# Words written to the status column, matched back by parse_status
STATUS_LABELS = {
    PurchaseStatus.PENDING: 'pendiente',
    PurchaseStatus.CONFIRMED: 'confirmado',
    PurchaseStatus.SENT: 'enviado',
}


class PurchaseService(ABC):
    """Read access to purchases plus the status write path"""

    @abstractmethod
    def get_all_purchases(self) -> List[Purchase]:
        ...

    @abstractmethod
    def update_purchase_status(self, purchase_id: str, status: PurchaseStatus) -> Optional[Purchase]:
        ...


class GoogleSheetsPurchaseService(PurchaseService):
    """Purchases stored in the purchases sheet, cached for a short window"""

    def __init__(self, source: SheetSource, writer: ScriptWriteClient,
                 sheet_name: str = 'Hoja 1', cache: Optional[TimedCache] = None,
                 use_header: bool = False):
        self.source = source
        self.writer = writer
        self.sheet_name = sheet_name
        self.cache = cache or TimedCache()
        self.use_header = use_header
        self.serving_stale = False

    def get_all_purchases(self) -> List[Purchase]:
        """All purchases, newest first. Falls back to the last good load on failure."""
        cached = self.cache.get(PURCHASES_KEY)
        if cached is not None:
            logger.info("Using cached purchases")
            self.serving_stale = False
            return list(cached)

        sequence = self.cache.begin()
        try:
            rows = self.source.fetch_rows(self.sheet_name)
        except SheetLoadError as e:
            stale = self.cache.get_stale(PURCHASES_KEY)
            if stale is not None:
                logger.warning(f"Purchase load failed, serving cached purchases: {e}")
                self.serving_stale = True
                return list(stale)
            raise

        purchases = map_purchase_rows(rows, use_header=self.use_header)
        self.cache.put(PURCHASES_KEY, purchases, sequence)
        self.serving_stale = False
        logger.info(f"{len(purchases)} purchases loaded")
        return list(purchases)

    def get_purchase(self, purchase_id: str) -> Optional[Purchase]:
        return next((p for p in self.get_all_purchases() if p.id == purchase_id), None)

    def _patch_status(self, purchase_id: str, status: PurchaseStatus):
        def patch(purchases):
            return [_with_status(p, status) if p.id == purchase_id else p for p in purchases]
        self.cache.update(PURCHASES_KEY, patch)

    def update_purchase_status(self, purchase_id: str, status: PurchaseStatus) -> Optional[Purchase]:
        """Send a status write and patch the cached row; None when the id is unknown"""
        purchase = self.get_purchase(purchase_id)
        if purchase is None:
            logger.warning(f"No purchase found with id {purchase_id}")
            return None

        self.writer.post('updateStatus', {
            'rowNumber': str(purchase.row_number),
            'status': STATUS_LABELS[status],
        })
        self._patch_status(purchase_id, status)
        logger.info(f"Updating purchase {purchase_id} to status: {status.value}")
        return _with_status(purchase, status)

    def record_confirmation(self, purchase: Purchase, qr_urls: List[str]) -> Purchase:
        """Write the confirm action with the generated QR links"""
        self.writer.post('confirm', {
            'rowNumber': str(purchase.row_number),
            'codes': json.dumps(qr_urls),
        })
        self._patch_status(purchase.id, PurchaseStatus.SENT)
        return _with_status(purchase, PurchaseStatus.SENT)

    def submit_order(self, order: OrderRequest) -> bool:
        """Storefront submission: appends a pending row through the script endpoint"""
        sent = self.writer.post(None, {
            'firstName': order.first_name,
            'lastName': order.last_name,
            'phone': order.phone,
            'email': order.email,
            'ticketQty': str(order.ticket_qty),
            'coolerQty': str(order.addon_qty),
            'paymentMethod': order.payment_method,
            'total': format_amount(order.total),
            'status': STATUS_LABELS[PurchaseStatus.PENDING],
            'eventId': order.event_id,
            'eventName': order.event_name,
            'createdAt': order.created_at,
        })
        # The new row only shows up once the sheet is read again
        self.cache.invalidate(PURCHASES_KEY)
        return sent

    def refresh(self):
        self.cache.invalidate(PURCHASES_KEY)


def _with_status(purchase: Purchase, status: PurchaseStatus) -> Purchase:
    return replace(purchase, status=status)
