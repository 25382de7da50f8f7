#!/usr/bin/env python3
"""
Ticket QR codes rendered by QuickChart
Only URLs are built here, the image is produced by the remote service
"""

import logging
from abc import ABC, abstractmethod
from typing import List
from urllib.parse import urlencode

from tiketnow.models import Purchase, QRCode

logger = logging.getLogger(__name__)


def format_money(amount: float) -> str:
    """Spanish-style thousands separator: 12500 -> '12.500', 99.5 -> '99,50'"""
    if float(amount).is_integer():
        return f"{int(amount):,}".replace(',', '.')
    whole, _, cents = f"{amount:,.2f}".partition('.')
    return f"{whole.replace(',', '.')},{cents}"


class QRService(ABC):
    """Builds one QR code per ticket of a purchase"""

    @abstractmethod
    def generate_ticket_qrs(self, purchase: Purchase) -> List[QRCode]:
        ...

    @abstractmethod
    def generate_qr_url(self, content: str) -> str:
        ...


class QuickChartQRService(QRService):

    def __init__(self, base_url: str = 'https://quickchart.io/qr', size: int = 512, margin: int = 10):
        self.base_url = base_url
        self.size = size
        self.margin = margin

    def generate_ticket_qrs(self, purchase: Purchase) -> List[QRCode]:
        qr_codes = []
        for index in range(1, purchase.ticket_qty + 1):
            content = self.build_qr_content(purchase, index)
            qr_codes.append(QRCode(
                id=f"{purchase.id}-ticket-{index}",
                content=content,
                url=self.generate_qr_url(content),
                ticket_index=index,
            ))

        logger.info(f"Generated {len(qr_codes)} QR codes for purchase {purchase.id}")
        return qr_codes

    def generate_qr_url(self, content: str) -> str:
        params = urlencode({
            'text': content,
            'size': str(self.size),
            'margin': str(self.margin),
            'format': 'png',
        })
        return f"{self.base_url}?{params}"

    def build_qr_content(self, purchase: Purchase, ticket_index: int) -> str:
        lines = [
            '🎫 TIKET NOW',
            '',
            f"👤 {purchase.full_name}",
            f"📱 {purchase.phone}",
            f"📧 {purchase.email}",
            '',
        ]
        if purchase.event_name:
            lines.append(f"🎉 Evento: {purchase.event_name}")
        lines.extend([
            f"🎟️ Entrada: {ticket_index}/{purchase.ticket_qty}",
            f"🧊 Conservadora: {'Incluida' if purchase.addon_qty > 0 else 'No incluida'}",
            f"💰 Total: ${format_money(purchase.total)}",
            '',
            '🎉 ¡Válido para el evento!',
        ])
        return '\n'.join(lines)
