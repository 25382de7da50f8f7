#!/usr/bin/env python3
"""
WhatsApp click-to-chat links (wa.me)
Nothing is sent from here; callers hand the link to a browser
"""

import logging
from abc import ABC, abstractmethod
from typing import List
from urllib.parse import quote

from tiketnow.models import Purchase, QRCode, OrderRequest
from tiketnow.services.qr_service import format_money
from tiketnow.utils.phone_utils import normalize_phone

logger = logging.getLogger(__name__)

WA_ME_URL = 'https://wa.me/{phone}?text={text}'
TICKET_EMOJIS = ['🎫', '🎟️', '🎪', '🎭', '🎨', '🎯', '🎲', '🎸']


class WhatsAppService(ABC):
    """Formats ticket delivery messages as wa.me links"""

    @abstractmethod
    def build_qr_link(self, purchase: Purchase, qr_codes: List[QRCode]) -> str:
        ...

    @abstractmethod
    def format_phone_number(self, phone: str) -> str:
        ...


class WaMeWhatsAppService(WhatsAppService):

    def __init__(self, country_code: str = '54', organizer_phone: str = ''):
        self.country_code = country_code
        self.organizer_phone = organizer_phone

    def format_phone_number(self, phone: str) -> str:
        return normalize_phone(phone, self.country_code)

    def build_link(self, phone: str, message: str) -> str:
        return WA_ME_URL.format(phone=phone, text=quote(message, safe=''))

    def build_qr_link(self, purchase: Purchase, qr_codes: List[QRCode]) -> str:
        """Link that opens a chat with the buyer holding all their ticket QR links"""
        phone = self.format_phone_number(purchase.phone)
        if not phone:
            logger.warning(f"Purchase {purchase.id} has no usable phone number")
        return self.build_link(phone, self.build_qr_message(purchase, qr_codes))

    def build_qr_message(self, purchase: Purchase, qr_codes: List[QRCode]) -> str:
        lines = [
            f"🎉 ¡Hola {purchase.first_name}!",
            '',
            '🎫 Aquí están tus códigos QR de entrada:',
            '',
        ]
        lines.extend(
            f"{TICKET_EMOJIS[i % len(TICKET_EMOJIS)]} *Entrada {qr.ticket_index}:* {qr.url}"
            for i, qr in enumerate(qr_codes)
        )
        lines.extend([
            '',
            '📱 *Instrucciones:*',
            '• Guarda estos códigos en tu teléfono',
            '• Presenta cada QR en la entrada del evento',
            '• Un QR = Una persona',
            '',
        ])
        if purchase.addon_qty > 0:
            lines.append(f"🧊 *Conservadora incluida:* {purchase.addon_qty} unidad(es)")
        lines.extend([
            '',
            '🎵 *¡Nos vemos en la fiesta!* 🎵',
            '',
            '---',
            '🎪 Tiket Now - Tu entrada al mejor evento',
        ])
        return '\n'.join(line for line in lines if line != '')

    def build_order_notice_link(self, order: OrderRequest) -> str:
        """Link the buyer uses to send the order summary to the organizer"""
        lines = [
            "🎉 *NUEVA COMPRA - TIKET NOW* 🎉",
            "",
            f"👤 *Cliente:* {order.first_name} {order.last_name}",
            f"📱 *Teléfono:* {order.phone}",
            f"📧 *Email:* {order.email}",
        ]
        if order.event_name:
            lines.append(f"🎪 *Evento:* {order.event_name}")
        lines.extend([
            f"🎫 *Entradas:* {order.ticket_qty}",
            f"🧊 *Conservadoras:* {order.addon_qty}",
            f"💳 *Método de Pago:* {order.payment_method}",
            f"💰 *TOTAL:* ${format_money(order.total)}",
            "",
            "_Por favor, enviar comprobante de pago_",
        ])
        message = "\n".join(lines)
        return self.build_link(self.format_phone_number(self.organizer_phone), message)
