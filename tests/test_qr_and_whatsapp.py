from urllib.parse import urlparse, parse_qs, unquote

from tiketnow.models import Purchase, OrderRequest
from tiketnow.services.qr_service import QuickChartQRService, format_money
from tiketnow.services.whatsapp_service import WaMeWhatsAppService


def make_purchase(**overrides):
    fields = dict(
        id='1-Ana-Gomez-ts', row_number=2, timestamp='ts', first_name='Ana', last_name='Gomez',
        phone='011 1234-5678', email='ana@example.com', ticket_qty=2, addon_qty=1,
        payment_method='efectivo', total=12000.0, event_id='ev-1', event_name='Fiesta de Verano',
    )
    fields.update(overrides)
    return Purchase(**fields)


def test_format_money():
    assert format_money(12500) == '12.500'
    assert format_money(1234567.0) == '1.234.567'
    assert format_money(99.5) == '99,50'


class TestQuickChart:

    def test_one_code_per_ticket(self):
        qrs = QuickChartQRService().generate_ticket_qrs(make_purchase(ticket_qty=3))
        assert [qr.ticket_index for qr in qrs] == [1, 2, 3]
        assert qrs[0].id == '1-Ana-Gomez-ts-ticket-1'

    def test_no_tickets_no_codes(self):
        assert QuickChartQRService().generate_ticket_qrs(make_purchase(ticket_qty=0)) == []

    def test_url_parameters(self):
        qr = QuickChartQRService().generate_ticket_qrs(make_purchase())[1]
        url = urlparse(qr.url)
        params = parse_qs(url.query)

        assert f"{url.scheme}://{url.netloc}{url.path}" == 'https://quickchart.io/qr'
        assert params['size'] == ['512']
        assert params['margin'] == ['10']
        assert params['format'] == ['png']
        assert params['text'] == [qr.content]

    def test_content(self):
        content = QuickChartQRService().build_qr_content(make_purchase(), 2)
        assert '👤 Ana Gomez' in content
        assert 'Entrada: 2/2' in content
        assert 'Evento: Fiesta de Verano' in content
        assert 'Conservadora: Incluida' in content
        assert 'Total: $12.000' in content

    def test_content_without_event(self):
        content = QuickChartQRService().build_qr_content(make_purchase(event_name='', addon_qty=0), 1)
        assert 'Evento' not in content
        assert 'Conservadora: No incluida' in content


class TestWaMe:

    def test_qr_link_targets_buyer(self):
        service = WaMeWhatsAppService()
        purchase = make_purchase()
        qrs = QuickChartQRService().generate_ticket_qrs(purchase)

        link = service.build_qr_link(purchase, qrs)
        assert link.startswith('https://wa.me/5491112345678?text=')

        message = unquote(link.split('?text=', 1)[1])
        assert '¡Hola Ana!' in message
        assert qrs[0].url in message
        assert qrs[1].url in message
        assert 'Conservadora incluida:* 1' in message
        assert '\n\n' not in message

    def test_message_is_fully_encoded(self):
        link = WaMeWhatsAppService().build_link('549', 'a b&c/d')
        assert link == 'https://wa.me/549?text=a%20b%26c%2Fd'

    def test_order_notice_goes_to_organizer(self):
        service = WaMeWhatsAppService(organizer_phone='1155550000')
        order = OrderRequest(first_name='Ana', last_name='Gomez', phone='111', email='a@x.com',
                             ticket_qty=2, addon_qty=1, total=14000, event_name='Fiesta')

        link = service.build_order_notice_link(order)
        assert link.startswith('https://wa.me/5491155550000?text=')

        message = unquote(link.split('?text=', 1)[1])
        assert '*Cliente:* Ana Gomez' in message
        assert '*Evento:* Fiesta' in message
        assert '*TOTAL:* $14.000' in message
