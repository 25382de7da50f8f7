from tiketnow.models import PurchaseStatus, EventStatus
from tiketnow.utils.csv_utils import decode_csv
from tiketnow.utils.row_mapper import (
    map_purchase_rows, map_event_rows, parse_int, parse_float, parse_status,
    parse_event_status, purchase_columns_from_header, PurchaseColumns,
)

from conftest import EVENTS_CSV, PURCHASES_CSV

HEADER = ['timestamp', 'firstName', 'lastName', 'phone', 'email', 'ticketQty',
          'coolerQty', 'paymentMethod', 'total', 'status', 'eventId', 'eventName']


def purchase_row(first_name, ticket_qty='1', status='', timestamp='t'):
    return [timestamp, first_name, 'Apellido', '111', 'x@example.com', ticket_qty,
            '0', 'efectivo', '5000', status, 'ev-1', 'Fiesta']


class TestNumberParsing:

    def test_leading_integer(self):
        assert parse_int('3') == 3
        assert parse_int('4 entradas') == 4

    def test_non_numeric_is_zero(self):
        assert parse_int('dos') == 0
        assert parse_int('') == 0
        assert parse_int(None) == 0

    def test_negative_clamps_to_zero(self):
        assert parse_int('-2') == 0
        assert parse_float('-10.5') == 0.0

    def test_float_prefix(self):
        assert parse_float('12000') == 12000.0
        assert parse_float('99.5 ARS') == 99.5
        assert parse_float('abc') == 0.0

    def test_huge_float_is_zero(self):
        assert parse_float('1e999') == 0.0


class TestStatusParsing:

    def test_substring_match(self):
        assert parse_status('Confirmado el 5/1') == PurchaseStatus.CONFIRMED

    def test_empty_is_pending(self):
        assert parse_status('') == PurchaseStatus.PENDING
        assert parse_status(None) == PurchaseStatus.PENDING

    def test_sent_wins_over_confirmed(self):
        assert parse_status('confirmado y enviado') == PurchaseStatus.SENT

    def test_english_keywords(self):
        assert parse_status('SENT') == PurchaseStatus.SENT
        assert parse_status('confirmed') == PurchaseStatus.CONFIRMED

    def test_english_keywords_are_whole_words(self):
        assert parse_status('Unconfirmed') == PurchaseStatus.PENDING
        assert parse_status('presentado') == PurchaseStatus.PENDING
        assert parse_status('consent pending') == PurchaseStatus.PENDING
        assert parse_status('Confirmed by phone') == PurchaseStatus.CONFIRMED

    def test_negated_keywords(self):
        assert parse_status('not sent') == PurchaseStatus.PENDING
        assert parse_status('no enviado') == PurchaseStatus.PENDING
        assert parse_status('confirmado, no enviado') == PurchaseStatus.CONFIRMED

    def test_event_status(self):
        assert parse_event_status('Inactivo') == EventStatus.INACTIVE
        assert parse_event_status('') == EventStatus.ACTIVE
        assert parse_event_status('whatever') == EventStatus.ACTIVE


class TestPurchaseMapping:

    def test_non_numeric_quantity_maps_to_zero(self):
        purchases = map_purchase_rows([HEADER, purchase_row('Ana', ticket_qty='muchas')])
        assert len(purchases) == 1
        assert purchases[0].ticket_qty == 0

    def test_empty_first_name_is_excluded(self):
        purchases = map_purchase_rows([HEADER, purchase_row(''), purchase_row('   '), purchase_row('Ana')])
        assert [p.first_name for p in purchases] == ['Ana']

    def test_output_is_newest_first(self):
        rows = [HEADER, purchase_row('R1'), purchase_row('R2'), purchase_row('R3')]
        assert [p.first_name for p in map_purchase_rows(rows)] == ['R3', 'R2', 'R1']

    def test_row_numbers_and_ids(self):
        purchases = map_purchase_rows([HEADER, purchase_row('Ana', timestamp='ts1')])
        purchase = purchases[0]
        assert purchase.row_number == 2
        assert purchase.id == '1-Ana-Apellido-ts1'

    def test_short_row_takes_defaults(self):
        purchases = map_purchase_rows([HEADER, ['t', 'Ana']])
        purchase = purchases[0]
        assert purchase.last_name == ''
        assert purchase.total == 0.0
        assert purchase.status == PurchaseStatus.PENDING
        assert purchase.event_id == ''

    def test_header_only_or_empty(self):
        assert map_purchase_rows([]) == []
        assert map_purchase_rows([HEADER]) == []

    def test_full_export(self):
        purchases = map_purchase_rows(decode_csv(PURCHASES_CSV))
        assert [p.first_name for p in purchases] == ['Carla', 'Bruno', 'Ana']
        assert purchases[1].status == PurchaseStatus.CONFIRMED
        assert purchases[2].addon_qty == 1
        assert purchases[2].total == 12000.0


class TestHeaderLayout:

    def test_reordered_columns_by_header(self):
        header = ['Nombre', 'Apellido', 'Timestamp', 'Entradas', 'Total']
        rows = [header, ['Ana', 'Gomez', 'ts', '2', '10000']]
        purchase = map_purchase_rows(rows, use_header=True)[0]
        assert purchase.first_name == 'Ana'
        assert purchase.last_name == 'Gomez'
        assert purchase.ticket_qty == 2
        assert purchase.total == 10000.0

    def test_unknown_headers_keep_positions(self):
        columns = purchase_columns_from_header(['a', 'b', 'c'])
        assert columns == PurchaseColumns()


class TestEventMapping:

    def test_full_export(self):
        events = map_event_rows(decode_csv(EVENTS_CSV))
        assert [e.id for e in events] == ['ev-2', 'ev-1']
        fiesta = events[1]
        assert fiesta.description == 'Gran fiesta, con DJ'
        assert fiesta.ticket_price == 5000.0
        assert fiesta.capacity == 10
        assert fiesta.created_by == 'admin'
        assert fiesta.is_active

    def test_blank_id_uses_row_number(self):
        rows = [['id', 'name'], ['', 'Sin id']]
        assert map_event_rows(rows)[0].id == 'row-2'

    def test_blank_name_is_skipped(self):
        rows = [['id', 'name'], ['x', ''], ['y', 'Evento']]
        assert [e.id for e in map_event_rows(rows)] == ['y']
