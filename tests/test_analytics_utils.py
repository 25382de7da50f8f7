import copy

import pytest

from tiketnow.models import Event, EventNotFound
from tiketnow.utils.analytics_utils import (
    calculate_sales_analytics, calculate_occupancy, scope_purchases, sort_events,
    summarize_purchases, NO_EVENT,
)
from tiketnow.utils.csv_utils import decode_csv
from tiketnow.utils.row_mapper import map_event_rows, map_purchase_rows

from conftest import EVENTS_CSV, PURCHASES_CSV


@pytest.fixture
def events():
    return map_event_rows(decode_csv(EVENTS_CSV))


@pytest.fixture
def purchases():
    return map_purchase_rows(decode_csv(PURCHASES_CSV))


def test_end_to_end_totals_for_first_event(events, purchases):
    result = calculate_sales_analytics(purchases, events, event_id='ev-1')

    assert result['summary']['total_tickets'] == 5
    assert result['summary']['total_revenue'] == 27000
    assert result['summary']['purchase_count'] == 2
    assert result['occupancy'] == [{
        'event_id': 'ev-1',
        'event_name': 'Fiesta de Verano',
        'sold': 5,
        'capacity': 10,
        'remaining': 5,
        'ratio': 0.5,
    }]


def test_unscoped_totals(events, purchases):
    summary = calculate_sales_analytics(purchases, events)['summary']
    assert summary['total_tickets'] == 6
    assert summary['total_revenue'] == 34000
    assert summary['total_addons'] == 1
    assert summary['by_status'] == {'pending': 1, 'confirmed': 1, 'sent': 1}
    assert summary['by_payment_method'] == {'transferencia': 1, 'efectivo': 2}


def test_aggregation_is_idempotent(events, purchases):
    before = copy.deepcopy(purchases)
    first = calculate_sales_analytics(purchases, events, owner='admin')
    second = calculate_sales_analytics(purchases, events, owner='admin')
    assert first == second
    assert purchases == before


def test_scoping_excludes_other_owners_purchases(events, purchases):
    scoped = scope_purchases(purchases, events, owner='admin')
    assert {p.first_name for p in scoped} == {'Ana', 'Bruno'}
    assert len(purchases) == 3

    result = calculate_sales_analytics(purchases, events, owner='admin')
    assert result['summary']['total_revenue'] == 27000
    assert [o['event_id'] for o in result['occupancy']] == ['ev-1']
    assert {p['first_name'] for p in result['purchases']} == {'Ana', 'Bruno'}


def test_scoping_matches_by_name_when_id_blank(events, purchases):
    purchases[0].event_id = ''
    purchases[0].event_name = 'Fiesta de Verano'
    scoped = scope_purchases(purchases, events, owner='admin')
    assert purchases[0] in scoped


def test_event_outside_scope_is_not_found(events, purchases):
    with pytest.raises(EventNotFound):
        calculate_sales_analytics(purchases, events, owner='admin', event_id='ev-2')


def test_breakdown_puts_unknown_events_under_no_event(events, purchases):
    purchases[0].event_id = 'missing'
    by_event = calculate_sales_analytics(purchases, events)['by_event']
    assert by_event[NO_EVENT]['purchases'] == 1
    assert by_event['ev-1']['tickets'] == 5


def test_occupancy_without_capacity(purchases):
    event = Event(id='ev-1', name='Fiesta de Verano', capacity=0)
    occupancy = calculate_occupancy(event, purchases)
    assert occupancy['sold'] == 5
    assert occupancy['ratio'] is None
    assert occupancy['remaining'] is None


def test_summary_of_nothing():
    summary = summarize_purchases([])
    assert summary['total_revenue'] == 0
    assert summary['purchase_count'] == 0
    assert summary['by_payment_method'] == {}


class TestSortEvents:

    def make(self, event_id, date='', capacity=0):
        return Event(id=event_id, name=event_id, date=date, capacity=capacity)

    def test_by_date_mixed_formats(self):
        events = [self.make('dec', '15/12/2025'), self.make('nov', '2025-11-20'), self.make('jan', '01/01/2026')]
        assert [e.id for e in sort_events(events)] == ['nov', 'dec', 'jan']
        assert [e.id for e in sort_events(events, descending=True)] == ['jan', 'dec', 'nov']

    def test_undated_go_last(self):
        events = [self.make('none'), self.make('a', '2025-01-01')]
        assert [e.id for e in sort_events(events, descending=True)] == ['a', 'none']

    def test_capacity_sort_is_stable(self):
        events = [self.make('a', capacity=5), self.make('b', capacity=1), self.make('c', capacity=5)]
        assert [e.id for e in sort_events(events, 'capacity')] == ['b', 'a', 'c']
        assert [e.id for e in sort_events(events, 'capacity', descending=True)] == ['a', 'c', 'b']

    def test_unknown_key(self):
        with pytest.raises(ValueError):
            sort_events([], 'price')
