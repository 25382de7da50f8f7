"""
Shared fixtures: in-memory sheets, a recording script writer and a fake clock
"""

import pytest

from app import create_app
from tiketnow.config import AppConfig
from tiketnow.services.sheet_source import SheetSource, SheetLoadError
from tiketnow.ticketing_service import TicketingService
from tiketnow.utils.csv_utils import decode_csv

EVENTS_CSV = (
    "id,name,date,hour,description,location,image,ticketPrice,vipPrice,capacity,createdBy,createdAt,status\n"
    "ev-1,Fiesta de Verano,15/12/2025,22:00,\"Gran fiesta, con DJ\",Club Central,,5000,2000,10,admin,2025-10-01,active\n"
    "ev-2,Noche de Rock,2025-11-20,21:00,Bandas en vivo,Teatro,,7000,2500,50,other,2025-10-02,active\n"
)

PURCHASES_CSV = (
    "timestamp,firstName,lastName,phone,email,ticketQty,coolerQty,paymentMethod,total,status,eventId,eventName\n"
    "2025-10-05 10:00,Ana,Gomez,011 1234-5678,ana@example.com,2,1,transferencia,12000,pendiente,ev-1,Fiesta de Verano\n"
    "2025-10-05 11:00,Bruno,Diaz,1155556666,bruno@example.com,3,0,efectivo,15000,Confirmado el 5/10,ev-1,Fiesta de Verano\n"
    "2025-10-06 09:30,Carla,Ruiz,+54 9 11 2222-3333,carla@example.com,1,0,efectivo,7000,enviado,ev-2,Noche de Rock\n"
)


class FakeSheetSource(SheetSource):
    """Serves CSV text per sheet name; can be told to fail"""

    def __init__(self, sheets=None):
        self.sheets = dict(sheets or {})
        self.calls = []
        self.failures = 0
        self.fail_always = False

    def fetch_rows(self, sheet_name):
        self.calls.append(sheet_name)
        if self.fail_always:
            raise SheetLoadError()
        if self.failures > 0:
            self.failures -= 1
            raise SheetLoadError()
        return decode_csv(self.sheets.get(sheet_name, ''))


class RecordingWriter:
    """Stands in for ScriptWriteClient and keeps every post"""

    def __init__(self, result=True):
        self.posts = []
        self.result = result
        self.configured = True

    def post(self, action, fields):
        self.posts.append((action, dict(fields)))
        return self.result

    def actions(self):
        return [action for action, _ in self.posts]


class FakeClock:

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def config():
    return AppConfig(
        sheet_id='test-sheet',
        script_url='https://script.example.com/exec',
        organizer_phone='1155550000',
        admin_users={
            'admin': ('admin123', 'admin'),
            'other': ('other123', 'admin'),
            'super': ('super123', 'super-admin'),
        },
        secret_key='test-secret',
    )


@pytest.fixture
def source():
    return FakeSheetSource({'Hoja 1': PURCHASES_CSV, 'Hoja 2': EVENTS_CSV})


@pytest.fixture
def writer():
    return RecordingWriter()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def ticketing(config, source, writer, clock, sleeps):
    return TicketingService(config, source=source, writer=writer, clock=clock, sleep=sleeps.append)


@pytest.fixture
def app(config, ticketing):
    app = create_app(config, ticketing=ticketing)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, username='admin', password='admin123'):
    return client.post('/api/auth/login', json={'username': username, 'password': password})


@pytest.fixture
def admin_client(client):
    assert login(client).status_code == 200
    return client


@pytest.fixture
def super_client(client):
    assert login(client, 'super', 'super123').status_code == 200
    return client
