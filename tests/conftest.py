import os, sys, pytest
# Ensure project root is on path so 'mantemos' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# Settings are read at import time; configure before importing the package
os.environ['STORAGE_PROVIDER'] = 'memory'
os.environ['SYNC_PUSH_LATENCY_MS'] = '0'
os.environ['SYNC_PULL_LATENCY_MS'] = '0'
os.environ['SYNC_RETRY_BACKOFF_MS'] = '0'
os.environ['SYNC_MAX_RETRIES'] = '3'
os.environ['ORDER_ID_STRATEGY'] = 'head'
os.environ['ADMIN_PASSWORDS'] = 'master,Backup'
os.environ['JWT_SECRET'] = 'test-secret'
os.environ['RATE_LIMIT'] = '10000/minute'
os.environ['ENABLE_METRICS'] = 'false'

from datetime import time
from fastapi.testclient import TestClient
from mantemos.config import Settings
from mantemos.main import create_app
from mantemos.schemas.technicians import TechnicianCreate
from mantemos.storage.memory_provider import MemoryStorageProvider
from mantemos.workspace import Workspace


class FixedClock:
    def __init__(self, hour=9, minute=0):
        self.now = time(hour, minute)

    def set(self, hour, minute=0):
        self.now = time(hour, minute)

    def __call__(self):
        return self.now


def make_technician(**overrides):
    data = {
        'full_name': 'Ana Souza',
        'registration_number': '1001',
        'login': 'ana',
        'password': 'pw',
        'shift_start': '08:00',
        'shift_end': '16:00',
    }
    data.update(overrides)
    return TechnicianCreate(**data)


@pytest.fixture()
def clock():
    return FixedClock()


@pytest.fixture()
def storage():
    return MemoryStorageProvider()


@pytest.fixture()
def workspace(storage, clock):
    return Workspace(storage, Settings(), clock=clock)


@pytest.fixture()
def client(workspace):
    app = create_app(workspace)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def admin_headers(client):
    token = client.post('/auth/admin', json={'password': 'master'}).json()['access_token']
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture()
def technician(client, admin_headers):
    resp = client.post('/technicians', headers=admin_headers, json={
        'fullName': 'Ana Souza',
        'registrationNumber': '1001',
        'login': 'ana',
        'password': 'pw',
        'shiftStart': '08:00',
        'shiftEnd': '16:00',
    })
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture()
def tech_headers(client, technician):
    token = client.post('/auth/login', json={'login': 'ana', 'password': 'pw'}).json()['access_token']
    return {'Authorization': f'Bearer {token}'}
