import pytest

from memento import create_app
from memento.errors import StoreUnavailable
from memento.models import db, Partner, Product
from memento.policy import AccessPolicy
from memento.services import cache
from memento.services.cache import _MemStore
from memento.services.records import RecordStore, TokenRecord
from memento.services.session import Session


class MemoryRecordStore:
    """Dict-backed stand-in for RecordStore."""

    def __init__(self, *records):
        self.rows = {rec.tag_id: rec.to_dict() for rec in records}

    def get(self, tag_id):
        row = self.rows.get(tag_id)
        return TokenRecord.from_dict(row) if row else None

    def get_by_id_and_passphrase(self, tag_id, passphrase):
        row = self.rows.get(tag_id)
        if row is None or row['passphrase'] != passphrase:
            return None
        return TokenRecord.from_dict(row)

    def update(self, tag_id, fields, expect_status=None):
        row = self.rows.get(tag_id)
        if row is None or (expect_status is not None and row['status'] != expect_status):
            return False
        row.update({k: v for k, v in fields.items() if k in row})
        return True

    def insert(self, record):
        self.rows[record.tag_id] = record.to_dict()


class BrokenStore:
    def get(self, tag_id):
        raise StoreUnavailable('connection refused')

    def get_by_id_and_passphrase(self, tag_id, passphrase):
        raise StoreUnavailable('connection refused')

    def update(self, tag_id, fields, expect_status=None):
        raise StoreUnavailable('connection refused')

    def insert(self, record):
        raise StoreUnavailable('connection refused')


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def policy():
    return AccessPolicy(
        admin_tag_id='RM-ADMIN-2026',
        new_tag_sentinel='NEW',
        fallback_passcode='ROME2026',
        admin_marker='ADMIN',
    )


@pytest.fixture
def session():
    return Session('device-1', ttl=3600, store=_MemStore())


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def app():
    cache._set(None)
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'USE_REDIS': False,
        'DEVICE_COOKIE_SECURE': False,
        'ADMIN_API_KEY': 'test-key',
        'VERIFY_HOST': 'memento.test',
        'BASE_URL': 'http://localhost:5000',
        'FALLBACK_PASSCODE': 'ROME2026',
    })
    with app.app_context():
        store = RecordStore()
        store.insert(TokenRecord(tag_id='RM-ALPHA-01'))
        store.insert(TokenRecord(tag_id='RM-GOLD-01', status='active', passphrase='Gold!', tier='gold'))
        db.session.add(Partner(id=1, name='La Carbonara', discount='15% OFF', category='food'))
        db.session.add(Product(id=1, name='Photo Album', price=49))
        db.session.add(Product(id=2, name='Guide', price=None))
        db.session.commit()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
    cache._set(None)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signed_in(client):
    r = client.post('/api/login', json={'tag_id': 'RM-GOLD-01', 'passphrase': 'Gold!'})
    assert r.status_code == 200
    return client
