import pytest

from memento.errors import InvalidCredentials
from memento.services import activation, auth
from memento.services.records import TokenRecord

from conftest import BrokenStore, MemoryRecordStore


@pytest.fixture
def store():
    return MemoryRecordStore(
        TokenRecord(tag_id='RM-BETA-01', status='active', passphrase='Secret', role='user', tier='gold'),
    )


def test_exact_match_copies_role_and_tier(store, policy, session):
    result = auth.authenticate('RM-BETA-01', 'Secret', store, policy, session)
    assert result is session
    assert (session.record.role, session.record.tier) == ('user', 'gold')
    assert session.load().tag_id == 'RM-BETA-01'


def test_comparison_is_case_sensitive(store, policy, session):
    with pytest.raises(InvalidCredentials):
        auth.authenticate('RM-BETA-01', 'secret', store, policy, session)
    assert session.load() is None


def test_retries_are_unlimited(store, policy, session):
    for _ in range(10):
        with pytest.raises(InvalidCredentials):
            auth.authenticate('RM-BETA-01', 'wrong', store, policy, session)
    auth.authenticate('RM-BETA-01', 'Secret', store, policy, session)
    assert session.active


@pytest.mark.parametrize('tag_id, role', [
    ('RM-BETA-01', 'user'),
    ('RM-ADMIN-7', 'admin'),
    ('NEVER-SEEN', 'user'),
])
def test_fallback_passcode_with_unreachable_store(policy, session, tag_id, role):
    auth.authenticate(tag_id, 'ROME2026', BrokenStore(), policy, session)
    assert session.record.tag_id == tag_id
    assert session.record.role == role
    assert session.record.tier == 'premium'
    assert session.record.status == 'active'


def test_store_failure_with_wrong_passphrase_is_denied(policy, session):
    with pytest.raises(InvalidCredentials):
        auth.authenticate('RM-BETA-01', 'Secret', BrokenStore(), policy, session)


def test_activate_then_login_round_trip(policy, session):
    store = MemoryRecordStore(TokenRecord(tag_id='RM-ALPHA-01'))
    activation.activate('RM-ALPHA-01', 'secret1', store, session)
    auth.logout(session)
    assert session.load() is None

    auth.authenticate('RM-ALPHA-01', 'secret1', store, policy, session)
    assert session.record.status == 'active'


def test_change_passphrase(store, policy, session):
    auth.authenticate('RM-BETA-01', 'Secret', store, policy, session)
    with pytest.raises(InvalidCredentials):
        auth.change_passphrase(session, 'nope', 'New', store)
    auth.change_passphrase(session, 'Secret', 'New', store)
    assert store.rows['RM-BETA-01']['passphrase'] == 'New'
    with pytest.raises(ValueError):
        auth.change_passphrase(session, 'New', '', store)
