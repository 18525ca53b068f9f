"""Scan resolution and one-time activation of souvenir tags."""
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ..errors import AlreadyActivated, RecordNotFound, StoreUnavailable, VaultError
from ..policy import AccessPolicy
from .records import TokenRecord

log = logging.getLogger(__name__)


class ScanState(str, Enum):
    NO_RECORD = 'no_record'
    PENDING = 'pending'
    ACTIVE = 'active'
    ADMIN_BYPASS = 'admin_bypass'


@dataclass
class Resolution:
    state: ScanState
    tag_id: str
    route: str  # vault|activate|login
    record: Optional[TokenRecord] = None
    error: Optional[VaultError] = None

    @property
    def grants_vault(self) -> bool:
        return self.state in (ScanState.ACTIVE, ScanState.ADMIN_BYPASS)

    def to_dict(self) -> dict:
        data = {'state': self.state.value, 'tag_id': self.tag_id, 'route': self.route}
        if self.record is not None:
            data['record'] = self.record.public_dict()
        if self.error is not None:
            data['error'] = self.error.code
            data['message'] = self.error.message
        return data


def _admin_record(tag_id: str, stored: Optional[TokenRecord]) -> TokenRecord:
    if stored is None:
        return TokenRecord(tag_id=tag_id, status='active', role='admin', tier='premium')
    return replace(stored, role='admin')


def resolve_tag(tag_id: str, store, policy: AccessPolicy) -> Resolution:
    """Decide where a scan of ``tag_id`` leads. Never raises for store errors."""
    error = None
    try:
        record = store.get(tag_id)
    except StoreUnavailable as e:
        record, error = None, e

    if policy.is_admin_tag(tag_id):
        return Resolution(ScanState.ADMIN_BYPASS, tag_id, 'vault', _admin_record(tag_id, record))

    if record is None:
        error = error or RecordNotFound('Token not found in database.')
        route = 'activate' if policy.is_new_tag(tag_id) else 'login'
        return Resolution(ScanState.NO_RECORD, tag_id, route, error=error)

    if record.is_active:
        return Resolution(ScanState.ACTIVE, tag_id, 'vault', record)
    return Resolution(ScanState.PENDING, tag_id, 'activate', record)


def enter(tag_id: str, store, policy: AccessPolicy, session) -> Resolution:
    """Resolve a scan and open the session when it leads to the vault."""
    res = resolve_tag(tag_id, store, policy)
    log.info('scan %s -> %s', tag_id, res.state.value)
    if res.error is not None:
        log.warning('scan %s: %s', tag_id, res.error.message)
    if res.grants_vault:
        session.create(res.record)
    return res


def resume(session) -> Optional[Resolution]:
    """Entry without a scan parameter: reuse the device session if there is one."""
    record = session.load()
    if record is None:
        return None
    state = ScanState.ADMIN_BYPASS if record.role == 'admin' else ScanState.ACTIVE
    return Resolution(state, record.tag_id, 'vault', record)


def check_activatable(tag_id: str, store) -> TokenRecord:
    record = store.get(tag_id)
    if record is None:
        raise RecordNotFound()
    if record.is_active:
        raise AlreadyActivated()
    return record


def activate(tag_id: str, passphrase: str, store, session,
             recovery_contact: Optional[str] = None) -> TokenRecord:
    """Move a pending tag to active with the holder's passphrase.

    The update only applies while the row is still pending, so a concurrent
    activation from another device cannot overwrite a passphrase already set.
    """
    check_activatable(tag_id, store)
    if not passphrase:
        raise ValueError('passphrase must not be empty')

    changed = store.update(
        tag_id,
        {
            'passphrase': passphrase,
            'recovery_contact': recovery_contact or None,
            'status': 'active',
            'activated_at': datetime.now(timezone.utc),
        },
        expect_status='pending',
    )
    if not changed:
        log.warning('activation of %s lost to a concurrent activation', tag_id)
        raise AlreadyActivated()

    record = store.get(tag_id)
    if record is None:
        raise RecordNotFound()
    session.create(record)
    log.info('tag %s activated', tag_id)
    return record
