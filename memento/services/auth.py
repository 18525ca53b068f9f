"""Passphrase login, with the fallback passcode when the store has no match."""
import logging

from ..errors import InvalidCredentials, StoreUnavailable
from ..policy import AccessPolicy
from .records import TokenRecord

log = logging.getLogger(__name__)


def authenticate(tag_id: str, passphrase: str, store, policy: AccessPolicy, session):
    try:
        record = store.get_by_id_and_passphrase(tag_id, passphrase)
    except StoreUnavailable as e:
        log.warning('store unavailable during login for %s, fallback only: %s', tag_id, e)
        record = None

    if record is not None:
        log.info('login %s', tag_id)
        return session.create(record)

    if policy.is_fallback(passphrase):
        ephemeral = TokenRecord(
            tag_id=tag_id,
            status='active',
            role=policy.fallback_role(tag_id),
            tier='premium',
        )
        log.warning('fallback passcode login for %s (role=%s)', tag_id, ephemeral.role)
        return session.create(ephemeral)

    log.info('login denied for %s', tag_id)
    raise InvalidCredentials()


def change_passphrase(session, current: str, new: str, store) -> None:
    """Holder-initiated passphrase change; requires the current passphrase."""
    if session.record is None:
        raise InvalidCredentials('No active session.')
    if not new:
        raise ValueError('passphrase must not be empty')
    tag_id = session.record.tag_id
    if store.get_by_id_and_passphrase(tag_id, current) is None:
        raise InvalidCredentials()
    store.update(tag_id, {'passphrase': new}, expect_status='active')
    log.info('passphrase changed for %s', tag_id)


def logout(session) -> None:
    if session.record is not None:
        log.info('logout %s', session.record.tag_id)
    session.destroy()
