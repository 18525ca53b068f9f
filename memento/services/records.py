"""Token record store backed by the ``activations`` table."""
import logging
from dataclasses import dataclass, asdict, fields as dc_fields
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ..errors import StoreUnavailable
from ..models import db, Activation

log = logging.getLogger(__name__)

ROLES = ('user', 'admin')
TIERS = ('standard', 'gold', 'premium')


@dataclass
class TokenRecord:
    tag_id: str
    status: str = 'pending'
    passphrase: Optional[str] = None
    recovery_contact: Optional[str] = None
    role: str = 'user'
    tier: str = 'standard'

    @property
    def is_active(self) -> bool:
        return self.status == 'active'

    def to_dict(self) -> dict:
        return asdict(self)

    def public_dict(self) -> dict:
        """Everything but the passphrase; this is what sessions hold."""
        data = asdict(self)
        data.pop('passphrase')
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'TokenRecord':
        known = {f.name for f in dc_fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_row(cls, row: Activation) -> 'TokenRecord':
        return cls(
            tag_id=row.tag_id,
            status=row.status,
            passphrase=row.passphrase,
            recovery_contact=row.recovery_contact,
            role=row.role or 'user',
            tier=row.tier or 'standard',
        )


class RecordStore:
    """get / get_by_id_and_passphrase / update / insert, keyed by tag id.

    Every database failure is rolled back and re-raised as StoreUnavailable.
    """

    def __init__(self, session=None):
        self.session = session or db.session

    def _fail(self, op: str, exc: Exception):
        self.session.rollback()
        log.warning('record store %s failed: %s', op, exc)
        raise StoreUnavailable.from_exc(exc) from exc

    def get(self, tag_id: str) -> Optional[TokenRecord]:
        try:
            row = self.session.get(Activation, tag_id)
        except SQLAlchemyError as e:
            self._fail('get', e)
        return TokenRecord.from_row(row) if row else None

    def get_by_id_and_passphrase(self, tag_id: str, passphrase: str) -> Optional[TokenRecord]:
        try:
            row = (
                self.session.query(Activation)
                .filter_by(tag_id=tag_id, passphrase=passphrase)
                .first()
            )
        except SQLAlchemyError as e:
            self._fail('lookup', e)
        # Collations may compare case-insensitively; the match must be exact.
        if row is None or row.passphrase != passphrase:
            return None
        return TokenRecord.from_row(row)

    def update(self, tag_id: str, fields: dict, expect_status: Optional[str] = None) -> bool:
        q = self.session.query(Activation).filter(Activation.tag_id == tag_id)
        if expect_status is not None:
            q = q.filter(Activation.status == expect_status)
        try:
            changed = q.update(fields, synchronize_session=False)
            self.session.commit()
        except SQLAlchemyError as e:
            self._fail('update', e)
        return changed > 0

    def insert(self, record: TokenRecord) -> None:
        row = Activation(
            tag_id=record.tag_id,
            status=record.status,
            passphrase=record.passphrase,
            recovery_contact=record.recovery_contact,
            role=record.role,
            tier=record.tier,
        )
        try:
            self.session.add(row)
            self.session.commit()
        except SQLAlchemyError as e:
            self._fail('insert', e)
