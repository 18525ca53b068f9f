import json, logging
from typing import Optional

import redis

from ..errors import StoreUnavailable
from .cache import r
from .records import TokenRecord

log = logging.getLogger(__name__)


class Session:
    """The device's slot holding a copy of the authenticated record.

    Flows receive the session explicitly; ``create`` fills the slot and
    ``destroy`` empties it.
    """

    def __init__(self, device_id: str, ttl: int, store=None):
        self.device_id = device_id
        self.ttl = ttl
        self._store = store
        self.record: Optional[TokenRecord] = None

    @property
    def key(self) -> str:
        return f"sess:{self.device_id}"

    @property
    def store(self):
        if self._store is None:
            self._store = r()
        return self._store

    def create(self, record: TokenRecord) -> 'Session':
        public = TokenRecord.from_dict(record.public_dict())
        try:
            self.store.setex(self.key, self.ttl, json.dumps(public.to_dict()))
        except redis.RedisError as e:
            raise StoreUnavailable.from_exc(e) from e
        self.record = public
        log.info('session created for %s (role=%s tier=%s)', public.tag_id, public.role, public.tier)
        return self

    def load(self) -> Optional[TokenRecord]:
        try:
            raw = self.store.get(self.key)
        except redis.RedisError as e:
            raise StoreUnavailable.from_exc(e) from e
        self.record = TokenRecord.from_dict(json.loads(raw)) if raw else None
        return self.record

    def destroy(self) -> None:
        try:
            self.store.delete(self.key)
        except redis.RedisError as e:
            raise StoreUnavailable.from_exc(e) from e
        self.record = None

    @property
    def active(self) -> bool:
        return self.record is not None
