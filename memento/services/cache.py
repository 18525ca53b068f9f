import time, threading, logging
import redis
from flask import current_app

log = logging.getLogger(__name__)

_r = None
_lock = threading.Lock()


class _MemStore:
    def __init__(self):
        self._data = {}
        self._exp = {}
        self._lock = threading.Lock()

    def _cleanup(self):
        now = time.time()
        expired = [k for k, ts in self._exp.items() if ts <= now]
        for k in expired:
            self._data.pop(k, None)
            self._exp.pop(k, None)

    def incr(self, key):
        with self._lock:
            self._cleanup()
            v = int(self._data.get(key, '0')) + 1
            self._data[key] = str(v)
            return v

    def expire(self, key, ttl):
        with self._lock:
            self._cleanup()
            if key in self._data:
                self._exp[key] = time.time() + ttl

    def setex(self, key, ttl, value):
        with self._lock:
            self._cleanup()
            self._data[key] = value
            self._exp[key] = time.time() + ttl

    def exists(self, key):
        with self._lock:
            self._cleanup()
            return 1 if key in self._data else 0

    def get(self, key):
        with self._lock:
            self._cleanup()
            return self._data.get(key)

    def delete(self, *keys):
        with self._lock:
            n = 0
            for key in keys:
                if self._data.pop(key, None) is not None:
                    n += 1
                self._exp.pop(key, None)
            return n


def r():
    global _r
    if _r is not None:
        return _r
    with _lock:
        if _r is not None:
            return _r
        url = current_app.config.get('REDIS_URL')
        if current_app.config.get('USE_REDIS', True) and url:
            try:
                client = redis.from_url(url, decode_responses=True)
                # Test connection once; fallback to memory on failure
                client.ping()
                _set(client)
                return _r
            except redis.RedisError as e:
                log.warning('redis unavailable at %s (%s), using in-memory cache', url, e)
        _set(_MemStore())
        return _r


def _set(store):
    global _r
    _r = store
