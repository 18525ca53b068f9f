import os


def _flag(name, default='1'):
    return os.environ.get(name, default).lower() not in ('0', 'false', 'no')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev')
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///local.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REDIS_URL = os.environ.get('REDIS_URL', 'redis://localhost:6379/0')
    USE_REDIS = _flag('USE_REDIS')
    BASE_URL = os.environ.get('BASE_URL', 'http://localhost:5000')
    VERIFY_HOST = os.environ.get('VERIFY_HOST', 'localhost:5000')
    ADMIN_API_KEY = os.environ.get('ADMIN_API_KEY')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Reserved literals agreed at deployment time
    ADMIN_TAG_ID = os.environ.get('ADMIN_TAG_ID', 'RM-ADMIN-2026')
    NEW_TAG_SENTINEL = os.environ.get('NEW_TAG_SENTINEL', 'NEW')
    FALLBACK_PASSCODE = os.environ.get('FALLBACK_PASSCODE')
    ADMIN_MARKER = os.environ.get('ADMIN_MARKER', 'ADMIN')

    PERK_WINDOW_SEC = int(os.environ.get('PERK_WINDOW_SEC', '300'))
    PROOF_ROTATE_SEC = int(os.environ.get('PROOF_ROTATE_SEC', '30'))
    COUNTDOWN_TICK_SEC = int(os.environ.get('COUNTDOWN_TICK_SEC', '1'))
    SCAN_ERROR_GRACE_SEC = int(os.environ.get('SCAN_ERROR_GRACE_SEC', '3'))
    AUTH_ERROR_DISPLAY_SEC = int(os.environ.get('AUTH_ERROR_DISPLAY_SEC', '2'))
    SESSION_TTL_SEC = int(os.environ.get('SESSION_TTL_SEC', str(30 * 86400)))
    DEVICE_COOKIE_SECURE = _flag('DEVICE_COOKIE_SECURE')

    def __init__(self):
        # Optional fallbacks to support Secret Files on Render (/etc/secrets)
        if not self.FALLBACK_PASSCODE:
            self.FALLBACK_PASSCODE = _read_secret('fallback_passcode') or 'ROME2026'
        if not self.ADMIN_API_KEY:
            self.ADMIN_API_KEY = _read_secret('admin_api_key')
        if (not self.SECRET_KEY) or self.SECRET_KEY == 'dev':
            self.SECRET_KEY = _read_secret('secret_key') or self.SECRET_KEY


def _read_secret(name):
    for p in (f'/etc/secrets/{name}', name):
        try:
            with open(p, 'r') as f:
                return f.read().strip()
        except OSError:
            continue
    return None
