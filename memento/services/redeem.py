"""One open perk window per device, kept in the cache between polls."""
import json, math, time, logging
from typing import Optional
from flask import current_app
from .cache import r
from .perks import RedemptionScreen

log = logging.getLogger(__name__)

# A replaced proof stays checkable this long after the holder rotates it
PROOF_GRACE_SEC = 5


def _window_key(device_id: str) -> str:
    return f"perk:{device_id}"


def _proof_key(partner_id: int, proof: str) -> str:
    return f"proof:{partner_id}:{proof}"


def _load(device_id: str) -> Optional[RedemptionScreen]:
    raw = r().get(_window_key(device_id))
    return RedemptionScreen.from_dict(json.loads(raw)) if raw else None


def _save(device_id: str, screen: RedemptionScreen, now: float, previous_proof: Optional[str] = None):
    tok = screen.token
    left = max(1, math.ceil(tok.expires_at - now))
    r().setex(_window_key(device_id), left, json.dumps(screen.to_dict()))
    if previous_proof and previous_proof != tok.proof:
        r().expire(_proof_key(screen.partner_id, previous_proof), min(left, PROOF_GRACE_SEC))
    proof_ttl = max(1, min(left, math.ceil(screen.rotate_every) + PROOF_GRACE_SEC))
    r().setex(_proof_key(screen.partner_id, tok.proof), proof_ttl, device_id)


def open_window(device_id: str, partner_id: int, now: Optional[float] = None) -> RedemptionScreen:
    close_window(device_id)
    now = time.time() if now is None else now
    screen = RedemptionScreen(
        partner_id,
        window=current_app.config['PERK_WINDOW_SEC'],
        rotate_every=current_app.config['PROOF_ROTATE_SEC'],
    )
    screen.open(now)
    _save(device_id, screen, now)
    log.info('perk window opened for partner %s (expires %d)', partner_id, screen.token.expires_at)
    return screen


def current_window(device_id: str, now: Optional[float] = None) -> Optional[RedemptionScreen]:
    """Advance the device's window to ``now``; None once it has expired."""
    screen = _load(device_id)
    if screen is None or not screen.is_open:
        return None
    now = time.time() if now is None else now
    previous = screen.token.proof
    screen.tick(now)
    if not screen.is_open:
        r().delete(_window_key(device_id), _proof_key(screen.partner_id, previous))
        log.info('perk window for partner %s expired', screen.partner_id)
        return None
    _save(device_id, screen, now, previous)
    return screen


def close_window(device_id: str) -> bool:
    screen = _load(device_id)
    if screen is None:
        return False
    keys = [_window_key(device_id)]
    if screen.token is not None:
        keys.append(_proof_key(screen.partner_id, screen.token.proof))
    r().delete(*keys)
    return True


def verify_proof(partner_id: int, proof: str, now: Optional[float] = None) -> bool:
    """True while the proof is indexed and its window has not expired.

    Read-only: a partner check never advances the holder's window.
    """
    device_id = r().get(_proof_key(partner_id, proof))
    if not device_id:
        return False
    screen = _load(device_id)
    if screen is None or not screen.is_open or screen.partner_id != partner_id:
        return False
    now = time.time() if now is None else now
    return screen.token.is_valid(now)
