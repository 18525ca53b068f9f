from flask import Blueprint, request, jsonify, current_app, send_file
import io
from .errors import VaultError, InvalidCredentials, StoreUnavailable
from .policy import AccessPolicy
from .services.device import fingerprint_device
from .services.session import Session
from .services.records import RecordStore
from .services import activation, auth, catalog, redeem, vault as memories
from .services.qr import make_qr_bytes

bp = Blueprint('api', __name__)

# Errors that send the user to the denial screen (single action: back to entry)
DENIED = ('already_activated', 'not_found', 'store_unavailable')


def _device_session():
    device_id, cookie = fingerprint_device()
    return Session(device_id, current_app.config['SESSION_TTL_SEC']), cookie


def _policy():
    return AccessPolicy.from_config(current_app.config)


def _reply(payload, status=200, cookie=None):
    resp = jsonify(payload)
    resp.status_code = status
    if cookie:
        name, value, opts = cookie
        resp.set_cookie(name, value, **opts)
    return resp


def _require_session():
    session, cookie = _device_session()
    if session.load() is None:
        raise InvalidCredentials('Not signed in.')
    return session, cookie


def vault_error(e: VaultError):
    body = {'error': e.code, 'message': e.message}
    if e.code in DENIED:
        body['route'] = 'denied'
    if isinstance(e, InvalidCredentials):
        body['display_sec'] = current_app.config['AUTH_ERROR_DISPLAY_SEC']
    return jsonify(body), e.status


def cache_error(e):
    current_app.logger.warning('cache failure: %s', e)
    return vault_error(StoreUnavailable.from_exc(e))


def scan_response():
    """Resolve ``?tag=`` or, without one, the device's existing session."""
    session, cookie = _device_session()
    tag_id = (request.args.get('tag') or '').strip()
    if tag_id:
        res = activation.enter(tag_id, RecordStore(), _policy(), session)
    else:
        res = activation.resume(session)
        if res is None:
            return _reply({'state': None, 'route': 'login'}, cookie=cookie)
    body = res.to_dict()
    if res.error is not None:
        body['grace_sec'] = current_app.config['SCAN_ERROR_GRACE_SEC']
    return _reply(body, cookie=cookie)


@bp.get('/scan')
def scan():
    return scan_response()


@bp.get('/activation/<tag_id>')
def activation_check(tag_id: str):
    record = activation.check_activatable(tag_id, RecordStore())
    return jsonify({'ok': True, 'tag_id': record.tag_id, 'tier': record.tier})


@bp.post('/activate')
def activate():
    data = request.get_json(silent=True) or {}
    tag_id = (data.get('tag_id') or '').strip()
    passphrase = data.get('passphrase') or ''
    if not tag_id:
        return jsonify({'error': 'missing_tag'}), 400
    session, cookie = _device_session()
    try:
        record = activation.activate(tag_id, passphrase, RecordStore(), session,
                                     recovery_contact=data.get('recovery_contact'))
    except ValueError:
        return jsonify({'error': 'missing_passphrase'}), 400
    return _reply({'ok': True, 'route': 'vault', 'record': record.public_dict()}, cookie=cookie)


@bp.post('/login')
def login():
    data = request.get_json(silent=True) or {}
    tag_id = (data.get('tag_id') or '').strip()
    if not tag_id:
        return jsonify({'error': 'missing_tag'}), 400
    session, cookie = _device_session()
    auth.authenticate(tag_id, data.get('passphrase') or '', RecordStore(), _policy(), session)
    return _reply({'ok': True, 'route': 'vault', 'record': session.record.public_dict()}, cookie=cookie)


@bp.post('/logout')
def logout():
    session, cookie = _device_session()
    redeem.close_window(session.device_id)
    auth.logout(session)
    return _reply({'ok': True, 'route': 'login'}, cookie=cookie)


@bp.get('/vault')
def vault():
    session, cookie = _require_session()
    rec = session.record
    return _reply({'record': rec.public_dict(), 'admin': rec.role == 'admin'}, cookie=cookie)


@bp.get('/vault/memories')
def memory_list():
    session, cookie = _require_session()
    return _reply({'memories': memories.list_memories(session.record.tag_id)}, cookie=cookie)


@bp.post('/vault/memories')
def memory_add():
    session, cookie = _require_session()
    data = request.get_json(silent=True) or {}
    try:
        memory = memories.add_memory(
            session.record.tag_id,
            (data.get('content') or '').strip(),
            location=data.get('location'),
            type=data.get('type') or 'note',
            images=data.get('images'),
        )
    except ValueError as e:
        return jsonify({'error': 'bad_request', 'message': str(e)}), 400
    return _reply({'ok': True, 'memory': memory}, 201, cookie=cookie)


@bp.post('/passphrase')
def passphrase():
    session, cookie = _require_session()
    data = request.get_json(silent=True) or {}
    try:
        auth.change_passphrase(session, data.get('current') or '', data.get('new') or '', RecordStore())
    except ValueError:
        return jsonify({'error': 'missing_passphrase'}), 400
    return _reply({'ok': True}, cookie=cookie)


@bp.get('/partners')
def partners():
    return jsonify({'partners': catalog.list_partners()})


@bp.get('/store')
def store():
    session, cookie = _require_session()
    tier = session.record.tier
    return _reply({'tier': tier, 'products': catalog.list_products(tier)}, cookie=cookie)


@bp.post('/store/<int:product_id>/claim')
def store_claim(product_id: int):
    session, cookie = _require_session()
    claim = catalog.claim_product(session.record.tag_id, product_id, session.record.tier)
    return _reply({'ok': True, 'claim': claim}, 201, cookie=cookie)


def _window_body(screen):
    tok = screen.token
    return {
        'partner_id': tok.partner_id,
        'proof': tok.proof,
        'issued_at': int(tok.issued_at),
        'expires_at': int(tok.expires_at),
        'remaining': tok.remaining(screen.clock()),
        'rotate_every': screen.rotate_every,
        'tick_every': current_app.config['COUNTDOWN_TICK_SEC'],
        'verify_url': tok.verify_url(current_app.config['VERIFY_HOST']),
    }


@bp.post('/perks/<int:partner_id>/open')
def perk_open(partner_id: int):
    session, cookie = _require_session()
    partner = catalog.get_partner(partner_id)
    screen = redeem.open_window(session.device_id, partner_id)
    body = _window_body(screen)
    body['partner'] = partner
    return _reply(body, cookie=cookie)


@bp.get('/perks/current')
def perk_current():
    session, cookie = _require_session()
    screen = redeem.current_window(session.device_id)
    if screen is None:
        return _reply({'error': 'expired', 'route': 'vault'}, 410, cookie=cookie)
    return _reply(_window_body(screen), cookie=cookie)


@bp.get('/perks/current/qr.png')
def perk_qr():
    session, _ = _require_session()
    screen = redeem.current_window(session.device_id)
    if screen is None:
        return jsonify({'error': 'expired'}), 410
    png = make_qr_bytes(screen.token.verify_url(current_app.config['VERIFY_HOST']))
    return send_file(io.BytesIO(png), mimetype='image/png', etag=False, max_age=0)


@bp.delete('/perks/current')
def perk_close():
    session, cookie = _require_session()
    return _reply({'ok': True, 'closed': redeem.close_window(session.device_id)}, cookie=cookie)
