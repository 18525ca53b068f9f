from flask import Blueprint, jsonify, request, current_app, send_file
import secrets
import io
import base64
from .services.records import RecordStore, TokenRecord, ROLES, TIERS
from .services.tokens import scan_url
from .services.qr import make_qr_bytes

bp = Blueprint('admin', __name__)


def _authorized() -> bool:
    api_key = request.headers.get('X-Admin-Key') or request.args.get('key')
    return bool(api_key) and api_key == (current_app.config.get('ADMIN_API_KEY') or '')


@bp.get('/ping')
def ping():
    return jsonify({'admin': 'ok'})


@bp.post('/issue-tag')
def issue_tag():
    if not _authorized():
        return jsonify({'error': 'unauthorized'}), 401

    data = request.get_json(silent=True) or {}
    tag_id = (data.get('tag_id') or f"RM-{secrets.token_hex(4).upper()}").strip()
    tier = data.get('tier') or 'standard'
    role = data.get('role') or 'user'
    if tier not in TIERS or role not in ROLES:
        return jsonify({'error': 'bad_request'}), 400

    store = RecordStore()
    if store.get(tag_id) is not None:
        return jsonify({'error': 'exists', 'tag_id': tag_id}), 409
    store.insert(TokenRecord(tag_id=tag_id, status='pending', role=role, tier=tier))
    current_app.logger.info('issued tag %s (tier=%s)', tag_id, tier)

    url = scan_url(current_app.config.get('BASE_URL'), tag_id)
    png = make_qr_bytes(url)

    accept = request.headers.get('Accept', '')
    if 'image/png' in accept:
        return send_file(
            io.BytesIO(png), mimetype='image/png', as_attachment=False, download_name=f"tag_{tag_id}.png",
            etag=False,
        )
    return jsonify({
        'ok': True,
        'tag_id': tag_id,
        'tier': tier,
        'scan_url': url,
        'qr_png_b64': base64.b64encode(png).decode('ascii'),
    })
