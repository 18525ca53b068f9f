from flask import Blueprint, request, jsonify
from .routes_api import scan_response
from .services.rate_limit import check_rate_ip, RateExceeded
from .services.redeem import verify_proof

bp = Blueprint('public', __name__)


@bp.get('/')
def home():
    # NFC tags point here with ?tag=<id>
    return scan_response()


@bp.get('/verify/<int:partner_id>')
def verify(partner_id: int):
    ip = request.remote_addr or '0.0.0.0'
    try:
        check_rate_ip(ip)
    except RateExceeded:
        return jsonify({'error': 'rate_exceeded'}), 429
    proof = request.args.get('salt', '')
    if not proof or not verify_proof(partner_id, proof):
        return jsonify({'valid': False, 'partner_id': partner_id}), 403
    return jsonify({'valid': True, 'partner_id': partner_id})
