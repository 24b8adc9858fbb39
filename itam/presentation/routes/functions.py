"""
Function endpoints called server to server

POST /functions/send-asset-email
Authenticated with 'Authorization: Bearer <EMAIL_FUNCTION_SECRET>'. Every
call is refused while no secret is configured.
"""

import hmac
from flask import Blueprint, current_app, jsonify, request
from itam import limiter
from itam.buisness.notifications.email_dispatch import dispatch
from itam.logger import get_logger

logger = get_logger("itam.routes.functions")
bp = Blueprint('functions', __name__)


def _authorized() -> bool:
    secret = current_app.config.get('EMAIL_FUNCTION_SECRET')
    if not secret:
        logger.error("send-asset-email refused: EMAIL_FUNCTION_SECRET is not configured")
        return False
    header = request.headers.get('Authorization', '')
    if not header.startswith('Bearer '):
        return False
    return hmac.compare_digest(header[len('Bearer '):], secret)


@bp.route('/send-asset-email', methods=['POST'])
@limiter.limit("120 per minute")
def send_asset_email():
    if not _authorized():
        logger.warning("send-asset-email called with a missing or invalid bearer secret")
        return jsonify({'success': False, 'error': 'Unauthorized'}), 401

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({'success': False, 'error': 'Invalid JSON body'}), 400

    try:
        body, status = dispatch(payload)
    except Exception as e:
        logger.error(f"send-asset-email error: {e}")
        return jsonify({'success': False, 'error': 'Internal error sending email'}), 500
    return jsonify(body), status
