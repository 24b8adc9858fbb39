"""Small helpers shared by the asset blueprints"""

from flask import current_app, jsonify
from flask_login import current_user
from itam.buisness.assets.asset_context import AssetContext
from itam.services.storage.bucket_storage import get_storage


def tenant_id() -> int:
    return current_user.tenant_id


def load_context(identifier) -> AssetContext:
    """AssetContext of the current tenant's asset, 404 when missing"""
    return AssetContext.load(identifier, current_user.tenant_id)


def email_client():
    return current_app.extensions.get('itam_email_client')


def storage():
    return get_storage(current_app._get_current_object())


def json_error(message: str, status: int = 400):
    return jsonify({'success': False, 'error': message}), status
