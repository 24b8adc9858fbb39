"""
send-asset-email function core

Resolves the template and global settings for a tenant, builds the asset
table, renders the message, sends it through a mail transport and records
every attempt in itam_email_logs. The HTTP endpoint in
presentation.routes.functions is a thin wrapper around `dispatch`.
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from flask import current_app
from itam import db
from itam.data.core.user_info.user import User
from itam.data.assets.asset import Asset
from itam.data.notifications.email_config import EmailConfig
from itam.data.notifications.email_log import EmailLog
from itam.buisness.notifications import email_templates
from itam.services.notifications.mail_transport import (
    GraphMailTransport, LogMailTransport, MailTransportError,
)
from itam.logger import get_logger

logger = get_logger("itam.buisness.notifications.email_dispatch")

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

SETTINGS_KEY = 'global_settings'
AZURE_CONFIG_TYPE = 'azure_credentials'
AZURE_CONFIG_KEY = 'azure_config'


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value) and bool(EMAIL_PATTERN.match(value))


def config_value(tenant_id: Optional[int], config_type: str, config_key: str) -> Optional[dict]:
    if tenant_id is None:
        return None
    row = EmailConfig.query.filter_by(
        tenant_id=tenant_id, config_type=config_type, config_key=config_key
    ).first()
    return row.config_value if row is not None else None


def save_config_value(tenant_id: int, config_type: str, config_key: str, value: dict) -> EmailConfig:
    row = EmailConfig.query.filter_by(
        tenant_id=tenant_id, config_type=config_type, config_key=config_key
    ).first()
    if row is None:
        row = EmailConfig(tenant_id=tenant_id, config_type=config_type, config_key=config_key)
        db.session.add(row)
    row.config_value = value
    db.session.commit()
    return row


def resolve_template(tenant_id: Optional[int], template_id: str) -> Optional[dict]:
    """Tenant override if saved, else the built-in fallback (checkout/checkin only)"""
    saved = config_value(tenant_id, 'template', template_id)
    if saved:
        return saved
    fallback = email_templates.FUNCTION_FALLBACK_TEMPLATES.get(template_id)
    return dict(fallback) if fallback else None


def global_settings(tenant_id: Optional[int]) -> dict:
    return config_value(tenant_id, 'settings', SETTINGS_KEY) or dict(email_templates.DEFAULT_GLOBAL_SETTINGS)


def resolve_transport(tenant_id: Optional[int]):
    """
    Mail transport for a tenant.

    Graph credentials saved for the tenant win over the application config.
    """
    config = current_app.config
    if config.get('EMAIL_TRANSPORT', 'log') != 'graph':
        return LogMailTransport()

    timeout = config.get('EMAIL_FUNCTION_TIMEOUT', 20)
    saved = config_value(tenant_id, AZURE_CONFIG_TYPE, AZURE_CONFIG_KEY) or {}
    if all(saved.get(key) for key in ('tenant_id', 'client_id', 'client_secret', 'sender_email')):
        logger.info("Using Azure credentials from database")
        return GraphMailTransport(
            saved['tenant_id'], saved['client_id'], saved['client_secret'], saved['sender_email'],
            source='database', timeout=timeout,
        )
    logger.info("Using Azure credentials from environment")
    return GraphMailTransport(
        config.get('AZURE_TENANT_ID'), config.get('AZURE_CLIENT_ID'),
        config.get('AZURE_CLIENT_SECRET'), config.get('AZURE_SENDER_EMAIL'),
        source='env', timeout=timeout,
    )


def log_send(tenant_id, template_id, recipient, subject, status, error_message=None, asset_id=None) -> None:
    """Record a send attempt; a failure to record is only logged"""
    try:
        db.session.add(EmailLog(
            tenant_id=tenant_id,
            template_id=template_id,
            recipient_email=recipient,
            subject=subject,
            status=status,
            error_message=error_message,
            asset_id=asset_id,
        ))
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.warning(f"Failed to log email send: {e}")


def asset_rows(tenant_id: Optional[int], asset_ids: List[int]) -> List[Dict[str, Any]]:
    """Asset table rows (tag, description, brand, model, serial, photo) for the given ids"""
    if not asset_ids:
        return []
    query = Asset.query.filter(Asset.id.in_(asset_ids))
    if tenant_id is not None:
        query = query.filter(Asset.tenant_id == tenant_id)
    rows = []
    for asset in query.all():
        rows.append({
            'asset_tag': asset.asset_tag or 'N/A',
            'description': (asset.category.name if asset.category else None) or asset.name or 'N/A',
            'brand': asset.make.name if asset.make else 'N/A',
            'model': asset.model or 'N/A',
            'serial_number': asset.serial_number,
            'photo_url': asset.custom.get('photo_url'),
        })
    return rows


def admin_recipients(tenant_id: Optional[int], exclude: str) -> List[str]:
    query = User.query.filter_by(role='admin', status='active')
    if tenant_id is not None:
        query = query.filter_by(tenant_id=tenant_id)
    return [
        user.email for user in query.all()
        if user.email and user.email != exclude and is_valid_email(user.email)
    ]


def _send_test(payload: dict, tenant_id: Optional[int], transport) -> Tuple[dict, int]:
    recipient = payload.get('recipientEmail')
    try:
        transport.verify()
        if not recipient:
            return {'success': True, 'message': 'Email credentials are valid',
                    'senderEmail': transport.sender_email}, 200
        body = (
            'This is a test email from RT-IT-Hub.\n\n'
            'If you received this, your email integration is working correctly.\n\n'
            f'Credential source: {transport.source}\n'
            f'Sent at: {datetime.utcnow().strftime("%d %B %Y %H:%M")} UTC\n\n'
            'Best regards,\nIT Team'
        )
        html = email_templates.wrap_in_html_layout(body, 'IT Asset Management - Test')
        transport.send([recipient], email_templates.TEST_SUBJECT, html)
        log_send(tenant_id, 'test', recipient, email_templates.TEST_SUBJECT, 'sent')
        return {'success': True, 'message': 'Test email sent successfully'}, 200
    except MailTransportError as e:
        logger.error(f"Test mode error: {e}")
        if recipient:
            log_send(tenant_id, 'test', recipient, email_templates.TEST_SUBJECT, 'failed', str(e))
        return {'success': False, 'error': str(e)}, 200


def dispatch(payload: Dict[str, Any], transport=None) -> Tuple[dict, int]:
    """
    Handle one send-asset-email request body.

    Returns:
        (response body, HTTP status)
    """
    template_id = payload.get('templateId')
    recipient = payload.get('recipientEmail')
    tenant_id = payload.get('tenantId')
    asset_id = payload.get('assetId')
    variables = payload.get('variables') or {}
    assets_input = payload.get('assets')

    try:
        if transport is None:
            transport = resolve_transport(tenant_id)
    except MailTransportError as e:
        logger.error(f"send-asset-email transport unavailable: {e}")
        return {'success': False, 'error': str(e)}, 500

    if payload.get('testMode'):
        return _send_test(payload, tenant_id, transport)

    if not template_id or not recipient:
        return {'success': False, 'error': 'templateId and recipientEmail are required'}, 400

    logger.info(f"send-asset-email template={template_id} asset={asset_id or 'N/A'} "
                f"bulk_assets={len(assets_input or [])}")

    template = resolve_template(tenant_id, template_id)
    if not template:
        return {'success': True, 'skipped': True, 'reason': 'No template found'}, 200
    if template.get('enabled') is False:
        return {'success': True, 'skipped': True, 'reason': 'Template is disabled'}, 200

    settings = global_settings(tenant_id)
    sender_name = settings.get('senderName') or email_templates.DEFAULT_SENDER_NAME

    rows: List[Dict[str, Any]] = []
    asset_vars: Dict[str, Any] = {}
    if isinstance(assets_input, list) and assets_input:
        rows = assets_input
        asset_vars = {
            'asset_name': rows[0].get('description') or 'Multiple Assets',
            'asset_tag': f'{len(rows)} assets' if len(rows) > 1 else (rows[0].get('asset_tag') or 'N/A'),
            'category': rows[0].get('description') or 'N/A',
        }
    elif asset_id:
        rows = asset_rows(tenant_id, [asset_id])
        if rows:
            asset_vars = {
                'asset_name': rows[0]['description'] or 'Unknown',
                'asset_tag': rows[0]['asset_tag'] or 'N/A',
                'category': rows[0]['description'] or 'N/A',
            }

    all_vars = {**asset_vars, **variables}
    if not all_vars.get('notes'):
        all_vars['notes'] = '—'

    subject = email_templates.replace_placeholders(template.get('subject', ''), all_vars)
    body = email_templates.replace_placeholders(template.get('body', ''), all_vars)
    table = email_templates.build_asset_table_html(rows) if rows else None
    html = email_templates.wrap_in_html_layout(body, sender_name, table)

    recipients = [recipient]
    if settings.get('sendCopyToAdmins'):
        recipients.extend(admin_recipients(tenant_id, exclude=recipient))

    try:
        transport.send(recipients, subject, html, sender_name)
    except MailTransportError as e:
        for address in recipients:
            log_send(tenant_id, template_id, address, subject, 'failed', str(e), asset_id)
        logger.error(f"send-asset-email failed: {e}")
        return {'success': False, 'error': str(e)}, 500

    for address in recipients:
        log_send(tenant_id, template_id, address, subject, 'sent', None, asset_id)
    logger.info(f"send-asset-email sent to {len(recipients)} recipient(s)")
    return {'success': True, 'message': 'Email sent', 'recipients': len(recipients)}, 200
