"""
Email templates settings tab

Templates are listed from the built-in catalogue, each replaced by the
tenant's saved copy when one exists. Saved copies live in itam_email_config
with config_type 'template' and the template id as key.
"""

from typing import Any, Dict, List
from itam.buisness.notifications import email_templates
from itam.buisness.notifications.email_dispatch import (
    SETTINGS_KEY, config_value, global_settings, save_config_value,
)
from itam.logger import get_logger

logger = get_logger("itam.buisness.notifications.email_setup")

TEMPLATE_CONFIG_TYPE = 'template'


def list_templates(tenant_id: int) -> List[Dict[str, Any]]:
    templates = []
    for default in email_templates.DEFAULT_TEMPLATES:
        saved = config_value(tenant_id, TEMPLATE_CONFIG_TYPE, default['id'])
        template = dict(default)
        if saved:
            template.update(saved)
            template['customized'] = True
        else:
            template['customized'] = False
        templates.append(template)
    return templates


def get_template(tenant_id: int, template_id: str) -> Dict[str, Any]:
    for template in list_templates(tenant_id):
        if template['id'] == template_id:
            return template
    raise ValueError(f'Unknown template: {template_id}')


def save_template(tenant_id: int, template_id: str, subject: str, body: str, enabled: bool = True) -> Dict[str, Any]:
    """
    Save a tenant copy of a template.

    Raises:
        ValueError: Unknown template id, or missing subject/body
    """
    current = get_template(tenant_id, template_id)
    subject = (subject or '').strip()
    body = (body or '').strip()
    if not subject or not body:
        raise ValueError('Subject and body are required')

    value = {
        'id': template_id,
        'name': current['name'],
        'subject': subject,
        'body': body,
        'enabled': bool(enabled),
        'variables': current.get('variables', []),
    }
    save_config_value(tenant_id, TEMPLATE_CONFIG_TYPE, template_id, value)
    logger.info(f"Email template '{template_id}' saved for tenant {tenant_id}")
    return value


def toggle_template(tenant_id: int, template_id: str) -> bool:
    """Flip the enabled flag; returns the new value"""
    current = get_template(tenant_id, template_id)
    save_template(tenant_id, template_id, current['subject'], current['body'], not current.get('enabled', True))
    return not current.get('enabled', True)


def save_global_settings(tenant_id: int, sender_name: str, send_copy_to_admins: bool) -> Dict[str, Any]:
    value = {
        'senderName': (sender_name or '').strip() or email_templates.DEFAULT_SENDER_NAME,
        'sendCopyToAdmins': bool(send_copy_to_admins),
    }
    save_config_value(tenant_id, 'settings', SETTINGS_KEY, value)
    logger.info(f"Email settings saved for tenant {tenant_id}")
    return value


def settings(tenant_id: int) -> Dict[str, Any]:
    return global_settings(tenant_id)
