"""
Email template and settings tab
"""
import pytest
from itam.buisness.notifications import email_setup
from itam.buisness.notifications.email_templates import DEFAULT_SENDER_NAME


def test_templates_listed_from_catalogue(seed):
    templates = email_setup.list_templates(seed['tenant'].id)
    assert len(templates) == 7
    assert not any(template['customized'] for template in templates)


def test_save_template_overrides_for_tenant_only(seed):
    tenant_id = seed['tenant'].id
    saved = email_setup.save_template(tenant_id, 'checkout', ' Out: {{asset_tag}} ', 'Body text')
    assert saved['subject'] == 'Out: {{asset_tag}}'
    assert saved['name'] == 'Asset Checkout'

    template = email_setup.get_template(tenant_id, 'checkout')
    assert template['customized'] is True
    assert template['body'] == 'Body text'
    assert email_setup.get_template(seed['other_tenant'].id, 'checkout')['customized'] is False


def test_save_template_validation(seed):
    with pytest.raises(ValueError, match='Subject and body are required'):
        email_setup.save_template(seed['tenant'].id, 'checkin', 'Subject', '  ')
    with pytest.raises(ValueError, match='Unknown template: welcome'):
        email_setup.save_template(seed['tenant'].id, 'welcome', 'Subject', 'Body')


def test_toggle_template(seed):
    tenant_id = seed['tenant'].id
    assert email_setup.toggle_template(tenant_id, 'maintenance_due') is False
    assert email_setup.get_template(tenant_id, 'maintenance_due')['enabled'] is False
    assert email_setup.toggle_template(tenant_id, 'maintenance_due') is True


def test_global_settings(seed):
    tenant_id = seed['tenant'].id
    assert email_setup.settings(tenant_id) == {'senderName': DEFAULT_SENDER_NAME, 'sendCopyToAdmins': False}

    email_setup.save_global_settings(tenant_id, '  ', True)
    assert email_setup.settings(tenant_id) == {'senderName': DEFAULT_SENDER_NAME, 'sendCopyToAdmins': True}
    email_setup.save_global_settings(tenant_id, 'Acme IT', False)
    assert email_setup.settings(tenant_id)['senderName'] == 'Acme IT'
