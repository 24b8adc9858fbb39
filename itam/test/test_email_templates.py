"""
Placeholder substitution and HTML layout for notification emails
"""
from itam.buisness.notifications.email_templates import (
    DEFAULT_TEMPLATES, FUNCTION_FALLBACK_TEMPLATES, build_asset_table_html, default_template,
    preview_placeholders, replace_placeholders, split_for_table, wrap_in_html_layout,
)


def test_replace_placeholders():
    text = 'Hi {{user_name}}, {{asset_tag}} due {{expected_return_date}} ({{unknown}})'
    result = replace_placeholders(text, {'user_name': 'John', 'asset_tag': 'LAP001', 'expected_return_date': ''})
    assert result == 'Hi John, LAP001 due N/A ({{unknown}})'
    assert replace_placeholders(None, {'a': 1}) == ''


def test_preview_placeholders():
    assert preview_placeholders('Asset Checked Out: {{asset_name}}') == 'Asset Checked Out: [asset_name]'


def test_catalogue():
    ids = [template['id'] for template in DEFAULT_TEMPLATES]
    assert ids == ['checkout', 'checkin', 'warranty_expiring', 'maintenance_due',
                   'overdue_return', 'license_expiring', 'reservation_reminder']
    assert default_template('nope') is None
    assert default_template('checkin')['name'] == 'Asset Check-in'
    assert set(FUNCTION_FALLBACK_TEMPLATES) == {'checkout', 'checkin'}


def test_split_for_table_prefers_notes_line():
    before, after = split_for_table('Hello\n\nItems:\nNotes: none\nThank you.')
    assert before == 'Hello\n\nItems:'
    assert after == '\nNotes: none\nThank you.'


def test_split_for_table_falls_back_to_sign_off_then_end():
    before, after = split_for_table('Hello\n\nBest regards,\nIT')
    assert before == 'Hello'
    assert after == '\n\nBest regards,\nIT'
    assert split_for_table('Just text') == ('Just text', '')


def test_asset_table_escapes_and_marks_missing_values():
    html = build_asset_table_html([
        {'asset_tag': 'LAP001', 'description': '<b>Laptop</b>', 'brand': 'Dell',
         'model': None, 'serial_number': 'SN-1'},
    ])
    assert '&lt;b&gt;Laptop&lt;/b&gt;' in html
    assert 'S/N: SN-1' in html
    assert 'No photo' in html
    assert 'N/A' in html


def test_wrap_in_html_layout_injects_table():
    body = 'Hello John,\n\nNotes: spare charger\n\nThank you.'
    html = wrap_in_html_layout(body, 'IT & Co', '<table id="assets"></table>')
    assert 'IT &amp; Co' in html
    assert html.index('<table id="assets">') < html.index('Notes: spare charger')
    assert 'Hello John,<table' in html
    assert '</table><br /><br />Notes: spare charger' in html
