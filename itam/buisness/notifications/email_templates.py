"""
Email templates for asset notifications

Holds the template catalogue shown on the email setup tab, the built-in
fallbacks the send-asset-email function uses when a tenant has not saved a
template, and the rendering helpers (placeholder replacement, asset table,
HTML layout).
"""

import re
from typing import Dict, List, Optional
from markupsafe import escape

DEFAULT_SENDER_NAME = 'IT Asset Management'
FOOTER_TEXT = 'This is an automated message from RT-IT-Hub. Please do not reply directly.'
TEST_SUBJECT = 'RT-IT-Hub - Test Email'

_PLACEHOLDER = re.compile(r'{{(\w+)}}')

_SIGN_OFF = 'Best regards,\nIT Asset Management Team'

# Catalogue shown and edited on the email setup tab
DEFAULT_TEMPLATES = [
    {
        'id': 'checkout',
        'name': 'Asset Checkout',
        'description': 'Sent when an asset is checked out to an employee',
        'subject': 'Asset Checked Out: {{asset_name}}',
        'body': (
            'Hello {{user_name}},\n\n'
            'The following asset has been checked out to you:\n\n'
            'Asset Name: {{asset_name}}\n'
            'Asset Tag: {{asset_tag}}\n'
            'Category: {{category}}\n'
            'Checkout Date: {{checkout_date}}\n'
            'Expected Return: {{expected_return_date}}\n\n'
            'Please take good care of this asset and return it by the expected date.\n\n'
            'If you have any questions, please contact your IT department.\n\n'
            + _SIGN_OFF
        ),
        'enabled': True,
        'variables': ['user_name', 'asset_name', 'asset_tag', 'category', 'checkout_date', 'expected_return_date'],
    },
    {
        'id': 'checkin',
        'name': 'Asset Check-in',
        'description': 'Sent when an asset is returned/checked in',
        'subject': 'Asset Returned: {{asset_name}}',
        'body': (
            'Hello {{user_name}},\n\n'
            'Thank you for returning the following asset:\n\n'
            'Asset Name: {{asset_name}}\n'
            'Asset Tag: {{asset_tag}}\n'
            'Return Date: {{checkin_date}}\n\n'
            'The asset has been successfully checked in to our inventory.\n\n'
            + _SIGN_OFF
        ),
        'enabled': True,
        'variables': ['user_name', 'asset_name', 'asset_tag', 'checkin_date'],
    },
    {
        'id': 'warranty_expiring',
        'name': 'Warranty Expiring',
        'description': 'Sent when an asset warranty is about to expire',
        'subject': 'Warranty Expiring Soon: {{asset_name}}',
        'body': (
            'Hello,\n\n'
            'This is a reminder that the warranty for the following asset is expiring soon:\n\n'
            'Asset Name: {{asset_name}}\n'
            'Asset Tag: {{asset_tag}}\n'
            'Warranty Expiry: {{warranty_expiry_date}}\n'
            'Days Remaining: {{days_remaining}}\n\n'
            'Please review the warranty terms and consider renewal options if needed.\n\n'
            + _SIGN_OFF
        ),
        'enabled': True,
        'variables': ['asset_name', 'asset_tag', 'warranty_expiry_date', 'days_remaining'],
    },
    {
        'id': 'maintenance_due',
        'name': 'Maintenance Due',
        'description': 'Sent when scheduled maintenance is due',
        'subject': 'Maintenance Due: {{asset_name}}',
        'body': (
            'Hello,\n\n'
            'The following asset is due for scheduled maintenance:\n\n'
            'Asset Name: {{asset_name}}\n'
            'Asset Tag: {{asset_tag}}\n'
            'Maintenance Type: {{maintenance_type}}\n'
            'Due Date: {{due_date}}\n\n'
            'Please schedule the maintenance at your earliest convenience.\n\n'
            + _SIGN_OFF
        ),
        'enabled': True,
        'variables': ['asset_name', 'asset_tag', 'maintenance_type', 'due_date'],
    },
    {
        'id': 'overdue_return',
        'name': 'Overdue Return',
        'description': 'Sent when a checked-out asset is overdue for return',
        'subject': 'Overdue Asset Return: {{asset_name}}',
        'body': (
            'Hello {{user_name}},\n\n'
            'The following asset is overdue for return:\n\n'
            'Asset Name: {{asset_name}}\n'
            'Asset Tag: {{asset_tag}}\n'
            'Expected Return Date: {{expected_return_date}}\n'
            'Days Overdue: {{days_overdue}}\n\n'
            'Please return this asset as soon as possible or contact your IT department '
            'if you need an extension.\n\n'
            + _SIGN_OFF
        ),
        'enabled': True,
        'variables': ['user_name', 'asset_name', 'asset_tag', 'expected_return_date', 'days_overdue'],
    },
    {
        'id': 'license_expiring',
        'name': 'License Expiring',
        'description': 'Sent when a software license is about to expire',
        'subject': 'Software License Expiring: {{license_name}}',
        'body': (
            'Hello,\n\n'
            'The following software license is expiring soon:\n\n'
            'License Name: {{license_name}}\n'
            'Vendor: {{vendor_name}}\n'
            'Expiry Date: {{expiry_date}}\n'
            'Days Remaining: {{days_remaining}}\n'
            'Seats: {{seats_used}}/{{seats_total}}\n\n'
            'Please review and renew the license if needed to avoid service interruption.\n\n'
            + _SIGN_OFF
        ),
        'enabled': True,
        'variables': ['license_name', 'vendor_name', 'expiry_date', 'days_remaining', 'seats_used', 'seats_total'],
    },
    {
        'id': 'reservation_reminder',
        'name': 'Reservation Reminder',
        'description': 'Sent as a reminder before a reservation starts',
        'subject': 'Asset Reservation Reminder: {{asset_name}}',
        'body': (
            'Hello {{user_name}},\n\n'
            'This is a reminder about your upcoming asset reservation:\n\n'
            'Asset Name: {{asset_name}}\n'
            'Asset Tag: {{asset_tag}}\n'
            'Reservation Start: {{start_date}}\n'
            'Reservation End: {{end_date}}\n'
            'Purpose: {{purpose}}\n\n'
            'Please collect the asset on the start date from the IT department.\n\n'
            + _SIGN_OFF
        ),
        'enabled': False,
        'variables': ['user_name', 'asset_name', 'asset_tag', 'start_date', 'end_date', 'purpose'],
    },
]

TEMPLATE_IDS = tuple(template['id'] for template in DEFAULT_TEMPLATES)

# Used by the send-asset-email function when the tenant has no saved template.
# The "Notes:" line is where the asset table gets injected.
FUNCTION_FALLBACK_TEMPLATES = {
    'checkout': {
        'subject': 'Asset Checked Out: {{asset_tag}}',
        'body': (
            'Hello {{user_name}},\n\n'
            'This is a confirmation email. The following items are in your possession:\n\n'
            'Notes: {{notes}}\n\nThank you.\n\nBest regards,\nIT Team'
        ),
        'enabled': True,
    },
    'checkin': {
        'subject': 'Asset Returned: {{asset_tag}}',
        'body': (
            'Hello {{user_name}},\n\n'
            'This is a confirmation email. The following items have been returned:\n\n'
            'Notes: {{notes}}\n\nThank you.\n\nBest regards,\nIT Team'
        ),
        'enabled': True,
    },
}

DEFAULT_GLOBAL_SETTINGS = {
    'senderName': DEFAULT_SENDER_NAME,
    'sendCopyToAdmins': False,
}


def default_template(template_id: str) -> Optional[dict]:
    for template in DEFAULT_TEMPLATES:
        if template['id'] == template_id:
            return dict(template)
    return None


def replace_placeholders(text: str, variables: Dict[str, object]) -> str:
    """
    Substitute {{key}} for every key in variables; empty values become "N/A".

    Placeholders without a matching key are left untouched.
    """
    result = text or ''
    for key, value in variables.items():
        replacement = str(value) if value not in (None, '') else 'N/A'
        result = result.replace('{{' + key + '}}', replacement)
    return result


def preview_placeholders(text: str) -> str:
    """Subject preview on the setup tab: {{name}} -> [name]"""
    return _PLACEHOLDER.sub(r'[\1]', text or '')


_TH = 'padding: 10px 12px; text-align: left; font-size: 12px; font-weight: 600; border: 1px solid #d4a843;'
_HEADER_BG = 'background: #4a4a3a; color: #d4a843;'
_TABLE_COLUMNS = ('Asset Tag ID', 'Description', 'Brand', 'Model', 'Serial No')


def build_asset_table_html(assets: List[dict]) -> str:
    """
    HTML table of assets for notification emails.

    Each row dict may carry asset_tag, description, brand, model,
    serial_number and photo_url.
    """
    header_cells = ''.join(f'<th style="{_TH}">{label}</th>' for label in _TABLE_COLUMNS)
    header_cells += f'<th style="{_TH} text-align: center;">Photo</th>'
    header = f'<tr style="{_HEADER_BG}">{header_cells}</tr>'

    rows = []
    for index, row in enumerate(assets):
        background = '#3a3a2a' if index % 2 == 0 else '#4a4a3a'
        td = (
            'padding: 10px 12px; font-size: 12px; border: 1px solid #d4a843; '
            f'color: #e5e7eb; background: {background};'
        )
        if row.get('photo_url'):
            photo = (
                f'<img src="{escape(row["photo_url"])}" alt="Asset" style="width: 50px; height: 50px; '
                'object-fit: cover; border-radius: 4px; border: 1px solid #d4a843;" />'
            )
        else:
            photo = '<span style="color: #9ca3af; font-size: 11px;">No photo</span>'
        serial = f'S/N: {escape(row["serial_number"])}' if row.get('serial_number') else 'N/A'
        rows.append(
            '<tr>'
            f'<td style="{td}"><strong>{escape(row.get("asset_tag") or "N/A")}</strong></td>'
            f'<td style="{td}">{escape(row.get("description") or "N/A")}</td>'
            f'<td style="{td}">{escape(row.get("brand") or "N/A")}</td>'
            f'<td style="{td}">{escape(row.get("model") or "N/A")}</td>'
            f'<td style="{td}">{serial}</td>'
            f'<td style="{td} text-align: center;">{photo}</td>'
            '</tr>'
        )

    return (
        '<table style="border-collapse: collapse; width: 100%; margin: 16px 0; '
        'border: 1px solid #d4a843; border-radius: 8px; overflow: hidden;">'
        f'<thead>{header}</thead><tbody>{"".join(rows)}</tbody></table>'
    )


_NOTES_LINE = re.compile(r'\n\s*Notes:', re.IGNORECASE)
_SIGN_OFF_LINES = (
    re.compile(r'\n\s*Best regards', re.IGNORECASE),
    re.compile(r'\n\s*Thank you', re.IGNORECASE),
    re.compile(r'\n\s*Thanks', re.IGNORECASE),
)


def _br(text: str) -> str:
    return text.replace('\n', '<br />')


def split_for_table(body: str):
    """
    Split a plain-text body where the asset table belongs.

    Before the "Notes:" line when present, else before the first sign-off
    ("Best regards", "Thank you", "Thanks"), else at the end.
    """
    match = _NOTES_LINE.search(body)
    if match:
        return body[:match.start()], body[match.start():]
    for pattern in _SIGN_OFF_LINES:
        match = pattern.search(body)
        if match:
            return body[:match.start()], body[match.start():]
    return body, ''


def wrap_in_html_layout(body: str, sender_name: str, asset_table_html: Optional[str] = None) -> str:
    if asset_table_html:
        before, after = split_for_table(body)
        content = _br(before) + asset_table_html + _br(after)
    else:
        content = _br(body)

    return f"""<!DOCTYPE html>
<html>
<head>
  <style>
    body {{ font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; line-height: 1.6; color: #333; margin: 0; padding: 0; }}
    .container {{ max-width: 700px; margin: 0 auto; padding: 20px; }}
    .header {{ background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 20px; border-radius: 8px 8px 0 0; }}
    .content {{ background: #f9fafb; padding: 24px; border: 1px solid #e5e7eb; border-top: none; border-radius: 0 0 8px 8px; font-size: 14px; }}
    .footer {{ margin-top: 20px; font-size: 12px; color: #9ca3af; text-align: center; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header"><h1 style="margin: 0; font-size: 20px;">{escape(sender_name)}</h1></div>
    <div class="content">{content}</div>
    <div class="footer">{FOOTER_TEXT}</div>
  </div>
</body>
</html>"""
