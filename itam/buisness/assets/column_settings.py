"""
Asset list column settings

Column positions are fixed by the system; users only choose visibility and
widths. Visibility is stored as [{id, visible}, ...] under 'asset_columns'
and widths as {id: px} under 'asset_column_widths', both per user.
"""

from typing import Any, Dict, Iterable, List, Optional
from itam.buisness.core.settings_context import SettingsContext

COLUMNS_KEY = 'asset_columns'
WIDTHS_KEY = 'asset_column_widths'

MIN_WIDTH = 60
MAX_WIDTH = 600

CATEGORY_LABELS = {
    'asset': 'Asset Fields',
    'linking': 'Linking Fields',
    'event': 'Event Fields',
}
CATEGORY_ORDER = ('asset', 'linking', 'event')

# (id, label, visible by default, category, locked/required)
_SYSTEM_COLUMNS = (
    ('asset_photo', 'Image', False, 'asset', False),
    ('asset_tag', 'Asset Tag ID', True, 'asset', True),
    ('status', 'Status', True, 'event', False),
    ('category', 'Category', True, 'linking', False),
    ('make', 'Make', True, 'asset', False),
    ('model', 'Model', True, 'asset', False),
    ('serial_number', 'Serial No', True, 'asset', False),
    ('asset_configuration', 'Asset Configuration', False, 'asset', False),
    ('description', 'Description', False, 'asset', False),
    ('cost', 'Cost', True, 'asset', False),
    ('purchase_date', 'Purchase Date', False, 'asset', False),
    ('purchased_from', 'Purchased From', False, 'asset', False),
    ('asset_classification', 'Asset Classification', False, 'asset', False),
    ('department', 'Department', False, 'linking', False),
    ('location', 'Location', True, 'linking', False),
    ('site', 'Site', False, 'linking', False),
    ('event_date', 'Event Date', False, 'event', False),
    ('event_due_date', 'Event Due Date', False, 'event', False),
    ('event_notes', 'Event Notes', False, 'event', False),
    ('created_by', 'Created By', False, 'asset', False),
    ('created_at', 'Date Created', False, 'asset', False),
    ('assigned_to', 'Assigned To', True, 'event', False),
)

SYSTEM_COLUMN_ORDER: List[Dict[str, Any]] = [
    {
        'id': column_id,
        'label': label,
        'visible': visible,
        'locked': locked,
        'required': locked,
        'order_index': index,
        'category': category,
    }
    for index, (column_id, label, visible, category, locked) in enumerate(_SYSTEM_COLUMNS)
]

COLUMN_IDS = tuple(column['id'] for column in SYSTEM_COLUMN_ORDER)

# Minimum widths the list renders with before the user resizes
DEFAULT_WIDTHS = {
    'asset_tag': 100, 'category': 90, 'status': 90, 'make': 80, 'model': 80,
    'serial_number': 100, 'assigned_to': 100, 'asset_configuration': 140,
    'description': 150, 'cost': 90, 'purchase_date': 100, 'purchased_from': 100,
    'location': 80, 'site': 60, 'department': 90, 'asset_classification': 120,
    'asset_photo': 60, 'event_date': 100, 'event_due_date': 100, 'event_notes': 150,
    'created_by': 100, 'created_at': 100,
}


def default_columns() -> List[Dict[str, Any]]:
    return [dict(column) for column in SYSTEM_COLUMN_ORDER]


def _is_fixed(column: Dict[str, Any]) -> bool:
    return bool(column.get('locked') or column.get('required'))


def merge_saved_columns(saved: Optional[Iterable[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """
    Apply saved visibility on top of the system order.

    Unknown ids in the saved list are ignored and the order never changes.
    Locked columns stay visible whatever was saved.
    """
    saved_visibility = {}
    for entry in saved or []:
        if isinstance(entry, dict) and entry.get('id') in COLUMN_IDS:
            saved_visibility[entry['id']] = bool(entry.get('visible'))

    columns = default_columns()
    for column in columns:
        if column['id'] in saved_visibility and not _is_fixed(column):
            column['visible'] = saved_visibility[column['id']]
    return columns


def toggle(columns: List[Dict[str, Any]], column_id: str, visible: bool) -> List[Dict[str, Any]]:
    return [
        dict(column, visible=visible) if column['id'] == column_id and not _is_fixed(column) else dict(column)
        for column in columns
    ]


def show_all(columns: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [dict(column, visible=True) for column in columns]


def hide_all(columns: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [dict(column) if _is_fixed(column) else dict(column, visible=False) for column in columns]


def reset() -> List[Dict[str, Any]]:
    return default_columns()


def visible_columns(columns: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [column for column in columns if column['visible']]


def grouped_by_category(columns: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """[{category, label, columns}] in asset, linking, event order"""
    groups = []
    for category in CATEGORY_ORDER:
        members = sorted(
            (column for column in columns if column.get('category', 'asset') == category),
            key=lambda column: column['order_index'],
        )
        if members:
            groups.append({'category': category, 'label': CATEGORY_LABELS[category], 'columns': members})
    return groups


def visibility_state(columns: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """What gets persisted: id and visibility only"""
    return [{'id': column['id'], 'visible': bool(column['visible'])} for column in columns]


def clamp_width(width) -> int:
    return max(MIN_WIDTH, min(MAX_WIDTH, int(width)))


def clean_widths(widths: Optional[Dict[str, Any]]) -> Dict[str, int]:
    """Known column ids with numeric widths, clamped to [MIN_WIDTH, MAX_WIDTH]"""
    cleaned = {}
    for column_id, width in (widths or {}).items():
        if column_id not in COLUMN_IDS:
            continue
        try:
            cleaned[column_id] = clamp_width(float(width))
        except (TypeError, ValueError):
            continue
    return cleaned


class ColumnSettings:
    """Per-user column preferences backed by itam_settings"""

    def __init__(self, tenant_id: int, user_id: int):
        self.settings = SettingsContext(tenant_id, user_id)

    def columns(self) -> List[Dict[str, Any]]:
        return merge_saved_columns(self.settings.get(COLUMNS_KEY))

    def save_columns(self, columns: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        merged = merge_saved_columns(columns)
        self.settings.set(COLUMNS_KEY, visibility_state(merged))
        return merged

    def widths(self) -> Dict[str, int]:
        widths = dict(DEFAULT_WIDTHS)
        widths.update(clean_widths(self.settings.get(WIDTHS_KEY)))
        return widths

    def save_widths(self, widths: Dict[str, Any]) -> Dict[str, int]:
        stored = clean_widths(self.settings.get(WIDTHS_KEY))
        stored.update(clean_widths(widths))
        self.settings.set(WIDTHS_KEY, stored)
        return stored

    def reset(self) -> List[Dict[str, Any]]:
        self.settings.delete(COLUMNS_KEY)
        self.settings.delete(WIDTHS_KEY)
        return default_columns()
