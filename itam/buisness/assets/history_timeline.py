"""
History timeline helpers for the History and Events tabs

Pure functions over history rows (AssetHistory objects or dicts with the
same keys). Rows are expected newest first, as the tabs query them.
"""

from collections import OrderedDict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

EVENTS_TAB_LIMIT = 50
GROUP_WINDOW_SECONDS = 2

HIDDEN_DETAIL_KEYS = ('checkout_type', 'user_id', 'location_id', 'department_id')
DATE_KEY_MARKERS = ('date', 'return', 'at')

ACTION_BADGES = {
    'created': 'success',
    'updated': 'info',
    'fields_updated': 'info',
    'checked_out': 'primary',
    'checked_in': 'info',
    'status_changed': 'warning',
    'deleted': 'danger',
    'replicated': 'secondary',
    'audit_recorded': 'warning',
    'maintenance': 'warning',
    'repair': 'danger',
    'sent_for_repair': 'danger',
    'disposed': 'dark',
    'marked_as_lost': 'danger',
    'reassigned': 'primary',
}


def _get(row, key, default=None):
    if isinstance(row, dict):
        return row.get(key, default)
    return getattr(row, key, default)


def _as_dict(row) -> Dict[str, Any]:
    if isinstance(row, dict):
        return dict(row)
    return {
        'id': row.id,
        'asset_id': row.asset_id,
        'asset_tag': row.asset_tag,
        'action': row.action,
        'old_value': row.old_value,
        'new_value': row.new_value,
        'details': row.details,
        'performed_by': row.performed_by,
        'performer_name': row.performer.display_name if getattr(row, 'performer', None) else None,
        'created_at': row.created_at,
    }


def _timestamp(value) -> Optional[datetime]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        return None


def _field_change(row) -> Dict[str, Any]:
    details = _get(row, 'details') or {}
    return {
        'field': details.get('field') or _get(row, 'new_value'),
        'old': details.get('old', _get(row, 'old_value')),
        'new': details.get('new', _get(row, 'new_value')),
    }


def _merge_group(group: List[Any]) -> Dict[str, Any]:
    first = _as_dict(group[0])
    changes = [_field_change(row) for row in group]
    count = len(changes)
    first.update({
        'action': 'fields_updated',
        'old_value': f"{count} field{'s' if count > 1 else ''} updated",
        'new_value': ', '.join(str(change['field']) for change in changes if change['field']),
        'details': {'changes': changes},
        'grouped_ids': [_get(row, 'id') for row in group],
    })
    return first


def group_field_updates(rows: Iterable[Any], window_seconds: float = GROUP_WINDOW_SECONDS) -> List[Dict[str, Any]]:
    """
    Collapse runs of per-field 'field_updated' rows into one 'fields_updated' entry.

    A run is consecutive 'field_updated' rows by the same performer whose
    timestamps lie within window_seconds of the run's first row. Rows
    without a timestamp are never merged. Single-row runs are returned as
    they are. Single linear pass.
    """
    result: List[Dict[str, Any]] = []
    group: List[Any] = []
    anchor: Optional[datetime] = None

    def flush():
        if len(group) > 1:
            result.append(_merge_group(group))
        elif group:
            result.append(_as_dict(group[0]))
        group.clear()

    for row in rows:
        stamp = _timestamp(_get(row, 'created_at'))
        if _get(row, 'action') != 'field_updated' or stamp is None:
            flush()
            anchor = None
            result.append(_as_dict(row))
            continue

        if group and (
            _get(row, 'performed_by') == _get(group[0], 'performed_by')
            and abs((anchor - stamp).total_seconds()) <= window_seconds
        ):
            group.append(row)
            continue

        flush()
        group.append(row)
        anchor = stamp

    flush()
    return result


def group_by_date(entries: Iterable[Any]) -> "OrderedDict[str, List[Any]]":
    """Entries keyed by 'dd Mon YYYY' in first-seen order; missing timestamps under 'Unknown'"""
    groups: "OrderedDict[str, List[Any]]" = OrderedDict()
    for entry in entries:
        stamp = _timestamp(_get(entry, 'created_at'))
        key = stamp.strftime('%d %b %Y') if stamp else 'Unknown'
        groups.setdefault(key, []).append(entry)
    return groups


def action_label(action: Optional[str]) -> str:
    if not action:
        return ''
    return ' '.join(word.capitalize() for word in action.split('_') if word)


def action_badge(action: Optional[str]) -> str:
    return ACTION_BADGES.get(action, 'secondary')


def detail_label(key: str) -> str:
    return ' '.join(word.capitalize() for word in key.split('_') if word)


def format_detail_value(key: str, value: Any) -> str:
    """Date-like keys are shown as dd/MM/yyyy HH:mm when the value parses as a timestamp"""
    if value is None:
        return ''
    if any(marker in key for marker in DATE_KEY_MARKERS) and isinstance(value, (str, datetime)):
        stamp = _timestamp(value)
        if stamp is not None:
            return stamp.strftime('%d/%m/%Y %H:%M')
    return str(value)


def visible_details(details: Optional[Dict[str, Any]]) -> List[Tuple[str, str]]:
    """
    (label, value) pairs shown under a history entry.

    Hidden keys, empty values and the 'changes' list (rendered separately)
    are dropped.
    """
    if not isinstance(details, dict):
        return []
    pairs = []
    for key, value in details.items():
        if key in HIDDEN_DETAIL_KEYS or key == 'changes':
            continue
        if value is None or value == '':
            continue
        pairs.append((detail_label(key), format_detail_value(key, value)))
    return pairs


def timeline(rows: Iterable[Any], limit: Optional[int] = None) -> "OrderedDict[str, List[Dict[str, Any]]]":
    """Grouped, date-bucketed entries ready for rendering"""
    rows = list(rows)
    if limit:
        rows = rows[:limit]
    return group_by_date(group_field_updates(rows))
