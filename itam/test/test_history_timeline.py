"""
Grouping and formatting of history rows for the History and Events tabs
"""
from datetime import datetime, timedelta
from itam.buisness.assets import history_timeline

BASE = datetime(2024, 5, 10, 9, 30, 0)


def _row(row_id, action, seconds=0, performed_by=1, **extra):
    row = {
        'id': row_id,
        'asset_id': 7,
        'action': action,
        'old_value': extra.pop('old_value', None),
        'new_value': extra.pop('new_value', None),
        'details': extra.pop('details', None),
        'performed_by': performed_by,
        'created_at': BASE - timedelta(seconds=seconds),
    }
    row.update(extra)
    return row


def test_field_updates_within_window_are_merged():
    rows = [
        _row(3, 'field_updated', 0, details={'field': 'Model', 'old': 'A', 'new': 'B'}),
        _row(2, 'field_updated', 1, details={'field': 'Serial Number', 'old': '1', 'new': '2'}),
        _row(1, 'created', 60),
    ]
    entries = history_timeline.group_field_updates(rows)

    assert len(entries) == 2
    merged = entries[0]
    assert merged['action'] == 'fields_updated'
    assert merged['old_value'] == '2 fields updated'
    assert merged['new_value'] == 'Model, Serial Number'
    assert merged['grouped_ids'] == [3, 2]
    assert entries[1]['action'] == 'created'


def test_field_updates_by_different_users_stay_separate():
    rows = [
        _row(2, 'field_updated', 0, performed_by=1, details={'field': 'Model'}),
        _row(1, 'field_updated', 1, performed_by=2, details={'field': 'Model'}),
    ]
    entries = history_timeline.group_field_updates(rows)
    assert [entry['action'] for entry in entries] == ['field_updated', 'field_updated']


def test_field_updates_outside_window_stay_separate():
    rows = [
        _row(2, 'field_updated', 0, details={'field': 'Model'}),
        _row(1, 'field_updated', 5, details={'field': 'Cost'}),
    ]
    assert len(history_timeline.group_field_updates(rows)) == 2


def test_group_by_date_keeps_first_seen_order():
    rows = [
        _row(2, 'checked_in', 0),
        _row(1, 'checked_out', 60 * 60 * 24),
        {'id': 0, 'action': 'created', 'created_at': None},
    ]
    groups = history_timeline.group_by_date(rows)
    assert list(groups.keys()) == ['10 May 2024', '09 May 2024', 'Unknown']


def test_timeline_honours_limit():
    rows = [_row(i, 'checked_out', i * 10) for i in range(60)]
    grouped = history_timeline.timeline(rows, limit=history_timeline.EVENTS_TAB_LIMIT)
    assert sum(len(entries) for entries in grouped.values()) == 50


def test_action_label_and_badge():
    assert history_timeline.action_label('marked_as_lost') == 'Marked As Lost'
    assert history_timeline.action_badge('checked_out') == 'primary'
    assert history_timeline.action_badge('status_changed_to_lost') == 'secondary'


def test_visible_details_hides_internal_keys_and_formats_dates():
    details = {
        'user_id': 4,
        'assigned_to': 'John Doe',
        'expected_return': '2024-05-17T09:30:00',
        'notes': '',
        'changes': [{'field': 'Model'}],
    }
    pairs = history_timeline.visible_details(details)
    assert ('Assigned To', 'John Doe') in pairs
    assert ('Expected Return', '17/05/2024 09:30') in pairs
    assert all(label != 'User Id' for label, _ in pairs), "user_id is never shown"
    assert all(label != 'Notes' for label, _ in pairs), "Empty values are dropped"
    assert all(label != 'Changes' for label, _ in pairs)


def test_date_like_key_with_unparseable_value_is_left_alone():
    assert history_timeline.format_detail_value('disposal_date', 'sometime soon') == 'sometime soon'
    assert history_timeline.visible_details(None) == []
