"""
Column visibility and width preferences for the asset list
"""
from itam.buisness.assets import column_settings
from itam.buisness.assets.column_settings import ColumnSettings


def _visible_ids(columns):
    return [column['id'] for column in column_settings.visible_columns(columns)]


def test_defaults_follow_system_order():
    columns = column_settings.default_columns()
    assert [c['id'] for c in columns] == list(column_settings.COLUMN_IDS)
    assert len(columns) == 22
    assert _visible_ids(columns) == [
        'asset_tag', 'status', 'category', 'make', 'model', 'serial_number',
        'cost', 'location', 'assigned_to',
    ]


def test_merge_ignores_unknown_ids_and_keeps_order():
    saved = [
        {'id': 'site', 'visible': True},
        {'id': 'not_a_column', 'visible': True},
        {'id': 'status', 'visible': False},
    ]
    columns = column_settings.merge_saved_columns(saved)
    assert [c['id'] for c in columns] == list(column_settings.COLUMN_IDS)
    assert 'site' in _visible_ids(columns)
    assert 'status' not in _visible_ids(columns)


def test_locked_column_cannot_be_hidden():
    columns = column_settings.default_columns()
    assert 'asset_tag' in _visible_ids(column_settings.toggle(columns, 'asset_tag', False))
    assert _visible_ids(column_settings.hide_all(columns)) == ['asset_tag']
    merged = column_settings.merge_saved_columns([{'id': 'asset_tag', 'visible': False}])
    assert 'asset_tag' in _visible_ids(merged)


def test_show_all_and_reset():
    columns = column_settings.show_all(column_settings.default_columns())
    assert len(_visible_ids(columns)) == 22
    assert column_settings.reset() == column_settings.default_columns()


def test_grouped_by_category():
    groups = column_settings.grouped_by_category(column_settings.default_columns())
    assert [group['category'] for group in groups] == ['asset', 'linking', 'event']
    assert groups[1]['label'] == 'Linking Fields'
    assert [c['id'] for c in groups[2]['columns']][:2] == ['status', 'event_date']


def test_widths_are_clamped_and_filtered():
    widths = column_settings.clean_widths({'asset_tag': 10, 'model': 9000, 'cost': 'wide', 'bogus': 100})
    assert widths == {'asset_tag': 60, 'model': 600}


def test_preferences_persist_per_user(seed):
    tenant_id = seed['tenant'].id
    admin_settings = ColumnSettings(tenant_id, seed['admin'].id)
    other_settings = ColumnSettings(tenant_id, seed['jdoe'].id)

    admin_settings.save_columns(column_settings.toggle(admin_settings.columns(), 'site', True))
    admin_settings.save_widths({'model': 250})

    assert 'site' in _visible_ids(admin_settings.columns())
    assert admin_settings.widths()['model'] == 250
    assert admin_settings.widths()['asset_tag'] == column_settings.DEFAULT_WIDTHS['asset_tag']
    assert 'site' not in _visible_ids(other_settings.columns()), "Preferences belong to one user"

    admin_settings.reset()
    assert 'site' not in _visible_ids(admin_settings.columns())
    assert admin_settings.widths() == column_settings.DEFAULT_WIDTHS
