"""
Status labels, badges and the actions offered per status
"""
import pytest
from itam.buisness.assets import asset_status


@pytest.mark.parametrize('status, label', [
    ('available', 'Available'),
    ('in_use', 'Checked Out'),
    ('maintenance', 'Under Maintenance'),
    ('disposed', 'Disposed'),
    ('lost', 'Lost'),
])
def test_known_status_labels(status, label):
    assert asset_status.status_label(status) == label


def test_unknown_status_label_replaces_first_underscore():
    assert asset_status.status_label('on_loan_abroad') == 'on loan_abroad'
    assert asset_status.status_label(None) == 'Unknown'


def test_status_badge_falls_back_to_secondary():
    assert asset_status.status_badge('lost') == 'danger'
    assert asset_status.status_badge('something_else') == 'secondary'


def test_available_asset_actions():
    actions = asset_status.available_actions('available')
    assert 'check_out' in actions
    assert 'check_in' not in actions, "Available assets cannot be checked in"
    assert 'reassign' not in actions, "Available assets cannot be reassigned"
    assert actions[-3:] == ['replicate', 'email', 'edit']


def test_checked_out_asset_actions():
    actions = asset_status.available_actions('in_use')
    assert 'check_out' not in actions, "Checked out assets cannot be checked out again"
    assert 'check_in' in actions
    assert 'reassign' in actions


@pytest.mark.parametrize('status, hidden', [
    ('maintenance', 'repair'),
    ('disposed', 'dispose'),
    ('lost', 'mark_lost'),
])
def test_action_hidden_when_already_in_that_state(status, hidden):
    assert hidden not in asset_status.available_actions(status)


def test_status_choices_cover_every_status():
    values = [value for value, _ in asset_status.status_choices()]
    assert values == list(asset_status.STATUSES)
