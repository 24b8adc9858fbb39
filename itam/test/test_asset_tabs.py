"""
Warranty, maintenance, reservation, linking, audit and contracts tabs
"""
from datetime import date, datetime
import pytest
from werkzeug.exceptions import NotFound
from itam import db
from itam.buisness.assets.asset_tabs import (
    AuditTab, LinksTab, MaintenanceTab, ReservationsTab, add_months, contracts,
    next_due_after, warranty_status,
)
from itam.data.assets.purchase_order import PurchaseOrder


def test_add_months_clamps_to_month_end():
    assert add_months(datetime(2024, 1, 31, 8, 0), 1) == datetime(2024, 2, 29, 8, 0)
    assert add_months(datetime(2023, 11, 30), 3) == datetime(2024, 2, 29)
    assert add_months(datetime(2024, 2, 29), 12) == datetime(2025, 2, 28)


@pytest.mark.parametrize('frequency, expected', [
    ('daily', datetime(2024, 5, 11, 12, 0)),
    ('weekly', datetime(2024, 5, 17, 12, 0)),
    ('monthly', datetime(2024, 6, 10, 12, 0)),
    ('quarterly', datetime(2024, 8, 10, 12, 0)),
    ('yearly', datetime(2025, 5, 10, 12, 0)),
    (None, None),
])
def test_next_due_after(frequency, expected):
    assert next_due_after(frequency, datetime(2024, 5, 10, 12, 0)) == expected


def test_warranty_status():
    today = date(2024, 5, 10)
    assert warranty_status(None, today) is None
    assert warranty_status(date(2024, 5, 9), today) == {'message': 'Expired', 'level': 'danger'}
    assert warranty_status(date(2024, 5, 30), today) == {'message': 'Expires in 20 days', 'level': 'warning'}
    assert warranty_status(date(2024, 7, 1), today) is None


def test_due_badge():
    now = datetime(2024, 5, 10, 12, 0)
    assert MaintenanceTab.due_badge(None, now)['label'] == 'No schedule'
    assert MaintenanceTab.due_badge(datetime(2024, 5, 9), now)['label'] == 'Overdue'
    assert MaintenanceTab.due_badge(datetime(2024, 5, 15), now)['label'] == 'Due Soon'
    assert MaintenanceTab.due_badge(datetime(2024, 6, 15), now) == {'label': 'Scheduled', 'badge': 'secondary'}


def test_maintenance_schedule_lifecycle(seed):
    tab = MaintenanceTab(seed['laptop'], user_id=seed['admin'].id)
    schedule = tab.create('Battery check', frequency='quarterly', next_due_date='2024-05-01T09:00')
    assert tab.schedules() == [schedule]

    completed = tab.complete(schedule.id, now=datetime(2024, 5, 2, 9, 0))
    assert completed.last_completed_date == datetime(2024, 5, 2, 9, 0)
    assert completed.next_due_date == datetime(2024, 8, 2, 9, 0)

    tab.delete(schedule.id)
    assert tab.schedules() == []
    with pytest.raises(NotFound):
        tab.delete(schedule.id)


def test_maintenance_validation(seed):
    tab = MaintenanceTab(seed['laptop'])
    with pytest.raises(ValueError, match='Please enter a title'):
        tab.create('  ')
    with pytest.raises(ValueError, match='Invalid frequency'):
        tab.create('Clean fans', frequency='hourly')


def test_reservations(seed):
    tab = ReservationsTab(seed['laptop'], user_id=seed['admin'].id)
    early = tab.create('2024-06-01', '2024-06-03', reserved_for_name='Sales team', purpose='Demo')
    later = tab.create('2024-07-01', '2024-07-01')

    assert early.status == 'pending'
    assert tab.reservations() == [later, early], "Newest start date first"

    cancelled = tab.cancel(early.id)
    assert cancelled.status == 'cancelled'
    with pytest.raises(ValueError, match='Only pending reservations can be cancelled'):
        tab.cancel(early.id)


def test_reservation_validation(seed):
    tab = ReservationsTab(seed['laptop'])
    with pytest.raises(ValueError, match='Please select start and end dates'):
        tab.create('2024-06-01', '')
    with pytest.raises(ValueError, match='End date must be after start date'):
        tab.create('2024-06-05', '2024-06-01')


def test_links(seed, make_asset):
    dock = make_asset('LAP002')
    monitor = make_asset('LAP003')
    tab = LinksTab(seed['laptop'], user_id=seed['admin'].id)

    assert [asset.asset_tag for asset in tab.candidates()] == ['LAP002', 'LAP003']
    link = tab.link(str(dock.asset_id), link_type='child', notes='Desk dock')
    assert link.link_type == 'child'
    assert [asset.asset_tag for asset in tab.candidates()] == ['LAP003']

    with pytest.raises(ValueError, match='These assets are already linked'):
        tab.link(dock.asset_id)
    tab.unlink(link.id)
    assert tab.links() == []
    assert len(tab.candidates()) == 2
    assert monitor.asset_id in [asset.id for asset in tab.candidates()]


def test_link_validation(seed, make_asset):
    tab = LinksTab(seed['laptop'])
    with pytest.raises(ValueError, match='Please select an asset to link'):
        tab.link('')
    with pytest.raises(ValueError, match='An asset cannot be linked to itself'):
        tab.link(seed['laptop'].asset_id)
    with pytest.raises(ValueError, match='Invalid link type'):
        tab.link(make_asset('LAP002').asset_id, link_type='sibling')
    with pytest.raises(ValueError, match='Linked asset not found'):
        tab.link(99999)


def test_audit_records_history(seed):
    tab = AuditTab(seed['laptop'], user_id=seed['admin'].id)
    audit = tab.record('good', location_verified=True, notes='Spot check')

    assert tab.audits() == [audit]
    assert audit.auditor.username == 'admin'
    history = seed['laptop'].history()[0]
    assert history.action == 'audit_recorded'
    assert history.details == {'condition': 'good', 'location_verified': True, 'notes': 'Spot check'}

    with pytest.raises(ValueError, match='Invalid condition'):
        tab.record('shiny')


def test_contracts_lists_vendor_purchase_orders(seed):
    vendor = seed['vendor']
    db.session.add_all([
        PurchaseOrder(tenant_id=seed['tenant'].id, vendor_id=vendor.id, po_number='PO-1',
                      created_at=datetime(2024, 1, 1)),
        PurchaseOrder(tenant_id=seed['tenant'].id, vendor_id=vendor.id, po_number='PO-2',
                      created_at=datetime(2024, 2, 1)),
    ])
    db.session.commit()

    data = contracts(seed['laptop'])
    assert data['vendor'].name == 'Contoso Supplies'
    assert [order.po_number for order in data['purchase_orders']] == ['PO-2', 'PO-1']
