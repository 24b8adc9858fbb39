"""
Route behaviour for login, the asset list, detail actions, tabs and setup
"""
import io
from itam import db
from itam.buisness.assets.asset_context import AssetContext
from itam.buisness.assets.asset_files import PhotosTab
from itam.buisness.notifications import email_setup
from itam.data.assets.asset import Asset
from itam.data.assets.category_tag_format import CategoryTagFormat
from itam.data.assets.document import AssetDocument
from itam.data.assets.maintenance_schedule import MaintenanceSchedule
from itam.services.storage.bucket_storage import get_storage
from conftest import USER_PASSWORD, login_user


def asset_form(seed, **overrides):
    data = {
        'category_id': seed['laptops'].id,
        'asset_tag': 'LAP050',
        'serial_number': 'SN-5050',
        'make_id': seed['dell'].id,
        'model': 'Precision 3581',
        'purchase_date': '2024-04-01',
        'cost': '1899.00',
        'site_id': seed['site'].id,
        'location_id': seed['location'].id,
        'classification': ['confidential'],
    }
    data.update(overrides)
    return data


# ----------------------------------------------------------------------
# Login
# ----------------------------------------------------------------------

def test_login_missing_credentials(client, seed):
    response = login_user(client, password='')
    assert response.status_code == 400
    assert b'Please enter both username and password' in response.data


def test_login_wrong_password(client, seed):
    response = login_user(client, password='wrong-password')
    assert response.status_code == 401
    assert b'Invalid username or password' in response.data


def test_login_disabled_account(client, seed):
    seed['jdoe'].is_active = False
    db.session.commit()
    response = login_user(client, 'jdoe', USER_PASSWORD)
    assert response.status_code == 403


def test_login_with_email_redirects_to_list(client, seed):
    response = login_user(client, 'asmith@example.com', USER_PASSWORD)
    assert response.status_code == 302
    assert response.headers['Location'].endswith('/assets/allassets')


def test_logout(authenticated_client):
    response = authenticated_client.get('/logout')
    assert response.status_code == 302
    assert authenticated_client.get('/assets/allassets').status_code == 302


# ----------------------------------------------------------------------
# List, export, bulk and tag generation
# ----------------------------------------------------------------------

def test_list_shows_tenant_assets(authenticated_client, seed):
    html = authenticated_client.get('/assets/allassets').get_data(as_text=True)
    assert 'LAP001' in html
    assert 'Latitude 5440' in html
    assert '1–1 of 1' in html


def test_list_search_without_matches(authenticated_client, seed):
    html = authenticated_client.get('/assets/allassets?search=nothing-here').get_data(as_text=True)
    assert 'LAP001' not in html
    assert '0 of 0' in html


def test_other_tenant_cannot_see_asset(client, seed):
    login_user(client, 'outsider', USER_PASSWORD)
    assert client.get(f"/assets/detail/{seed['laptop'].asset_id}").status_code == 404
    assert 'LAP001' not in client.get('/assets/allassets').get_data(as_text=True)


def test_export_csv(authenticated_client, seed):
    response = authenticated_client.get('/assets/export.csv')
    assert response.status_code == 200
    assert response.mimetype == 'text/csv'
    assert 'attachment; filename="assets-export-' in response.headers['Content-Disposition']
    lines = response.get_data(as_text=True).split('\n')
    assert lines[0] == 'Asset Tag ID,Status,Category,Make,Model,Serial No,Cost,Location,Assigned To'
    assert lines[1].startswith('LAP001,')


def test_export_contains_only_the_loaded_page(authenticated_client, seed, make_asset):
    for number in range(2, 31):
        make_asset(f'LAP{number:03d}')

    def data_rows(query):
        response = authenticated_client.get(f'/assets/export.csv{query}')
        return response.get_data(as_text=True).split('\n')[1:]

    assert len(data_rows('?page=1&per_page=25')) == 25
    assert len(data_rows('?page=2&per_page=25')) == 5
    assert len(data_rows('')) == 25, "Default page size applies"
    assert len(data_rows('?per_page=50')) == 30


def test_export_honours_filters(authenticated_client, seed):
    response = authenticated_client.get('/assets/export.csv?search=nothing-here')
    assert len(response.get_data(as_text=True).split('\n')) == 1


def test_bulk_status_change(authenticated_client, seed, make_asset):
    second = make_asset('LAP002')
    response = authenticated_client.post('/assets/bulk', data={
        'action': 'retired',
        'asset_ids': [str(seed['laptop'].asset_id), str(second.asset_id)],
    }, follow_redirects=True)
    assert b'2 asset(s) updated to Retired' in response.data
    assert seed['laptop'].refresh_status() == 'retired'


def test_bulk_requires_action(authenticated_client, seed):
    response = authenticated_client.post('/assets/bulk', data={
        'asset_ids': [str(seed['laptop'].asset_id)],
    }, follow_redirects=True)
    assert b'Please select a bulk action' in response.data


def test_next_tag(authenticated_client, seed):
    response = authenticated_client.get(f"/assets/next-tag?category_id={seed['laptops'].id}")
    assert response.get_json() == {'success': True, 'assetId': 'LAP002'}

    response = authenticated_client.get(f"/assets/next-tag?category_id={seed['monitors'].id}")
    assert response.status_code == 400
    assert response.get_json()['error'].startswith('Tag Format not configured')

    response = authenticated_client.get('/assets/next-tag')
    assert response.get_json()['error'] == 'Please select a category first'


# ----------------------------------------------------------------------
# Add, edit, delete
# ----------------------------------------------------------------------

def test_add_asset(authenticated_client, seed):
    response = authenticated_client.post('/assets/add', data=asset_form(seed))
    assert response.status_code == 302
    asset = Asset.query.filter_by(asset_tag='LAP050').one()
    assert response.headers['Location'].endswith(f'/assets/detail/{asset.id}')
    assert asset.custom['classification'] == ['confidential']


def test_add_asset_validation_rerenders_form(authenticated_client, seed):
    response = authenticated_client.post('/assets/add', data=asset_form(seed, serial_number=''))
    assert response.status_code == 200
    assert b'Serial Number is required' in response.data
    assert Asset.query.filter_by(asset_tag='LAP050').first() is None


def test_add_asset_duplicate_tag(authenticated_client, seed):
    response = authenticated_client.post('/assets/add', data=asset_form(seed, asset_tag='LAP001'))
    assert b'This Asset Tag ID is already in use.' in response.data


def test_edit_asset(authenticated_client, seed):
    asset_id = seed['laptop'].asset_id
    response = authenticated_client.post(
        f'/assets/{asset_id}/edit',
        data=asset_form(seed, asset_tag='LAP001', model='Latitude 5450'),
    )
    assert response.status_code == 302
    assert db.session.get(Asset, asset_id).model == 'Latitude 5450'


def test_delete_asset(authenticated_client, seed):
    asset_id = seed['laptop'].asset_id
    response = authenticated_client.post(f'/assets/{asset_id}/delete')
    assert response.headers['Location'].endswith('/assets/allassets')
    assert db.session.get(Asset, asset_id).is_active is False


def test_tag_of_deleted_asset_cannot_be_reused(authenticated_client, seed):
    asset_id = seed['laptop'].asset_id
    authenticated_client.post(f'/assets/{asset_id}/delete')

    response = authenticated_client.post('/assets/add', data=asset_form(seed, asset_tag='LAP001'))
    assert response.status_code == 200
    assert b'This Asset Tag ID is already in use.' in response.data
    assert b'IntegrityError' not in response.data
    assert Asset.query.filter_by(asset_tag='LAP001').count() == 1


def test_unexpected_add_error_is_not_shown_raw(authenticated_client, seed, monkeypatch):
    def broken_create(*args, **kwargs):
        raise RuntimeError('(sqlite3.OperationalError) [SQL: INSERT INTO itam_assets ...]')

    monkeypatch.setattr(AssetContext, 'create', broken_create)
    response = authenticated_client.post('/assets/add', data=asset_form(seed))
    assert b'Failed to create asset' in response.data
    assert b'INSERT INTO' not in response.data


# ----------------------------------------------------------------------
# Actions menu
# ----------------------------------------------------------------------

def test_actions_follow_status(authenticated_client, seed):
    asset_id = seed['laptop'].asset_id
    html = authenticated_client.get(f'/assets/detail/{asset_id}').get_data(as_text=True)
    assert f'/assets/{asset_id}/check-out' in html
    assert f'/assets/{asset_id}/check-in' not in html


def test_check_out_and_in(authenticated_client, seed, email_client):
    asset_id = seed['laptop'].asset_id
    response = authenticated_client.post(f'/assets/{asset_id}/check-out', data={
        'user_id': seed['jdoe'].id,
        'notes': 'New starter',
    }, follow_redirects=True)
    html = response.get_data(as_text=True)
    assert 'Asset checked out successfully' in html
    assert f'/assets/{asset_id}/check-in' in html
    assert seed['laptop'].refresh_status() == 'in_use'
    assert email_client.calls[0]['template_id'] == 'checkout'
    assert email_client.calls[0]['recipient_email'] == 'jdoe@example.com'

    response = authenticated_client.post(f'/assets/{asset_id}/check-in', follow_redirects=True)
    assert b'Asset checked in successfully' in response.data
    assert seed['laptop'].refresh_status() == 'available'


def test_action_validation_is_flashed(authenticated_client, seed):
    asset_id = seed['laptop'].asset_id
    response = authenticated_client.post(f'/assets/{asset_id}/check-out', data={})
    assert response.headers['Location'].endswith(f'/assets/detail/{asset_id}')

    html = authenticated_client.get(f'/assets/detail/{asset_id}').get_data(as_text=True)
    assert 'Please select a user' in html
    assert seed['laptop'].refresh_status() == 'available'


def test_unknown_action_is_404(authenticated_client, seed):
    response = authenticated_client.post(f"/assets/{seed['laptop'].asset_id}/teleport")
    assert response.status_code == 404


def test_replicate_redirects_to_list(authenticated_client, seed):
    response = authenticated_client.post(f"/assets/{seed['laptop'].asset_id}/replicate", data={
        'replication_type': 'multiple',
        'copy_count': '2',
    })
    assert response.headers['Location'].endswith('/assets/allassets')
    assert Asset.query.filter_by(tenant_id=seed['tenant'].id).count() == 3


# ----------------------------------------------------------------------
# Detail tabs
# ----------------------------------------------------------------------

def test_document_upload_and_download(authenticated_client, seed):
    asset_id = seed['laptop'].asset_id
    response = authenticated_client.post(
        f'/assets/{asset_id}/documents',
        data={'file': (io.BytesIO(b'%PDF-1.4 manual'), 'manual.pdf')},
        content_type='multipart/form-data',
    )
    assert response.headers['Location'].endswith(f'/assets/detail/{asset_id}?tab=docs')

    document = AssetDocument.query.filter_by(asset_id=asset_id).one()
    assert document.name == 'manual.pdf'

    response = authenticated_client.get(f'/assets/{asset_id}/documents/{document.id}/download')
    assert response.status_code == 200
    assert response.data == b'%PDF-1.4 manual'
    assert 'manual.pdf' in response.headers['Content-Disposition']


def test_document_upload_without_file(authenticated_client, seed):
    asset_id = seed['laptop'].asset_id
    response = authenticated_client.post(f'/assets/{asset_id}/documents', data={}, follow_redirects=True)
    assert b'Please select a file to upload' in response.data


def test_photo_upload_and_view(app, authenticated_client, seed):
    asset_id = seed['laptop'].asset_id
    authenticated_client.post(
        f'/assets/{asset_id}/photos',
        data={'photo': (io.BytesIO(b'\x89PNG fake'), 'front.png', 'image/png')},
        content_type='multipart/form-data',
    )
    photos = PhotosTab(seed['laptop'], get_storage(app)).photos()
    assert len(photos) == 1

    response = authenticated_client.get(f'/assets/{asset_id}/photos/{photos[0].name}')
    assert response.status_code == 200
    assert response.data == b'\x89PNG fake'
    assert authenticated_client.get(f'/assets/{asset_id}/photos/missing.png').status_code == 404


def test_maintenance_tab_routes(authenticated_client, seed):
    asset_id = seed['laptop'].asset_id
    authenticated_client.post(f'/assets/{asset_id}/maintenance', data={
        'title': 'Battery check', 'frequency': 'monthly', 'next_due_date': '2024-05-01T09:00',
    })
    schedule = MaintenanceSchedule.query.filter_by(asset_id=asset_id).one()

    response = authenticated_client.post(f'/assets/{asset_id}/maintenance/{schedule.id}/complete',
                                         follow_redirects=True)
    assert b'Maintenance marked as complete' in response.data
    assert schedule.last_completed_date is not None


def test_reservation_validation_is_flashed(authenticated_client, seed):
    response = authenticated_client.post(f"/assets/{seed['laptop'].asset_id}/reservations", data={
        'start_date': '2024-06-05', 'end_date': '2024-06-01',
    }, follow_redirects=True)
    assert b'End date must be after start date' in response.data


def test_audit_route(authenticated_client, seed):
    response = authenticated_client.post(f"/assets/{seed['laptop'].asset_id}/audits", data={
        'condition': 'fair', 'location_verified': 'on',
    }, follow_redirects=True)
    assert b'Audit recorded' in response.data
    assert seed['laptop'].history()[0].action == 'audit_recorded'


# ----------------------------------------------------------------------
# Setup
# ----------------------------------------------------------------------

def test_columns_json(authenticated_client, seed):
    data = authenticated_client.get('/assets/setup/columns').get_json()
    assert len(data['columns']) == 22
    assert [group for group in data['groups']]

    data = authenticated_client.post('/assets/setup/columns', json={
        'action': 'toggle', 'id': 'site', 'visible': True, 'widths': {'model': 200},
    }).get_json()
    assert data['success'] is True
    assert next(column for column in data['columns'] if column['id'] == 'site')['visible'] is True
    assert data['widths']['model'] == 200

    data = authenticated_client.post('/assets/setup/columns', json={'action': 'reset'}).get_json()
    assert next(column for column in data['columns'] if column['id'] == 'site')['visible'] is False

    response = authenticated_client.post('/assets/setup/columns', json={'action': 'shuffle'})
    assert response.status_code == 400


def test_email_setup_routes(authenticated_client, seed, email_client):
    tenant_id = seed['tenant'].id
    response = authenticated_client.post('/assets/setup/emails/checkout', data={
        'subject': 'Out: {{asset_tag}}', 'body': 'Hello {{user_name}}', 'enabled': 'on',
    }, follow_redirects=True)
    assert b'Template saved' in response.data
    assert email_setup.get_template(tenant_id, 'checkout')['customized'] is True

    authenticated_client.post('/assets/setup/emails/checkout/toggle')
    assert email_setup.get_template(tenant_id, 'checkout')['enabled'] is False

    authenticated_client.post('/assets/setup/emails/settings', data={
        'sender_name': 'Acme IT', 'send_copy_to_admins': 'on',
    })
    assert email_setup.settings(tenant_id) == {'senderName': 'Acme IT', 'sendCopyToAdmins': True}

    response = authenticated_client.post('/assets/setup/emails/test', data={'recipient': ''},
                                         follow_redirects=True)
    assert b'Email sent' in response.data
    assert email_client.calls[-1]['template_id'] == 'test'
    assert email_client.calls[-1]['test_mode'] is True


def test_tag_format_route(authenticated_client, seed):
    response = authenticated_client.post('/assets/setup/tag-format', data={
        'category_id': seed['monitors'].id, 'prefix': 'mon', 'zero_padding': '4',
    }, follow_redirects=True)
    assert b'Tag format saved' in response.data
    saved = CategoryTagFormat.query.filter_by(category_id=seed['monitors'].id).one()
    assert (saved.prefix, saved.zero_padding) == ('MON', 4)

    response = authenticated_client.get(f"/assets/next-tag?category_id={seed['monitors'].id}")
    assert response.get_json()['assetId'] == 'MON0001'
