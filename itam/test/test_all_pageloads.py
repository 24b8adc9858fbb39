"""
Page load checks: every GET page of the asset module renders for a logged-in user
"""
import pytest
from itam.services.assets.asset_detail_service import TAB_IDS


def test_login_page_loads(client):
    response = client.get('/login')
    assert response.status_code == 200
    assert b'Username' in response.data or b'username' in response.data


@pytest.mark.parametrize('path', [
    '/assets/allassets',
    '/assets/allassets?search=LAP&status=available&per_page=50&sort=asset_tag&direction=asc',
    '/assets/add',
    '/assets/setup/emails',
    '/assets/setup/tag-format',
])
def test_module_pages_load(authenticated_client, path):
    response = authenticated_client.get(path)
    assert response.status_code == 200, f"{path} returned {response.status_code}"


def test_edit_page_loads(authenticated_client, seed):
    response = authenticated_client.get(f"/assets/{seed['laptop'].asset_id}/edit")
    assert response.status_code == 200
    assert b'Latitude 5440' in response.data


@pytest.mark.parametrize('tab', TAB_IDS)
def test_every_detail_tab_loads(authenticated_client, seed, tab):
    response = authenticated_client.get(f"/assets/detail/{seed['laptop'].asset_id}?tab={tab}")
    assert response.status_code == 200, f"Tab {tab} returned {response.status_code}"
    assert b'LAP001' in response.data


def test_detail_accepts_asset_tag(authenticated_client, seed):
    response = authenticated_client.get('/assets/detail/LAP001')
    assert response.status_code == 200


def test_unknown_tab_falls_back_to_details(authenticated_client, seed):
    response = authenticated_client.get(f"/assets/detail/{seed['laptop'].asset_id}?tab=nonsense")
    assert response.status_code == 200


def test_pages_require_login(client, seed):
    for path in ('/', '/assets/allassets', '/assets/setup/emails', f"/assets/detail/{seed['laptop'].asset_id}"):
        response = client.get(path)
        assert response.status_code == 302, f"{path} should redirect to login"
        assert '/login' in response.headers['Location']
