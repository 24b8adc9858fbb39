"""
Pytest configuration and fixtures for the ITAM module

Each test gets a fresh application with an in-memory SQLite database, a
temporary bucket root and a recording email client in place of the
send-asset-email HTTP client.
"""
import os
import tempfile
from pathlib import Path

os.environ.setdefault('LOG_DIR', str(Path(tempfile.gettempdir()) / 'itam-test-logs'))

import pytest
from itam import create_app
from itam import db as _db
from itam.data.core.tenant import Tenant
from itam.data.core.user_info.user import User
from itam.data.assets.lookups import Category, Site, Location, Make, Vendor, Department
from itam.data.assets.category_tag_format import CategoryTagFormat
from itam.buisness.assets.asset_context import AssetContext
from itam.services.notifications.email_function_client import EmailResult

ADMIN_PASSWORD = 'admin123456789'
USER_PASSWORD = 'user123456789'
FUNCTION_SECRET = 'test-function-secret'


class RecordingEmailClient:
    """Stands in for EmailFunctionClient; remembers every invoke call"""

    def __init__(self, result=None):
        self.calls = []
        self.result = result or EmailResult(ok=True, message='Email sent')

    def invoke(self, template_id, recipient_email, **kwargs):
        self.calls.append({'template_id': template_id, 'recipient_email': recipient_email, **kwargs})
        return self.result


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create Flask application for testing"""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'WTF_CSRF_ENABLED': False,
        'RATELIMIT_ENABLED': False,
        'ENABLE_HTTPS': False,
        'FORCE_HTTPS_REDIRECT': False,
        'SESSION_COOKIE_SECURE': False,
        'REMEMBER_COOKIE_SECURE': False,
        'STORAGE_ROOT': str(tmp_path / 'storage'),
        'EMAIL_FUNCTION_SECRET': FUNCTION_SECRET,
        'EMAIL_TRANSPORT': 'log',
    })
    app.extensions['itam_email_client'] = RecordingEmailClient()

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope='function')
def email_client(app):
    return app.extensions['itam_email_client']


@pytest.fixture(scope='function')
def seed(app):
    """Tenant, an admin, a regular user, lookups and one available laptop"""
    tenant = Tenant(name='Acme')
    other_tenant = Tenant(name='Other Co')
    _db.session.add_all([tenant, other_tenant])
    _db.session.commit()

    admin = User(tenant_id=tenant.id, username='admin', name='Admin User',
                 email='admin@example.com', role='admin')
    admin.set_password(ADMIN_PASSWORD)
    jdoe = User(tenant_id=tenant.id, username='jdoe', name='John Doe', email='jdoe@example.com')
    jdoe.set_password(USER_PASSWORD)
    asmith = User(tenant_id=tenant.id, username='asmith', name='Alice Smith', email='asmith@example.com')
    asmith.set_password(USER_PASSWORD)
    outsider = User(tenant_id=other_tenant.id, username='outsider', name='Out Sider',
                    email='outsider@example.com')
    outsider.set_password(USER_PASSWORD)
    _db.session.add_all([admin, jdoe, asmith, outsider])

    laptops = Category(tenant_id=tenant.id, name='Laptop')
    monitors = Category(tenant_id=tenant.id, name='Monitor')
    dell = Make(tenant_id=tenant.id, name='Dell')
    site = Site(tenant_id=tenant.id, name='Head Office')
    it_dept = Department(tenant_id=tenant.id, name='IT')
    vendor = Vendor(tenant_id=tenant.id, name='Contoso Supplies', contact_email='sales@contoso.example')
    _db.session.add_all([laptops, monitors, dell, site, it_dept, vendor])
    _db.session.commit()

    floor = Location(tenant_id=tenant.id, name='Floor 2', site_id=site.id)
    _db.session.add(floor)
    _db.session.add(CategoryTagFormat(tenant_id=tenant.id, category_id=laptops.id, prefix='LAP', zero_padding=3))
    _db.session.commit()

    laptop = AssetContext.create(tenant.id, {
        'category_id': laptops.id,
        'asset_tag': 'LAP001',
        'serial_number': 'SN-1001',
        'make_id': dell.id,
        'model': 'Latitude 5440',
        'purchase_date': '2024-01-15',
        'cost': '1250.50',
        'site_id': site.id,
        'location_id': floor.id,
        'department_id': it_dept.id,
        'vendor_id': vendor.id,
        'purchased_from': 'Contoso Supplies',
        'classification': ['internal'],
    }, created_by_id=admin.id)

    return {
        'tenant': tenant,
        'other_tenant': other_tenant,
        'admin': admin,
        'jdoe': jdoe,
        'asmith': asmith,
        'outsider': outsider,
        'laptops': laptops,
        'monitors': monitors,
        'dell': dell,
        'site': site,
        'location': floor,
        'department': it_dept,
        'vendor': vendor,
        'laptop': laptop,
    }


@pytest.fixture(scope='function')
def make_asset(seed):
    """Factory creating further assets in the seeded tenant"""

    def _make(tag, **overrides):
        data = {
            'category_id': seed['laptops'].id,
            'asset_tag': tag,
            'serial_number': f'SN-{tag}',
            'make_id': seed['dell'].id,
            'model': 'Latitude 7440',
            'purchase_date': '2024-03-01',
            'cost': '999',
            'site_id': seed['site'].id,
            'location_id': seed['location'].id,
        }
        data.update(overrides)
        return AssetContext.create(seed['tenant'].id, data, created_by_id=seed['admin'].id)

    return _make


@pytest.fixture(scope='function')
def client(app):
    """Create Flask test client"""
    return app.test_client()


def login_user(client, username='admin', password=ADMIN_PASSWORD):
    """Helper function to login a user"""
    return client.post('/login', data={
        'username': username,
        'password': password
    })


@pytest.fixture(scope='function')
def authenticated_client(client, seed):
    """Test client logged in as the seeded admin"""
    response = login_user(client)
    assert response.status_code == 302, "Admin login should redirect"
    return client
