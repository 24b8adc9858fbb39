#!/usr/bin/env python3
"""
Database build for the ITAM asset module
Creates tables, inserts critical data and optionally demo data
"""

import json
import os
from pathlib import Path
from itam import create_app, db
from itam.logger import get_logger

logger = get_logger("itam.build")

CRITICAL_DATA_FILE = Path(__file__).parent / 'data' / 'core' / 'build_data_critical.json'
DEMO_DATA_FILE = Path(__file__).parent / 'data' / 'assets' / 'build_data_demo.json'

DEMO_USER_PASSWORD_ENV = 'DEMO_USER_PASSWORD'


def _load(path: Path) -> dict:
    if not path.exists():
        error_msg = f"Build data file not found: {path}"
        logger.error(error_msg)
        raise FileNotFoundError(error_msg)
    with open(path, 'r') as f:
        return json.load(f)


def verify_critical_data() -> bool:
    """
    Verify that critical data is present in the database

    Returns:
        bool: True if the default tenant, system user and admin user exist
    """
    from itam.data.core.tenant import Tenant
    from itam.data.core.user_info.user import User

    if Tenant.query.first() is None:
        logger.warning("Default tenant not found")
        return False
    for username in ('system', 'admin'):
        if User.query.filter_by(username=username).first() is None:
            logger.warning(f"User '{username}' not found")
            return False
    return True


def insert_critical_data():
    """
    Insert critical data that must always be present

    Passwords come from SYSTEM_USER_PASSWORD / ADMIN_USER_PASSWORD; run
    generate_env.py to create them.

    Raises:
        RuntimeError: When a required password is missing or insertion fails
    """
    from itam.data.core.tenant import Tenant
    from itam.data.core.user_info.user import User
    from itam.data.assets.lookups import Category
    from itam.data.assets.category_tag_format import CategoryTagFormat

    critical_data = _load(CRITICAL_DATA_FILE)

    if verify_critical_data():
        logger.info("Critical data already present, skipping insertion")
        return

    logger.warning("Critical data missing, attempting insertion...")
    try:
        tenant, _ = Tenant.find_or_create_from_dict(critical_data['Tenant'], lookup_fields=['name'], commit=False)

        system_user = None
        for key, user_data in critical_data['Users'].items():
            password = os.environ.get(user_data['password_env'])
            if not password:
                raise RuntimeError(f"{user_data['password_env']} is not set; run generate_env.py")
            values = {k: v for k, v in user_data.items() if k != 'password_env'}
            values.update({'tenant_id': tenant.id, 'password': password})
            user, created = User.find_or_create_from_dict(values, lookup_fields=['username'], commit=False)
            if key == 'system':
                system_user = user
            logger.info(f"{'Inserted' if created else 'Found'} essential user: {user.username}")

        system_user_id = system_user.id if system_user else None
        for category_data in critical_data['Categories']:
            category, _ = Category.find_or_create_from_dict(
                {'tenant_id': tenant.id, 'name': category_data['name'],
                 'description': category_data.get('description'), 'is_active': True},
                user_id=system_user_id,
                lookup_fields=['tenant_id', 'name'],
                commit=False,
            )
            if category_data.get('prefix'):
                CategoryTagFormat.find_or_create_from_dict(
                    {'tenant_id': tenant.id, 'category_id': category.id,
                     'prefix': category_data['prefix'], 'zero_padding': 3},
                    user_id=system_user_id,
                    lookup_fields=['tenant_id', 'category_id'],
                    commit=False,
                )

        db.session.commit()
        logger.info("Successfully inserted critical data")
    except Exception as e:
        db.session.rollback()
        error_msg = f"Critical data insertion failed: {e}"
        logger.error(error_msg)
        raise RuntimeError(error_msg) from e


def insert_demo_data():
    """Sites, lookups, vendors, demo users and a handful of assets for the default tenant"""
    from itam.data.core.tenant import Tenant
    from itam.data.core.user_info.user import User
    from itam.data.assets.lookups import Category, Department, Location, Make, Site, Vendor
    from itam.data.assets.asset import Asset
    from itam.data.assets.purchase_order import PurchaseOrder
    from itam.buisness.assets.asset_context import AssetContext
    from itam.buisness.assets.asset_tag_generator import next_asset_tag
    from itam.utils.form_values import parse_amount, parse_date

    demo = _load(DEMO_DATA_FILE)
    tenant = Tenant.query.order_by(Tenant.id).first()
    admin = User.query.filter_by(username='admin').first()
    if Asset.query.filter_by(tenant_id=tenant.id).first() is not None:
        logger.info("Assets already present, skipping demo data")
        return

    admin_id = admin.id if admin else None

    def lookup(model, name, **extra):
        row, _ = model.find_or_create_from_dict(
            dict({'tenant_id': tenant.id, 'name': name, 'is_active': True}, **extra),
            user_id=admin_id, lookup_fields=['tenant_id', 'name'], commit=False,
        )
        return row

    for site_data in demo['Sites']:
        site = lookup(Site, site_data['name'], address=site_data.get('address'))
        for location_name in site_data['locations']:
            lookup(Location, location_name, site_id=site.id)
    for name in demo['Departments']:
        lookup(Department, name)
    for name in demo['Makes']:
        lookup(Make, name)
    for vendor_data in demo['Vendors']:
        lookup(Vendor, vendor_data['name'], **{k: v for k, v in vendor_data.items() if k != 'name'})
    db.session.commit()

    demo_password = os.environ.get(DEMO_USER_PASSWORD_ENV) or os.environ.get('ADMIN_USER_PASSWORD')
    if not demo_password:
        logger.warning(f"{DEMO_USER_PASSWORD_ENV} not set, skipping demo users")
    for user_data in (demo['Users'] if demo_password else []):
        User.find_or_create_from_dict(
            dict(user_data, tenant_id=tenant.id, password=demo_password),
            lookup_fields=['username'], commit=False,
        )
    db.session.commit()

    def row_id(model, name):
        row = model.query.filter_by(tenant_id=tenant.id, name=name).first()
        return row.id if row else None

    for asset_data in demo['Assets']:
        category_id = row_id(Category, asset_data['category'])
        form = {
            'category_id': category_id,
            'asset_tag': next_asset_tag(tenant.id, category_id),
            'make_id': row_id(Make, asset_data['make']),
            'model': asset_data['model'],
            'serial_number': asset_data['serial_number'],
            'cost': asset_data['cost'],
            'purchase_date': asset_data['purchase_date'],
            'warranty_expiry': asset_data.get('warranty_expiry'),
            'site_id': row_id(Site, asset_data['site']),
            'location_id': row_id(Location, asset_data['location']),
            'department_id': row_id(Department, asset_data['department']),
            'vendor_id': row_id(Vendor, asset_data['vendor']),
            'purchased_from': asset_data['vendor'],
            'asset_configuration': asset_data.get('asset_configuration'),
        }
        AssetContext.create(tenant.id, form, created_by_id=admin_id)

    for order in demo['PurchaseOrders']:
        PurchaseOrder.create_from_dict(
            {
                'tenant_id': tenant.id,
                'vendor_id': row_id(Vendor, order['vendor']),
                'po_number': order['po_number'],
                'status': order['status'],
                'total_amount': parse_amount(order['total_amount']),
                'order_date': parse_date(order['order_date']),
            },
            user_id=admin_id, commit=False,
        )
    db.session.commit()
    logger.info(f"Inserted demo data: {len(demo['Assets'])} assets")


def build_models():
    # Import models to ensure they're registered with SQLAlchemy
    from itam.data import core, assets, notifications  # noqa: F401
    db.create_all()
    logger.info("All database tables created")


def build_database(seed_demo=True, app=None):
    """
    Create tables, insert critical data and optionally demo data

    Args:
        seed_demo (bool): Insert demo sites, users and assets
        app: Existing application; a new one is created when omitted
    """
    app = app or create_app()

    with app.app_context():
        logger.info(f"Starting database build (demo data: {seed_demo})")
        build_models()

        try:
            insert_critical_data()
        except Exception as e:
            logger.error(f"Critical data insertion failed: {e}")
            logger.error("Application cannot continue without critical data. Stopping build.")
            raise

        if seed_demo:
            try:
                insert_demo_data()
            except Exception as e:
                db.session.rollback()
                logger.error(f"Demo data insertion failed: {e}")
                raise

        logger.info("Database build completed successfully")


if __name__ == '__main__':
    import sys
    build_database(seed_demo='--no-demo-data' not in sys.argv)
