from itam.data.core.tenant_owned_base import TenantOwnedBase
from itam import db


class Category(TenantOwnedBase):
    __tablename__ = 'itam_categories'

    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, default=True)

    def __repr__(self):
        return f'<Category {self.name}>'


class Site(TenantOwnedBase):
    __tablename__ = 'itam_sites'

    name = db.Column(db.String(100), nullable=False)
    address = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, default=True)

    locations = db.relationship('Location', back_populates='site')

    def __repr__(self):
        return f'<Site {self.name}>'


class Location(TenantOwnedBase):
    __tablename__ = 'itam_locations'

    name = db.Column(db.String(100), nullable=False)
    site_id = db.Column(db.Integer, db.ForeignKey('itam_sites.id'), nullable=True)
    is_active = db.Column(db.Boolean, default=True)

    site = db.relationship('Site', back_populates='locations')

    def __repr__(self):
        return f'<Location {self.name}>'


class Department(TenantOwnedBase):
    __tablename__ = 'itam_departments'

    name = db.Column(db.String(100), nullable=False)
    is_active = db.Column(db.Boolean, default=True)

    def __repr__(self):
        return f'<Department {self.name}>'


class Make(TenantOwnedBase):
    __tablename__ = 'itam_makes'

    name = db.Column(db.String(100), nullable=False)
    is_active = db.Column(db.Boolean, default=True)

    def __repr__(self):
        return f'<Make {self.name}>'


class Vendor(TenantOwnedBase):
    __tablename__ = 'itam_vendors'

    name = db.Column(db.String(150), nullable=False)
    contact_name = db.Column(db.String(120), nullable=True)
    contact_email = db.Column(db.String(120), nullable=True)
    contact_phone = db.Column(db.String(50), nullable=True)
    website = db.Column(db.String(255), nullable=True)
    address = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, default=True)

    purchase_orders = db.relationship('PurchaseOrder', back_populates='vendor', lazy='dynamic')

    def __repr__(self):
        return f'<Vendor {self.name}>'
