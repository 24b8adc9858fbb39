from itam.data.core.tenant_owned_base import TenantOwnedBase
from itam import db

# Fields cleared whenever an asset stops being checked out
CHECKOUT_FIELDS = (
    'assigned_to',
    'checked_out_to',
    'checked_out_at',
    'expected_return_date',
    'check_out_notes',
)


class Asset(TenantOwnedBase):
    __tablename__ = 'itam_assets'
    __table_args__ = (
        db.UniqueConstraint('tenant_id', 'asset_tag', name='uq_itam_assets_tenant_tag'),
    )

    asset_id = db.Column(db.String(100), nullable=False, index=True)
    asset_tag = db.Column(db.String(100), nullable=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    serial_number = db.Column(db.String(100), nullable=True)
    model = db.Column(db.String(100), nullable=True)
    status = db.Column(db.String(30), default='available', nullable=False)
    purchase_price = db.Column(db.Numeric(12, 2), nullable=True)
    purchase_date = db.Column(db.Date, nullable=True)
    warranty_expiry = db.Column(db.Date, nullable=True)

    category_id = db.Column(db.Integer, db.ForeignKey('itam_categories.id'), nullable=True)
    location_id = db.Column(db.Integer, db.ForeignKey('itam_locations.id'), nullable=True)
    department_id = db.Column(db.Integer, db.ForeignKey('itam_departments.id'), nullable=True)
    make_id = db.Column(db.Integer, db.ForeignKey('itam_makes.id'), nullable=True)
    vendor_id = db.Column(db.Integer, db.ForeignKey('itam_vendors.id'), nullable=True)

    # Checkout state
    assigned_to = db.Column(db.String(200), nullable=True)  # display name of the holder
    checked_out_to = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    checked_out_at = db.Column(db.DateTime, nullable=True)
    expected_return_date = db.Column(db.DateTime, nullable=True)
    check_out_notes = db.Column(db.Text, nullable=True)

    custom_fields = db.Column(db.JSON, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Relationships
    category = db.relationship('Category')
    location = db.relationship('Location')
    department = db.relationship('Department')
    make = db.relationship('Make')
    vendor = db.relationship('Vendor')
    holder = db.relationship('User', foreign_keys=[checked_out_to])

    @property
    def custom(self):
        return self.custom_fields or {}

    @property
    def display_tag(self):
        return self.asset_tag or self.name or 'Asset'

    def clear_checkout(self):
        for field in CHECKOUT_FIELDS:
            setattr(self, field, None)

    def __repr__(self):
        return f'<Asset {self.asset_tag or self.asset_id} {self.name}>'
