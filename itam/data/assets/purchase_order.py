from itam.data.core.tenant_owned_base import TenantOwnedBase
from itam import db


class PurchaseOrder(TenantOwnedBase):
    __tablename__ = 'itam_purchase_orders'

    vendor_id = db.Column(db.Integer, db.ForeignKey('itam_vendors.id'), nullable=True)
    po_number = db.Column(db.String(50), nullable=False)
    status = db.Column(db.String(20), default='draft')
    total_amount = db.Column(db.Numeric(12, 2), nullable=True)
    order_date = db.Column(db.Date, nullable=True)

    vendor = db.relationship('Vendor', back_populates='purchase_orders')

    def __repr__(self):
        return f'<PurchaseOrder {self.po_number}>'
