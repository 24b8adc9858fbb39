from itam.data.core.tenant_owned_base import TenantOwnedBase
from itam import db

RESERVATION_STATUSES = ('pending', 'confirmed', 'completed', 'cancelled')


class AssetReservation(TenantOwnedBase):
    __tablename__ = 'itam_asset_reservations'

    asset_id = db.Column(db.Integer, db.ForeignKey('itam_assets.id'), nullable=False, index=True)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    reserved_for_name = db.Column(db.String(200), nullable=True)
    purpose = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    reserved_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    status = db.Column(db.String(20), default='pending')

    def __repr__(self):
        return f'<AssetReservation asset={self.asset_id} {self.start_date}..{self.end_date}>'
