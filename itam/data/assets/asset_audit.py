from itam.data.core.tenant_owned_base import TenantOwnedBase
from itam import db
from datetime import datetime

CONDITIONS = ('excellent', 'good', 'fair', 'poor', 'damaged')


class AssetAudit(TenantOwnedBase):
    __tablename__ = 'itam_asset_audits'

    asset_id = db.Column(db.Integer, db.ForeignKey('itam_assets.id'), nullable=False, index=True)
    audited_at = db.Column(db.DateTime, default=datetime.utcnow)
    condition = db.Column(db.String(20), nullable=True)
    location_verified = db.Column(db.Boolean, default=False)
    notes = db.Column(db.Text, nullable=True)
    audited_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)

    auditor = db.relationship('User', foreign_keys=[audited_by])

    def __repr__(self):
        return f'<AssetAudit asset={self.asset_id} {self.audited_at}>'
