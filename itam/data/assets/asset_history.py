from itam import db
from datetime import datetime
from itam.buisness.core.data_insertion_mixin import DataInsertionMixin


class AssetHistory(DataInsertionMixin, db.Model):
    """Append-only audit trail of asset actions"""
    __tablename__ = 'itam_asset_history'

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenants.id'), nullable=False, index=True)
    organisation_id = db.Column(db.Integer, nullable=True)
    asset_id = db.Column(db.Integer, db.ForeignKey('itam_assets.id'), nullable=False, index=True)
    asset_tag = db.Column(db.String(100), nullable=True)
    action = db.Column(db.String(100), nullable=False)
    old_value = db.Column(db.Text, nullable=True)
    new_value = db.Column(db.Text, nullable=True)
    details = db.Column(db.JSON, nullable=True)
    performed_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    performer = db.relationship('User', foreign_keys=[performed_by])

    def __repr__(self):
        return f'<AssetHistory {self.action} asset={self.asset_id}>'
