from itam import db
from datetime import datetime
from itam.buisness.core.data_insertion_mixin import DataInsertionMixin


class AssetAssignment(DataInsertionMixin, db.Model):
    __tablename__ = 'itam_asset_assignments'

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenants.id'), nullable=False, index=True)
    organisation_id = db.Column(db.Integer, nullable=True)
    asset_id = db.Column(db.Integer, db.ForeignKey('itam_assets.id'), nullable=False, index=True)
    assigned_to = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    assigned_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    assigned_at = db.Column(db.DateTime, default=datetime.utcnow)
    returned_at = db.Column(db.DateTime, nullable=True)  # NULL while the assignment is open
    notes = db.Column(db.Text, nullable=True)

    assignee = db.relationship('User', foreign_keys=[assigned_to])

    @property
    def is_open(self):
        return self.returned_at is None

    def __repr__(self):
        return f'<AssetAssignment asset={self.asset_id} user={self.assigned_to}>'
