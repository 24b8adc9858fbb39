from itam.data.core.tenant_owned_base import TenantOwnedBase
from itam import db

REPAIR_STATUSES = ('open', 'in_progress', 'completed', 'cancelled')


class Repair(TenantOwnedBase):
    __tablename__ = 'itam_repairs'

    asset_id = db.Column(db.Integer, db.ForeignKey('itam_assets.id'), nullable=False, index=True)
    repair_number = db.Column(db.String(30), nullable=False)  # RPR-YYYYMMDD-NNNN
    status = db.Column(db.String(20), default='open')
    issue_description = db.Column(db.Text, nullable=False)
    cost = db.Column(db.Numeric(12, 2), nullable=True)
    started_at = db.Column(db.DateTime, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    asset = db.relationship('Asset')

    def __repr__(self):
        return f'<Repair {self.repair_number}>'
