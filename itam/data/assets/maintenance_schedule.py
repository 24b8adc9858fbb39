from itam.data.core.tenant_owned_base import TenantOwnedBase
from itam import db

FREQUENCIES = ('daily', 'weekly', 'monthly', 'quarterly', 'yearly')


class MaintenanceSchedule(TenantOwnedBase):
    __tablename__ = 'itam_maintenance_schedules'

    asset_id = db.Column(db.Integer, db.ForeignKey('itam_assets.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    frequency = db.Column(db.String(20), nullable=True, default='monthly')
    next_due_date = db.Column(db.DateTime, nullable=True)
    last_completed_date = db.Column(db.DateTime, nullable=True)
    is_active = db.Column(db.Boolean, default=True)

    def __repr__(self):
        return f'<MaintenanceSchedule {self.title} ({self.frequency})>'
