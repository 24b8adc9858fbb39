from itam import db
from datetime import datetime
from itam.buisness.core.data_insertion_mixin import DataInsertionMixin


class Setting(DataInsertionMixin, db.Model):
    """
    Key-value JSON preferences.

    user_id set: a user's own preference (column visibility, widths).
    user_id NULL: a tenant-wide setting.
    """
    __tablename__ = 'itam_settings'
    __table_args__ = (
        db.UniqueConstraint('tenant_id', 'user_id', 'key', name='uq_itam_settings_scope_key'),
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenants.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    key = db.Column(db.String(100), nullable=False)
    value = db.Column(db.JSON, nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        scope = f'user {self.user_id}' if self.user_id else 'tenant'
        return f'<Setting {self.key} ({scope})>'
