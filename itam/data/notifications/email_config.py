from itam import db
from datetime import datetime
from itam.buisness.core.data_insertion_mixin import DataInsertionMixin


class EmailConfig(DataInsertionMixin, db.Model):
    """
    Tenant email configuration.

    config_type 'template': config_key is the template id, config_value holds
    {subject, body, enabled}.
    config_type 'settings': config_key 'global_settings', config_value holds
    {senderName, sendCopyToAdmins}.
    """
    __tablename__ = 'itam_email_config'
    __table_args__ = (
        db.UniqueConstraint('tenant_id', 'config_type', 'config_key', name='uq_itam_email_config_key'),
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenants.id'), nullable=False, index=True)
    config_type = db.Column(db.String(20), nullable=False)
    config_key = db.Column(db.String(100), nullable=False)
    config_value = db.Column(db.JSON, nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<EmailConfig {self.config_type}:{self.config_key}>'
