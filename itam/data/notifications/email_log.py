from itam import db
from datetime import datetime
from itam.buisness.core.data_insertion_mixin import DataInsertionMixin


class EmailLog(DataInsertionMixin, db.Model):
    __tablename__ = 'itam_email_logs'

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenants.id'), nullable=True, index=True)
    template_id = db.Column(db.String(100), nullable=True)
    recipient_email = db.Column(db.String(255), nullable=False)
    subject = db.Column(db.String(500), nullable=True)
    status = db.Column(db.String(20), nullable=False)  # sent, failed
    error_message = db.Column(db.Text, nullable=True)
    asset_id = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<EmailLog {self.template_id} -> {self.recipient_email} ({self.status})>'
