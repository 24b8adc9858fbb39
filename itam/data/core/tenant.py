from itam import db
from datetime import datetime
from itam.buisness.core.data_insertion_mixin import DataInsertionMixin


class Tenant(DataInsertionMixin, db.Model):
    __tablename__ = 'tenants'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<Tenant {self.name}>'
