from itam import db
from datetime import datetime
from sqlalchemy.orm import declared_attr
from itam.buisness.core.data_insertion_mixin import DataInsertionMixin


class TenantOwnedBase(db.Model, DataInsertionMixin):
    """Abstract base class for all tenant-owned entities with audit trail"""

    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenants.id'), nullable=False, index=True)
    organisation_id = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    updated_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)

    @declared_attr
    def created_by(cls):
        return db.relationship('User', foreign_keys=[cls.created_by_id])

    @declared_attr
    def updated_by(cls):
        return db.relationship('User', foreign_keys=[cls.updated_by_id])

    @classmethod
    def for_tenant(cls, tenant_id):
        """Query restricted to one tenant's rows"""
        return cls.query.filter(cls.tenant_id == tenant_id)
