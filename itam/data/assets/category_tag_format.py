from itam.data.core.tenant_owned_base import TenantOwnedBase
from itam import db


class CategoryTagFormat(TenantOwnedBase):
    """Prefix and zero padding used when generating asset tags for a category"""
    __tablename__ = 'itam_category_tag_formats'
    __table_args__ = (
        db.UniqueConstraint('tenant_id', 'category_id', name='uq_itam_tag_format_category'),
    )

    category_id = db.Column(db.Integer, db.ForeignKey('itam_categories.id'), nullable=False)
    prefix = db.Column(db.String(20), nullable=False)
    zero_padding = db.Column(db.Integer, default=2)

    category = db.relationship('Category')

    def __repr__(self):
        return f'<CategoryTagFormat {self.prefix} ({self.zero_padding})>'
