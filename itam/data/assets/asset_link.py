from itam.data.core.tenant_owned_base import TenantOwnedBase
from itam import db

LINK_TYPES = ('parent', 'child', 'related')


class AssetLink(TenantOwnedBase):
    __tablename__ = 'itam_asset_links'
    __table_args__ = (
        db.UniqueConstraint('asset_id', 'linked_asset_id', name='uq_itam_asset_links_pair'),
    )

    asset_id = db.Column(db.Integer, db.ForeignKey('itam_assets.id'), nullable=False, index=True)
    linked_asset_id = db.Column(db.Integer, db.ForeignKey('itam_assets.id'), nullable=False)
    link_type = db.Column(db.String(20), default='related')
    notes = db.Column(db.Text, nullable=True)

    linked_asset = db.relationship('Asset', foreign_keys=[linked_asset_id])

    def __repr__(self):
        return f'<AssetLink {self.asset_id} -> {self.linked_asset_id} ({self.link_type})>'
