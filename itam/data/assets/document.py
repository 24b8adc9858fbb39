from itam.data.core.tenant_owned_base import TenantOwnedBase
from itam import db


class AssetDocument(TenantOwnedBase):
    __tablename__ = 'itam_asset_documents'

    asset_id = db.Column(db.Integer, db.ForeignKey('itam_assets.id'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    file_path = db.Column(db.String(500), nullable=False)  # key inside the asset-documents bucket
    file_size = db.Column(db.Integer, nullable=True)
    mime_type = db.Column(db.String(100), nullable=True)
    uploaded_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)

    def __repr__(self):
        return f'<AssetDocument {self.name}>'
