"""
Photos and documents tabs

Files live in bucket storage; documents also get a row in
itam_asset_documents. Photos are listed straight from the bucket by the
asset id prefix.
"""

import time
from typing import List, Optional, Tuple
from itam import db
from itam.data.assets.document import AssetDocument
from itam.buisness.assets.asset_context import AssetContext
from itam.services.storage.bucket_storage import (
    BucketNotFoundError, DOCUMENTS_BUCKET, PHOTOS_BUCKET, StorageError, StoredObject, safe_key_part,
)
from itam.logger import get_logger

logger = get_logger("itam.buisness.assets.asset_files")

MAX_PHOTO_BYTES = 5 * 1024 * 1024
DOCUMENT_BUCKET_MISSING = "Document storage not configured. Contact admin to create 'asset-documents' bucket."
PHOTO_BUCKET_MISSING = "Photo storage not configured. Contact admin to create 'asset-photos' bucket."


def format_file_size(size: Optional[int]) -> str:
    if not size:
        return '—'
    if size < 1024:
        return f'{size} B'
    if size < 1024 * 1024:
        return f'{size / 1024:.1f} KB'
    return f'{size / (1024 * 1024):.1f} MB'


def object_key(asset_id: int, filename: str, timestamp_ms: Optional[int] = None) -> str:
    """'<asset_id>/<ms>_<filename>'"""
    timestamp_ms = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    return f'{asset_id}/{timestamp_ms}_{safe_key_part(filename)}'


class DocumentsTab:

    def __init__(self, context: AssetContext, storage, user_id: Optional[int] = None):
        self.context = context
        self.storage = storage
        self.user_id = user_id

    def documents(self) -> List[AssetDocument]:
        return AssetDocument.query.filter_by(
            asset_id=self.context.asset_id, tenant_id=self.context.tenant_id,
        ).order_by(AssetDocument.created_at.desc()).all()

    def _get(self, document_id: int) -> AssetDocument:
        return AssetDocument.query.filter_by(
            id=document_id, asset_id=self.context.asset_id, tenant_id=self.context.tenant_id,
        ).first_or_404()

    def upload(self, filename: str, data: bytes, mime_type: Optional[str] = None) -> AssetDocument:
        """
        Store the file then insert its row.

        Raises:
            ValueError: No file, or the documents bucket does not exist
        """
        if not filename or data is None:
            raise ValueError('Please select a file to upload')
        key = object_key(self.context.asset_id, filename)
        try:
            self.storage.upload(DOCUMENTS_BUCKET, key, data)
        except BucketNotFoundError:
            raise ValueError(DOCUMENT_BUCKET_MISSING)

        document = AssetDocument(
            tenant_id=self.context.tenant_id,
            organisation_id=self.context.asset.organisation_id,
            asset_id=self.context.asset_id,
            name=filename,
            file_path=key,
            file_size=len(data),
            mime_type=mime_type,
            uploaded_by=self.user_id,
            created_by_id=self.user_id,
        )
        db.session.add(document)
        db.session.commit()
        logger.info(f"Document '{filename}' uploaded for asset {self.context.asset_id}")
        return document

    def download(self, document_id: int) -> Tuple[AssetDocument, bytes]:
        document = self._get(document_id)
        return document, self.storage.download(DOCUMENTS_BUCKET, document.file_path)

    def delete(self, document_id: int) -> None:
        """Remove the stored file if possible, then the row"""
        document = self._get(document_id)
        try:
            self.storage.remove(DOCUMENTS_BUCKET, [document.file_path])
        except StorageError as e:
            logger.warning(f"Failed to delete file from storage for document {document.id}: {e}")
        db.session.delete(document)
        db.session.commit()
        logger.info(f"Document {document_id} deleted")


class PhotosTab:

    def __init__(self, context: AssetContext, storage, max_bytes: int = MAX_PHOTO_BYTES):
        self.context = context
        self.storage = storage
        self.max_bytes = max_bytes

    @property
    def prefix(self) -> str:
        return str(self.context.asset_id)

    def photos(self) -> List[StoredObject]:
        try:
            return self.storage.list(PHOTOS_BUCKET, self.prefix)
        except BucketNotFoundError:
            logger.warning(f"Bucket {PHOTOS_BUCKET} missing while listing photos")
            return []

    def upload(self, filename: str, data: bytes, mime_type: Optional[str]) -> str:
        if not mime_type or not mime_type.startswith('image/'):
            raise ValueError('Please upload an image file')
        if len(data) > self.max_bytes:
            raise ValueError('Image must be less than 5MB')
        key = object_key(self.context.asset_id, filename)
        try:
            self.storage.upload(PHOTOS_BUCKET, key, data)
        except BucketNotFoundError:
            raise ValueError(PHOTO_BUCKET_MISSING)
        logger.info(f"Photo '{filename}' added for asset {self.context.asset_id}")
        return key

    def key_for(self, name: str) -> str:
        return f'{self.prefix}/{safe_key_part(name)}'

    def read(self, name: str) -> bytes:
        return self.storage.download(PHOTOS_BUCKET, self.key_for(name))

    def delete(self, name: str) -> int:
        return self.storage.remove(PHOTOS_BUCKET, [self.key_for(name)])
