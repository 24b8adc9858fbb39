"""
Filesystem object storage with named buckets

Keys are '/'-separated paths inside a bucket, e.g. '<asset_id>/<ts>_<name>'.
Buckets are directories under the storage root; a bucket that was never
created is reported as missing rather than created on the fly.
"""

from pathlib import Path
from typing import List, Optional
from werkzeug.utils import secure_filename
from itam.logger import get_logger

logger = get_logger("itam.services.storage.bucket_storage")

PHOTOS_BUCKET = 'asset-photos'
DOCUMENTS_BUCKET = 'asset-documents'
DEFAULT_BUCKETS = (PHOTOS_BUCKET, DOCUMENTS_BUCKET)


class StorageError(Exception):
    pass


class BucketNotFoundError(StorageError):
    def __init__(self, bucket):
        super().__init__(f'Bucket not found: {bucket}')
        self.bucket = bucket


class StoredObject:
    """Listing entry for an object inside a bucket"""

    def __init__(self, name: str, size: int, modified: float):
        self.name = name
        self.size = size
        self.modified = modified

    def __repr__(self):
        return f'<StoredObject {self.name} ({self.size} bytes)>'


def safe_key_part(filename: str) -> str:
    return secure_filename(filename or '') or 'file'


class LocalBucketStorage:

    def __init__(self, root, buckets=DEFAULT_BUCKETS, create_buckets: bool = True):
        self.root = Path(root)
        if create_buckets:
            for bucket in buckets:
                (self.root / bucket).mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_app(cls, app) -> 'LocalBucketStorage':
        return cls(app.config['STORAGE_ROOT'])

    def _bucket_dir(self, bucket: str) -> Path:
        path = self.root / bucket
        if not path.is_dir():
            raise BucketNotFoundError(bucket)
        return path

    def _object_path(self, bucket: str, key: str) -> Path:
        base = self._bucket_dir(bucket).resolve()
        path = (base / key).resolve()
        if base not in path.parents:
            raise StorageError(f'Invalid object key: {key}')
        return path

    def upload(self, bucket: str, key: str, data: bytes) -> str:
        path = self._object_path(bucket, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'wb') as f:
            f.write(data)
        logger.info(f"Stored {len(data)} bytes at {bucket}/{key}")
        return key

    def download(self, bucket: str, key: str) -> bytes:
        path = self._object_path(bucket, key)
        if not path.is_file():
            raise StorageError(f'Object not found: {bucket}/{key}')
        with open(path, 'rb') as f:
            return f.read()

    def remove(self, bucket: str, keys: List[str]) -> int:
        """Delete objects; missing keys are skipped. Returns how many were removed."""
        removed = 0
        for key in keys:
            path = self._object_path(bucket, key)
            if path.is_file():
                path.unlink()
                removed += 1
                # Drop the per-asset folder once it is empty
                if path.parent != self._bucket_dir(bucket).resolve() and not any(path.parent.iterdir()):
                    path.parent.rmdir()
        logger.info(f"Removed {removed} object(s) from {bucket}")
        return removed

    def list(self, bucket: str, prefix: str = '') -> List[StoredObject]:
        """Objects directly under prefix, newest first"""
        base = self._bucket_dir(bucket)
        folder = self._object_path(bucket, prefix) if prefix else base.resolve()
        if not folder.is_dir():
            return []
        objects = []
        for path in folder.iterdir():
            if path.is_file():
                stat = path.stat()
                objects.append(StoredObject(path.name, stat.st_size, stat.st_mtime))
        objects.sort(key=lambda obj: obj.modified, reverse=True)
        return objects

    def exists(self, bucket: str, key: str) -> bool:
        return self._object_path(bucket, key).is_file()


def get_storage(app=None) -> LocalBucketStorage:
    """Storage for the current app, cached in app.extensions"""
    if app is None:
        from flask import current_app
        app = current_app._get_current_object()
    storage: Optional[LocalBucketStorage] = app.extensions.get('itam_storage')
    if storage is None:
        storage = LocalBucketStorage.from_app(app)
        app.extensions['itam_storage'] = storage
    return storage
