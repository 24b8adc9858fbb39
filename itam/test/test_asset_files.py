"""
Bucket storage with the photos and documents tabs on top of it
"""
import pytest
from itam.buisness.assets.asset_files import (
    DOCUMENT_BUCKET_MISSING, DocumentsTab, PhotosTab, format_file_size, object_key,
)
from itam.services.storage.bucket_storage import (
    BucketNotFoundError, DOCUMENTS_BUCKET, LocalBucketStorage, PHOTOS_BUCKET, StorageError,
)


@pytest.fixture
def storage(tmp_path):
    return LocalBucketStorage(tmp_path / 'buckets')


def test_format_file_size():
    assert format_file_size(None) == '—'
    assert format_file_size(512) == '512 B'
    assert format_file_size(2048) == '2.0 KB'
    assert format_file_size(3 * 1024 * 1024) == '3.0 MB'


def test_object_key_uses_asset_prefix_and_safe_name():
    assert object_key(7, '../../etc/passwd', 1700000000000) == '7/1700000000000_etc_passwd'
    assert object_key(7, 'Invoice March.pdf', 5) == '7/5_Invoice_March.pdf'


def test_storage_round_trip_and_listing(storage):
    storage.upload(PHOTOS_BUCKET, '3/a.png', b'one')
    storage.upload(PHOTOS_BUCKET, '3/b.png', b'three')
    assert storage.download(PHOTOS_BUCKET, '3/a.png') == b'one'
    assert sorted(obj.name for obj in storage.list(PHOTOS_BUCKET, '3')) == ['a.png', 'b.png']
    assert storage.list(PHOTOS_BUCKET, '4') == []

    assert storage.remove(PHOTOS_BUCKET, ['3/a.png', '3/missing.png']) == 1
    assert not storage.exists(PHOTOS_BUCKET, '3/a.png')


def test_storage_rejects_path_traversal_and_missing_buckets(storage, tmp_path):
    with pytest.raises(StorageError, match='Invalid object key'):
        storage.upload(PHOTOS_BUCKET, '../escape.txt', b'x')
    with pytest.raises(StorageError):
        storage.download(PHOTOS_BUCKET, '1/nothing.png')

    bare = LocalBucketStorage(tmp_path / 'empty', create_buckets=False)
    with pytest.raises(BucketNotFoundError, match='Bucket not found: asset-documents'):
        bare.upload(DOCUMENTS_BUCKET, '1/x.pdf', b'x')


def test_documents_tab(seed, storage):
    tab = DocumentsTab(seed['laptop'], storage, user_id=seed['admin'].id)
    document = tab.upload('warranty.pdf', b'%PDF-1.4', 'application/pdf')

    assert document.file_size == 8
    assert document.file_path.startswith(f"{seed['laptop'].asset_id}/")
    assert tab.documents() == [document]

    found, data = tab.download(document.id)
    assert found.name == 'warranty.pdf'
    assert data == b'%PDF-1.4'

    tab.delete(document.id)
    assert tab.documents() == []
    assert not storage.exists(DOCUMENTS_BUCKET, document.file_path)


def test_document_row_removed_even_if_file_is_gone(seed, storage):
    tab = DocumentsTab(seed['laptop'], storage)
    document = tab.upload('notes.txt', b'hello', 'text/plain')
    storage.remove(DOCUMENTS_BUCKET, [document.file_path])

    tab.delete(document.id)
    assert tab.documents() == []


def test_document_upload_errors(seed, tmp_path):
    bare = LocalBucketStorage(tmp_path / 'empty', create_buckets=False)
    tab = DocumentsTab(seed['laptop'], bare)
    with pytest.raises(ValueError, match='Please select a file to upload'):
        tab.upload('', b'')
    with pytest.raises(ValueError) as excinfo:
        tab.upload('a.pdf', b'x')
    assert str(excinfo.value) == DOCUMENT_BUCKET_MISSING


def test_photos_tab(seed, storage):
    tab = PhotosTab(seed['laptop'], storage, max_bytes=10)
    key = tab.upload('front.jpg', b'jpegdata', 'image/jpeg')
    name = key.split('/', 1)[1]

    assert [photo.name for photo in tab.photos()] == [name]
    assert tab.read(name) == b'jpegdata'
    assert tab.delete(name) == 1
    assert tab.photos() == []


def test_photo_validation(seed, storage, tmp_path):
    tab = PhotosTab(seed['laptop'], storage, max_bytes=10)
    with pytest.raises(ValueError, match='Please upload an image file'):
        tab.upload('doc.pdf', b'x', 'application/pdf')
    with pytest.raises(ValueError, match='Image must be less than 5MB'):
        tab.upload('big.png', b'x' * 11, 'image/png')

    bare = PhotosTab(seed['laptop'], LocalBucketStorage(tmp_path / 'empty', create_buckets=False))
    assert bare.photos() == [], "A missing bucket lists as empty"
