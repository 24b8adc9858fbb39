"""
Detail tab routes: maintenance, reservations, documents, photos, linking, audit
"""

import io
from flask import redirect, url_for, flash, request, send_file, abort
from flask_login import login_required, current_user
from itam.buisness.assets.asset_files import DocumentsTab, PhotosTab
from itam.buisness.assets.asset_tabs import AuditTab, LinksTab, MaintenanceTab, ReservationsTab
from itam.services.storage.bucket_storage import StorageError
from itam.presentation.routes.route_helpers import load_context, storage
from itam import db
from itam.logger import get_logger
from . import bp

logger = get_logger("itam.routes.assets.tabs")


def _back(asset_id, tab):
    return redirect(url_for('assets.detail', asset_id=asset_id, tab=tab))


def _run(asset_id, tab, failure, operation, success):
    """Run a tab operation with the usual flash/rollback handling"""
    try:
        operation()
        flash(success, 'success')
    except ValueError as e:
        flash(str(e), 'error')
        logger.warning(f"{tab} operation on asset {asset_id} rejected: {e}")
    except Exception as e:
        flash(failure, 'error')
        logger.error(f"Unexpected error in {tab} tab for asset {asset_id}: {e}")
        db.session.rollback()
    return _back(asset_id, tab)


# Maintenance

@bp.route('/<int:asset_id>/maintenance', methods=['POST'])
@login_required
def create_maintenance(asset_id):
    tab = MaintenanceTab(load_context(asset_id), current_user.id)
    return _run(asset_id, 'maintenance', 'Failed to create schedule', lambda: tab.create(
        request.form.get('title'),
        description=request.form.get('description'),
        frequency=request.form.get('frequency', 'monthly'),
        next_due_date=request.form.get('next_due_date'),
    ), 'Maintenance schedule created')


@bp.route('/<int:asset_id>/maintenance/<int:schedule_id>/complete', methods=['POST'])
@login_required
def complete_maintenance(asset_id, schedule_id):
    tab = MaintenanceTab(load_context(asset_id), current_user.id)
    return _run(asset_id, 'maintenance', 'Failed to update schedule',
                lambda: tab.complete(schedule_id), 'Maintenance marked as complete')


@bp.route('/<int:asset_id>/maintenance/<int:schedule_id>/delete', methods=['POST'])
@login_required
def delete_maintenance(asset_id, schedule_id):
    tab = MaintenanceTab(load_context(asset_id), current_user.id)
    return _run(asset_id, 'maintenance', 'Failed to delete schedule',
                lambda: tab.delete(schedule_id), 'Maintenance schedule deleted')


# Reservations

@bp.route('/<int:asset_id>/reservations', methods=['POST'])
@login_required
def create_reservation(asset_id):
    tab = ReservationsTab(load_context(asset_id), current_user.id)
    return _run(asset_id, 'reserve', 'Failed to create reservation', lambda: tab.create(
        request.form.get('start_date'),
        request.form.get('end_date'),
        reserved_for_name=request.form.get('reserved_for_name'),
        purpose=request.form.get('purpose'),
        notes=request.form.get('notes'),
    ), 'Reservation created successfully')


@bp.route('/<int:asset_id>/reservations/<int:reservation_id>/cancel', methods=['POST'])
@login_required
def cancel_reservation(asset_id, reservation_id):
    tab = ReservationsTab(load_context(asset_id), current_user.id)
    return _run(asset_id, 'reserve', 'Failed to cancel reservation',
                lambda: tab.cancel(reservation_id), 'Reservation cancelled')


# Documents

@bp.route('/<int:asset_id>/documents', methods=['POST'])
@login_required
def upload_document(asset_id):
    tab = DocumentsTab(load_context(asset_id), storage(), current_user.id)
    upload = request.files.get('file')

    def operation():
        if upload is None or not upload.filename:
            raise ValueError('Please select a file to upload')
        tab.upload(upload.filename, upload.read(), upload.mimetype)

    return _run(asset_id, 'docs', 'Failed to upload document', operation, 'Document uploaded successfully')


@bp.route('/<int:asset_id>/documents/<int:document_id>/download')
@login_required
def download_document(asset_id, document_id):
    tab = DocumentsTab(load_context(asset_id), storage(), current_user.id)
    try:
        document, data = tab.download(document_id)
    except StorageError as e:
        flash('Failed to download document', 'error')
        logger.warning(f"Document {document_id} download failed: {e}")
        return _back(asset_id, 'docs')
    return send_file(
        io.BytesIO(data),
        as_attachment=True,
        download_name=document.name,
        mimetype=document.mime_type or 'application/octet-stream',
    )


@bp.route('/<int:asset_id>/documents/<int:document_id>/delete', methods=['POST'])
@login_required
def delete_document(asset_id, document_id):
    tab = DocumentsTab(load_context(asset_id), storage(), current_user.id)
    return _run(asset_id, 'docs', 'Failed to delete document',
                lambda: tab.delete(document_id), 'Document deleted')


# Photos

@bp.route('/<int:asset_id>/photos', methods=['POST'])
@login_required
def upload_photo(asset_id):
    tab = PhotosTab(load_context(asset_id), storage())
    upload = request.files.get('photo')

    def operation():
        if upload is None or not upload.filename:
            raise ValueError('Please upload an image file')
        tab.upload(upload.filename, upload.read(), upload.mimetype)

    return _run(asset_id, 'photos', 'Failed to upload photo', operation, 'Photo added')


@bp.route('/<int:asset_id>/photos/<name>')
@login_required
def view_photo(asset_id, name):
    tab = PhotosTab(load_context(asset_id), storage())
    try:
        data = tab.read(name)
    except StorageError:
        abort(404)
    return send_file(io.BytesIO(data), download_name=name, mimetype=None)


@bp.route('/<int:asset_id>/photos/<name>/delete', methods=['POST'])
@login_required
def delete_photo(asset_id, name):
    tab = PhotosTab(load_context(asset_id), storage())
    return _run(asset_id, 'photos', 'Failed to remove photo', lambda: tab.delete(name), 'Photo removed')


# Linking

@bp.route('/<int:asset_id>/links', methods=['POST'])
@login_required
def link_asset(asset_id):
    tab = LinksTab(load_context(asset_id), current_user.id)
    return _run(asset_id, 'linking', 'Failed to link asset', lambda: tab.link(
        request.form.get('linked_asset_id'),
        link_type=request.form.get('link_type', 'related'),
        notes=request.form.get('notes'),
    ), 'Asset linked')


@bp.route('/<int:asset_id>/links/<int:link_id>/delete', methods=['POST'])
@login_required
def unlink_asset(asset_id, link_id):
    tab = LinksTab(load_context(asset_id), current_user.id)
    return _run(asset_id, 'linking', 'Failed to unlink asset', lambda: tab.unlink(link_id), 'Asset unlinked')


# Audit

@bp.route('/<int:asset_id>/audits', methods=['POST'])
@login_required
def record_audit(asset_id):
    tab = AuditTab(load_context(asset_id), current_user.id)
    return _run(asset_id, 'audit', 'Failed to record audit', lambda: tab.record(
        condition=request.form.get('condition'),
        location_verified=bool(request.form.get('location_verified')),
        notes=request.form.get('notes'),
    ), 'Audit recorded')
