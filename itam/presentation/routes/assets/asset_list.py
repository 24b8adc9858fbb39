"""
Asset list routes
List with filters and pagination, CSV export, bulk actions and tag generation
"""

from flask import render_template, redirect, url_for, flash, request, jsonify, Response
from flask_login import login_required, current_user
from itam.buisness.assets import asset_actions, asset_status
from itam.buisness.assets.asset_tag_generator import next_asset_tag
from itam.buisness.assets.column_settings import ColumnSettings, visible_columns
from itam.buisness.assets.csv_export import CSV_MIMETYPE, build_csv, export_filename
from itam.data.assets.asset import Asset
from itam.services.assets.asset_list_service import AssetListService, DEFAULT_PAGE_SIZE
from itam.presentation.routes.route_helpers import json_error, tenant_id
from itam import db
from itam.logger import get_logger
from . import bp

logger = get_logger("itam.routes.assets.list")


@bp.route('/allassets')
@login_required
def list_assets():
    """List active assets with search, filters, sorting and pagination"""
    page = request.args.get('page', 1, type=int)
    per_page = request.args.get('per_page', DEFAULT_PAGE_SIZE, type=int)

    assets, filter_options, current_filters = AssetListService.get_list_data(
        request=request,
        tenant_id=tenant_id(),
        page=page,
        per_page=per_page,
    )
    column_settings = ColumnSettings(tenant_id(), current_user.id)
    columns = column_settings.columns()

    logger.info(f"Assets list returned {assets.total} assets (page {assets.page})")

    return render_template(
        'assets/list.html',
        assets=assets,
        columns=visible_columns(columns),
        widths=column_settings.widths(),
        statuses=filter_options['statuses'],
        categories=filter_options['categories'],
        page_sizes=filter_options['page_sizes'],
        current_filters=current_filters,
        status_label=asset_status.status_label,
        status_badge=asset_status.status_badge,
    )


@bp.route('/export.csv')
@login_required
def export_csv():
    """Export the list page currently shown, with the user's visible columns"""
    assets = AssetListService.get_page_assets(
        request,
        tenant_id(),
        page=request.args.get('page', 1, type=int),
        per_page=request.args.get('per_page', DEFAULT_PAGE_SIZE, type=int),
    )
    columns = ColumnSettings(tenant_id(), current_user.id).columns()
    content = build_csv(assets, columns)
    filename = export_filename()
    logger.info(f"User {current_user.username} exported {len(assets)} assets")
    return Response(
        content,
        mimetype=CSV_MIMETYPE,
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )


@bp.route('/bulk', methods=['POST'])
@login_required
def bulk():
    """Bulk status change or delete for the selected assets"""
    action = request.form.get('action')
    asset_ids = request.form.getlist('asset_ids', type=int)
    try:
        if action == 'delete':
            count = asset_actions.bulk_delete(tenant_id(), asset_ids, performed_by=current_user.id)
            flash(f'{count} asset(s) deleted', 'success')
        elif action in asset_status.STATUSES:
            count = asset_actions.bulk_update_status(tenant_id(), asset_ids, action, performed_by=current_user.id)
            flash(f'{count} asset(s) updated to {asset_status.status_label(action)}', 'success')
        else:
            raise ValueError('Please select a bulk action')
        logger.info(f"User {current_user.username} ran bulk '{action}' on {len(asset_ids)} asset(s)")
    except ValueError as e:
        flash(str(e), 'error')
        logger.warning(f"Bulk action failed: {e}")
    except Exception as e:
        flash('Error running bulk action', 'error')
        logger.error(f"Unexpected error in bulk action: {e}")
        db.session.rollback()
    return redirect(url_for('assets.list_assets'))


@bp.route('/next-tag')
@login_required
def next_tag():
    """Generate the next asset tag for a category (JSON)"""
    category_id = request.args.get('category_id', type=int)
    try:
        tag = next_asset_tag(tenant_id(), category_id)
    except ValueError as e:
        return json_error(str(e))

    taken = Asset.query.filter_by(tenant_id=tenant_id(), asset_tag=tag).first()
    if taken is not None:
        return json_error(f'Generated ID "{tag}" already exists. Please enter manually or retry.', 409)
    return jsonify({'success': True, 'assetId': tag})
