"""
Asset add / detail / edit / delete routes
"""

from flask import render_template, redirect, url_for, flash, request
from flask_login import login_required, current_user
from itam.buisness.assets.asset_context import AssetContext
from itam.services.assets.asset_detail_service import AssetDetailService
from itam.services.assets.asset_list_service import AssetListService
from itam.presentation.routes.route_helpers import load_context, storage, tenant_id
from itam.utils.logging_sanitizer import sanitize_form_data
from itam import db
from itam.logger import get_logger
from . import bp

logger = get_logger("itam.routes.assets.detail")


def _form_data():
    data = request.form.to_dict()
    data['classification'] = request.form.getlist('classification')
    return data


@bp.route('/add', methods=['GET', 'POST'])
@login_required
def add():
    """Create a new asset"""
    form_data = {}
    if request.method == 'POST':
        form_data = _form_data()
        logger.debug(f"Asset create form: {sanitize_form_data(request.form)}")
        try:
            context = AssetContext.create(
                tenant_id(),
                form_data,
                created_by_id=current_user.id,
            )
            flash('Asset created successfully', 'success')
            logger.info(f"User {current_user.username} created asset {context.asset.asset_tag} (ID: {context.asset_id})")
            return redirect(url_for('assets.detail', asset_id=context.asset_id))
        except ValueError as e:
            flash(str(e), 'error')
            logger.warning(f"Asset creation failed: {e}")
        except Exception as e:
            flash('Failed to create asset', 'error')
            logger.error(f"Unexpected error creating asset: {e}")
            db.session.rollback()

    return render_template(
        'assets/form.html',
        asset=None,
        form_data=form_data,
        options=AssetListService.get_form_options(tenant_id()),
    )


@bp.route('/detail/<asset_id>')
@login_required
def detail(asset_id):
    """Asset detail page; asset_id may be the numeric id or the asset tag"""
    context = load_context(asset_id)
    tab = request.args.get('tab', 'details')
    data = AssetDetailService.get_detail_data(context, storage(), tab)
    logger.debug(f"User {current_user.username} viewing asset {context.asset_id} ({data['active_tab']})")
    return render_template('assets/detail.html', **data)


@bp.route('/<int:asset_id>/edit', methods=['GET', 'POST'])
@login_required
def edit(asset_id):
    """Edit an asset; changes are written to its history"""
    context = load_context(asset_id)
    form_data = {}

    if request.method == 'POST':
        form_data = _form_data()
        try:
            context.edit(form_data, updated_by_id=current_user.id)
            flash('Asset updated successfully', 'success')
            logger.info(f"User {current_user.username} updated asset {asset_id}")
            return redirect(url_for('assets.detail', asset_id=asset_id))
        except ValueError as e:
            flash(str(e), 'error')
            logger.warning(f"Asset update failed: {e}")
        except Exception as e:
            flash('Failed to update asset', 'error')
            logger.error(f"Unexpected error updating asset {asset_id}: {e}")
            db.session.rollback()

    return render_template(
        'assets/form.html',
        asset=context.asset,
        site=context.site,
        form_data=form_data,
        options=AssetListService.get_form_options(tenant_id()),
    )


@bp.route('/<int:asset_id>/delete', methods=['POST'])
@login_required
def delete(asset_id):
    """Soft-delete an asset"""
    context = load_context(asset_id)
    try:
        context.soft_delete(current_user.id)
        flash('Asset deleted successfully', 'success')
        logger.info(f"User {current_user.username} deleted asset {asset_id}")
        return redirect(url_for('assets.list_assets'))
    except Exception as e:
        flash('Failed to delete asset', 'error')
        logger.error(f"Unexpected error deleting asset {asset_id}: {e}")
        db.session.rollback()
        return redirect(url_for('assets.detail', asset_id=asset_id))
