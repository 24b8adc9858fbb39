"""
Actions menu routes
One POST endpoint per action: /assets/<id>/<action>
"""

from flask import redirect, url_for, flash, request, abort
from flask_login import login_required, current_user
from itam.buisness.assets.asset_actions import AssetActions, ActionResult
from itam.presentation.routes.route_helpers import email_client, load_context
from itam import db
from itam.logger import get_logger
from . import bp

logger = get_logger("itam.routes.assets.actions")


def _check_out(actions: AssetActions, form) -> ActionResult:
    return actions.check_out(
        form.get('user_id', type=int),
        expected_return_date=form.get('expected_return_date'),
        notes=form.get('notes'),
    )


def _check_in(actions: AssetActions, form) -> ActionResult:
    return actions.check_in(checkin_date=form.get('checkin_date'), notes=form.get('notes'))


def _repair(actions: AssetActions, form) -> ActionResult:
    return actions.send_for_repair(
        schedule_date=form.get('schedule_date'),
        assigned_to=form.get('assigned_to', type=int),
        cost=form.get('cost'),
        notes=form.get('notes'),
    )


def _dispose(actions: AssetActions, form) -> ActionResult:
    return actions.dispose(
        form.get('disposal_method'),
        disposal_date=form.get('disposal_date'),
        disposal_value=form.get('disposal_value'),
        notes=form.get('notes'),
    )


def _mark_lost(actions: AssetActions, form) -> ActionResult:
    return actions.mark_as_lost(lost_date=form.get('lost_date'), notes=form.get('notes'))


def _replicate(actions: AssetActions, form) -> ActionResult:
    return actions.replicate(form.get('replication_type', 'single'), form.get('copy_count', 2))


def _reassign(actions: AssetActions, form) -> ActionResult:
    return actions.reassign(form.get('user_id', type=int), notes=form.get('notes'))


def _status(actions: AssetActions, form) -> ActionResult:
    return actions.set_status(form.get('status'), clear_assignment=bool(form.get('clear_assignment')))


def _email(actions: AssetActions, form) -> ActionResult:
    return actions.email_asset(
        form.get('recipients'),
        notes=form.get('notes'),
        attach_photos=bool(form.get('attach_photos')),
        attach_documents=bool(form.get('attach_documents')),
    )


ACTION_HANDLERS = {
    'check-out': _check_out,
    'check-in': _check_in,
    'repair': _repair,
    'dispose': _dispose,
    'mark-lost': _mark_lost,
    'replicate': _replicate,
    'reassign': _reassign,
    'status': _status,
    'email': _email,
}


@bp.route('/<int:asset_id>/<action>', methods=['POST'])
@login_required
def run_action(asset_id, action):
    """Run one actions-menu action and flash its outcome"""
    handler = ACTION_HANDLERS.get(action)
    if handler is None:
        abort(404)

    context = load_context(asset_id)
    actions = AssetActions(context, performed_by=current_user, email_client=email_client())
    detail_url = url_for('assets.detail', asset_id=asset_id)

    try:
        result = handler(actions, request.form)
    except ValueError as e:
        flash(str(e), 'error')
        logger.warning(f"Action '{action}' on asset {asset_id} rejected: {e}")
        return redirect(detail_url)
    except Exception as e:
        flash(f'Failed to {action.replace("-", " ")} asset', 'error')
        logger.error(f"Unexpected error running '{action}' on asset {asset_id}: {e}")
        db.session.rollback()
        return redirect(detail_url)

    flash(result.message, 'success')
    for warning in result.warnings:
        flash(warning, 'warning')
    logger.info(f"User {current_user.username} ran '{action}' on asset {asset_id}")

    if result.redirect_to:
        return redirect(result.redirect_to)
    if action == 'replicate':
        return redirect(url_for('assets.list_assets'))
    return redirect(detail_url)
