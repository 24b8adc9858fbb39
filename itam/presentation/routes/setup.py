"""
Asset module setup routes
Column settings (JSON), email templates and tag formats
"""

from flask import Blueprint, render_template, redirect, url_for, flash, request, jsonify
from flask_login import login_required, current_user
from itam.buisness.assets import column_settings
from itam.buisness.assets.asset_tag_generator import save_tag_format, tag_formats, DEFAULT_ZERO_PADDING
from itam.buisness.notifications import email_setup
from itam.buisness.notifications.email_templates import preview_placeholders
from itam.presentation.routes.route_helpers import email_client, json_error, tenant_id
from itam import db
from itam.logger import get_logger

logger = get_logger("itam.routes.setup")
bp = Blueprint('setup', __name__)


@bp.route('/')
@login_required
def index():
    return redirect(url_for('setup.emails'))


# Columns

@bp.route('/columns', methods=['GET'])
@login_required
def get_columns():
    settings = column_settings.ColumnSettings(tenant_id(), current_user.id)
    columns = settings.columns()
    return jsonify({
        'columns': columns,
        'groups': column_settings.grouped_by_category(columns),
        'widths': settings.widths(),
    })


@bp.route('/columns', methods=['POST'])
@login_required
def save_columns():
    """
    Apply a column change and persist it.

    Body: {"action": "toggle"|"show_all"|"hide_all"|"reset"|"save", "id", "visible",
    "columns", "widths"}
    """
    payload = request.get_json(silent=True) or {}
    action = payload.get('action', 'save')
    settings = column_settings.ColumnSettings(tenant_id(), current_user.id)

    try:
        if action == 'reset':
            columns = settings.reset()
        else:
            current = settings.columns()
            if action == 'toggle':
                columns = column_settings.toggle(current, payload.get('id'), bool(payload.get('visible')))
            elif action == 'show_all':
                columns = column_settings.show_all(current)
            elif action == 'hide_all':
                columns = column_settings.hide_all(current)
            elif action == 'save':
                columns = payload.get('columns') or current
            else:
                return json_error(f'Unknown action: {action}')
            columns = settings.save_columns(columns)

        if isinstance(payload.get('widths'), dict):
            settings.save_widths(payload['widths'])
    except Exception as e:
        db.session.rollback()
        logger.error(f"Failed to save column settings for user {current_user.id}: {e}")
        return json_error('Failed to save column settings', 500)

    logger.info(f"User {current_user.username} column settings: {action}")
    return jsonify({'success': True, 'columns': columns, 'widths': settings.widths()})


# Emails

@bp.route('/emails')
@login_required
def emails():
    templates = email_setup.list_templates(tenant_id())
    return render_template(
        'setup/emails.html',
        templates=templates,
        settings=email_setup.settings(tenant_id()),
        preview=preview_placeholders,
        active='emails',
    )


@bp.route('/emails/<template_id>', methods=['POST'])
@login_required
def save_email_template(template_id):
    try:
        email_setup.save_template(
            tenant_id(),
            template_id,
            request.form.get('subject'),
            request.form.get('body'),
            enabled=bool(request.form.get('enabled')),
        )
        flash('Template saved', 'success')
    except ValueError as e:
        flash(str(e), 'error')
        logger.warning(f"Template '{template_id}' not saved: {e}")
    except Exception as e:
        flash('Failed to save template', 'error')
        logger.error(f"Unexpected error saving template '{template_id}': {e}")
        db.session.rollback()
    return redirect(url_for('setup.emails'))


@bp.route('/emails/<template_id>/toggle', methods=['POST'])
@login_required
def toggle_email_template(template_id):
    try:
        enabled = email_setup.toggle_template(tenant_id(), template_id)
        flash(f"Template {'enabled' if enabled else 'disabled'}", 'success')
    except ValueError as e:
        flash(str(e), 'error')
    except Exception as e:
        flash('Failed to update template', 'error')
        logger.error(f"Unexpected error toggling template '{template_id}': {e}")
        db.session.rollback()
    return redirect(url_for('setup.emails'))


@bp.route('/emails/settings', methods=['POST'])
@login_required
def save_email_settings():
    try:
        email_setup.save_global_settings(
            tenant_id(),
            request.form.get('sender_name'),
            bool(request.form.get('send_copy_to_admins')),
        )
        flash('Email settings saved', 'success')
    except Exception as e:
        flash('Failed to save email settings', 'error')
        logger.error(f"Unexpected error saving email settings: {e}")
        db.session.rollback()
    return redirect(url_for('setup.emails'))


@bp.route('/emails/test', methods=['POST'])
@login_required
def send_test_email():
    """Verify mail credentials, or send a test mail when a recipient is given"""
    client = email_client()
    recipient = (request.form.get('recipient') or '').strip() or None
    result = client.invoke('test', recipient, tenant_id=tenant_id(), test_mode=True)
    if result.ok:
        flash(result.message or 'Email credentials are valid', 'success')
    else:
        flash(f'Email test failed: {result.message}', 'error')
    return redirect(url_for('setup.emails'))


# Tag format

@bp.route('/tag-format', methods=['GET', 'POST'])
@login_required
def tag_format():
    if request.method == 'POST':
        try:
            saved = save_tag_format(
                tenant_id(),
                request.form.get('category_id', type=int),
                request.form.get('prefix'),
                request.form.get('zero_padding'),
                user_id=current_user.id,
            )
            flash('Tag format saved', 'success')
            logger.info(f"Tag format {saved.prefix} saved for category {saved.category_id}")
        except ValueError as e:
            flash(str(e), 'error')
            logger.warning(f"Tag format not saved: {e}")
        except Exception as e:
            flash('Failed to save tag format', 'error')
            logger.error(f"Unexpected error saving tag format: {e}")
            db.session.rollback()
        return redirect(url_for('setup.tag_format'))

    return render_template(
        'setup/tag_format.html',
        formats=tag_formats(tenant_id()),
        default_padding=DEFAULT_ZERO_PADDING,
        active='tag_format',
    )
