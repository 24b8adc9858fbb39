from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_user, logout_user, login_required, current_user
from urllib.parse import urlparse
from itam.data.core.user_info.user import User
from itam import limiter
from itam.logger import get_logger

logger = get_logger("itam.auth")
auth = Blueprint('auth', __name__)


@auth.route('/login', methods=['GET', 'POST'])
@limiter.limit("10 per minute", methods=['POST'])
def login():
    if current_user.is_authenticated:
        return redirect(url_for('assets.list_assets'))

    if request.method == 'POST':
        username = (request.form.get('username') or '').strip()
        password = request.form.get('password')

        if not username or not password:
            logger.warning(f"Login attempt with missing credentials for username: {username}")
            flash('Please enter both username and password', 'error')
            return render_template('auth/login.html'), 400

        # Email works as a login name too
        user = User.query.filter((User.username == username) | (User.email == username)).first()

        if user is None or not user.check_password(password):
            logger.warning(f"Failed login attempt for username: {username}")
            flash('Invalid username or password', 'error')
            return render_template('auth/login.html'), 401

        if not user.is_active or user.is_system:
            logger.warning(f"Login attempt for disabled account: {username}")
            flash('Account is disabled', 'error')
            return render_template('auth/login.html'), 403

        login_user(user, remember=bool(request.form.get('remember')))
        logger.info(f"Successful login for user: {user.username}")

        next_page = request.args.get('next')
        if not next_page or urlparse(next_page).netloc != '':
            next_page = url_for('assets.list_assets')

        flash(f'Welcome, {user.display_name}!', 'success')
        return redirect(next_page)

    return render_template('auth/login.html')


@auth.route('/logout')
@login_required
def logout():
    username = current_user.username
    logout_user()
    logger.info(f"User logged out: {username}")
    flash('You have been logged out', 'info')
    return redirect(url_for('auth.login'))
