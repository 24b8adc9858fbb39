from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import os
from itam.logger import get_logger

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
csrf = CSRFProtect()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["2000 per day", "500 per hour"],
    storage_uri="memory://"  # Use Redis in production for distributed systems
)


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


def create_app(test_config=None):
    from pathlib import Path

    base_dir = Path(__file__).parent.parent

    template_folder = str(base_dir / 'itam' / 'presentation' / 'templates')
    static_folder = str(base_dir / 'itam' / 'presentation' / 'static')

    app = Flask(__name__,
                template_folder=template_folder,
                static_folder=static_folder)

    logger = get_logger("itam")
    logger.info("Initializing Flask application")

    # SECURITY: Require SECRET_KEY in environment (or test config) - no fallback
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY')

    instance_dir = base_dir / 'instance'

    db_env = os.environ.get('DATABASE_URL')
    if db_env:
        app.config['SQLALCHEMY_DATABASE_URI'] = db_env
    else:
        instance_dir.mkdir(parents=True, exist_ok=True)
        default_db_path = instance_dir / 'itam.db'
        app.config['SQLALCHEMY_DATABASE_URI'] = f"sqlite:///{str(default_db_path.resolve())}"

    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Object storage buckets (asset-photos, asset-documents) live under this root
    app.config['STORAGE_ROOT'] = os.environ.get('STORAGE_ROOT', str(instance_dir / 'storage'))
    app.config['MAX_PHOTO_BYTES'] = 5 * 1024 * 1024

    # send-asset-email function
    # Empty URL means "this application's own /functions/send-asset-email endpoint"
    app.config['EMAIL_FUNCTION_URL'] = os.environ.get('EMAIL_FUNCTION_URL', '')
    app.config['EMAIL_FUNCTION_SECRET'] = os.environ.get('EMAIL_FUNCTION_SECRET', '')
    app.config['EMAIL_FUNCTION_TIMEOUT'] = int(os.environ.get('EMAIL_FUNCTION_TIMEOUT', '20'))
    app.config['EMAIL_TRANSPORT'] = os.environ.get('EMAIL_TRANSPORT', 'log')
    app.config['AZURE_TENANT_ID'] = os.environ.get('AZURE_TENANT_ID')
    app.config['AZURE_CLIENT_ID'] = os.environ.get('AZURE_CLIENT_ID')
    app.config['AZURE_CLIENT_SECRET'] = os.environ.get('AZURE_CLIENT_SECRET')
    app.config['AZURE_SENDER_EMAIL'] = os.environ.get('AZURE_SENDER_EMAIL')

    # HTTPS/TLS Configuration
    # Default to True (secure) for production - only disable for development
    app.config['ENABLE_HTTPS'] = _env_flag('ENABLE_HTTPS', 'True')
    app.config['FORCE_HTTPS_REDIRECT'] = _env_flag('FORCE_HTTPS_REDIRECT', 'True')

    # Session cookie security configuration
    app.config['SESSION_COOKIE_SECURE'] = _env_flag('SESSION_COOKIE_SECURE', 'True')
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'
    app.config['PERMANENT_SESSION_LIFETIME'] = int(os.environ.get('PERMANENT_SESSION_LIFETIME', '3600'))

    app.config['REMEMBER_COOKIE_SECURE'] = _env_flag('REMEMBER_COOKIE_SECURE', 'True')
    app.config['REMEMBER_COOKIE_HTTPONLY'] = True
    app.config['REMEMBER_COOKIE_DURATION'] = int(os.environ.get('REMEMBER_COOKIE_DURATION', '86400'))

    if test_config:
        app.config.update(test_config)

    if not app.config['SECRET_KEY']:
        logger.critical("SECRET_KEY not set in environment! Application cannot start.")
        raise RuntimeError("SECRET_KEY environment variable is required")

    if app.config['ENABLE_HTTPS']:
        logger.info("HTTPS enforcement enabled")
        if app.config['FORCE_HTTPS_REDIRECT']:
            logger.info("Automatic HTTP to HTTPS redirect enabled")
    else:
        logger.warning("HTTPS enforcement DISABLED - Acceptable for development only!")

    if not app.config['EMAIL_FUNCTION_SECRET']:
        logger.warning("EMAIL_FUNCTION_SECRET not set - send-asset-email will refuse every call")

    logger.debug(f"Database configured: {app.config['SQLALCHEMY_DATABASE_URI'].split(':', 1)[0]}")

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)
    login_manager.login_view = 'auth.login'
    login_manager.login_message = 'Please log in to access this page.'
    login_manager.login_message_category = 'info'

    logger.debug("Extensions initialized")

    # Import models to ensure they're registered with SQLAlchemy
    from itam.data import core, assets, notifications  # noqa: F401

    logger.debug("Models imported and registered")

    # Email function client used by the action handlers
    from itam.services.notifications.email_function_client import EmailFunctionClient
    app.extensions['itam_email_client'] = EmailFunctionClient.from_app(app)

    # Register blueprints
    from itam.auth import auth
    from itam.presentation.routes import main
    from itam.presentation.routes import init_app as init_routes

    app.register_blueprint(auth)
    app.register_blueprint(main)

    init_routes(app)

    @app.before_request
    def enforce_https():
        """Redirect HTTP requests to HTTPS if HTTPS enforcement is enabled"""
        if app.config.get('ENABLE_HTTPS') and app.config.get('FORCE_HTTPS_REDIRECT'):
            from flask import request, redirect

            if not request.is_secure and not request.headers.get('X-Forwarded-Proto') == 'https':
                url = request.url.replace('http://', 'https://', 1)
                return redirect(url, code=301)

    @app.after_request
    def set_security_headers(response):
        """Add security headers to all responses"""
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Content-Security-Policy'] = (
            "default-src 'self'; "
            "script-src 'self' 'unsafe-inline'; "
            "style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data: https:; "
            "font-src 'self' data:;"
        )
        if app.config.get('ENABLE_HTTPS'):
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response

    logger.info("Flask application initialization complete")

    return app
