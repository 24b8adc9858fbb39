"""
Routes package for the ITAM asset module
"""

from flask import Blueprint
from itam.logger import get_logger

logger = get_logger("itam.routes")

# Create main blueprint
main = Blueprint('main', __name__)

# Import route modules
from . import main_routes  # noqa: E402,F401


def init_app(app):
    """Initialize all route blueprints with the Flask app"""
    from itam import csrf
    from . import assets, setup, functions

    logger.debug("Initializing route blueprints")

    app.register_blueprint(assets.bp, url_prefix='/assets')
    app.register_blueprint(setup.bp, url_prefix='/assets/setup')
    app.register_blueprint(functions.bp, url_prefix='/functions')

    # Called server to server with a bearer secret, never from a form
    csrf.exempt(functions.bp)

    logger.info("Route blueprints registered")
