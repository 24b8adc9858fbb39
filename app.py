#!/usr/bin/env python3
"""
Run script for the IT Asset Management module
"""

import argparse
import os
import sys
from dotenv import load_dotenv

# Environment must be loaded before the app reads its configuration
load_dotenv()

from itam import create_app
from itam.build import build_database
from itam.logger import get_logger

# Default user credentials come from environment variables.
# Run 'python generate_env.py' to create a .env file with secure passwords.

app = create_app()
logger = get_logger("itam.run")


def _env_flag(name, default='False'):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


def parse_arguments():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description='IT Asset Management')
    parser.add_argument('--build-only', action='store_true',
                        help='Build tables and critical data, then exit without starting the web server')
    parser.add_argument('--no-demo-data', action='store_false', dest='seed_demo',
                        help='Do not insert demo sites, lookups and assets')
    return parser.parse_args()


if __name__ == '__main__':
    args = parse_arguments()

    logger.debug("Starting IT Asset Management...")

    # Critical data (tenant, system/admin users, categories) is always verified
    build_database(seed_demo=args.seed_demo and not args.build_only, app=app)

    if args.build_only:
        logger.debug("Build completed. Exiting without starting web server.")
        sys.exit(0)

    debug_mode = _env_flag('FLASK_DEBUG')
    use_reloader = _env_flag('USE_RELOADER')
    host = os.environ.get('FLASK_HOST', '127.0.0.1')
    port = int(os.environ.get('FLASK_PORT', '5000'))

    if debug_mode:
        logger.warning("DEBUG MODE ENABLED - Do not use in production!")

    logger.info(f"Starting server on {host}:{port} (debug={debug_mode}, reloader={use_reloader})")
    app.run(debug=debug_mode, host=host, port=port, use_reloader=use_reloader)
