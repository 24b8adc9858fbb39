"""
Asset routes: list, add/edit, detail with tabs, and the actions menu
"""

from flask import Blueprint

bp = Blueprint('assets', __name__)

from . import asset_list, asset_detail, asset_action_routes, asset_tab_routes  # noqa: E402,F401
