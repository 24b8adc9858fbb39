"""
Asset Detail Service
Presentation service for the asset detail page.

Handles:
- Header data (status, actions, previous/next navigation)
- History and Events tab timelines
- Data for every detail tab in one place so the template stays dumb
"""

from typing import Any, Dict
from itam.data.core.user_info.user import User
from itam.buisness.assets import asset_status, history_timeline
from itam.buisness.assets.asset_actions import DISPOSAL_METHODS, MAX_REPLICAS
from itam.buisness.assets.asset_context import AssetContext
from itam.buisness.assets.asset_files import DocumentsTab, PhotosTab, format_file_size
from itam.buisness.assets.asset_tabs import (
    AuditTab, LinksTab, MaintenanceTab, ReservationsTab, contracts, warranty_status,
)
from itam.data.assets.asset_audit import CONDITIONS
from itam.data.assets.asset_link import LINK_TYPES
from itam.data.assets.maintenance_schedule import FREQUENCIES

DETAIL_TABS = (
    ('details', 'Details'),
    ('events', 'Events'),
    ('history', 'History'),
    ('photos', 'Photos'),
    ('docs', 'Docs'),
    ('warranty', 'Warranty'),
    ('maintenance', 'Maintenance'),
    ('reserve', 'Reserve'),
    ('linking', 'Linking'),
    ('audit', 'Audit'),
    ('contracts', 'Contracts'),
)
TAB_IDS = tuple(tab_id for tab_id, _ in DETAIL_TABS)


class AssetDetailService:
    """
    Service for asset detail presentation data.
    """

    @staticmethod
    def active_tab(requested: str) -> str:
        return requested if requested in TAB_IDS else 'details'

    @staticmethod
    def get_detail_data(context: AssetContext, storage, tab: str = 'details') -> Dict[str, Any]:
        """
        Everything the detail template renders.

        Args:
            context: Asset being shown
            storage: Bucket storage for the photos tab
            tab: Active tab id
        """
        asset = context.asset
        previous_id, next_id = context.neighbours()
        history_rows = context.history()

        maintenance = MaintenanceTab(context)
        schedules = maintenance.schedules()

        return {
            'asset': asset,
            'context': context,
            'site': context.site,
            'tabs': DETAIL_TABS,
            'active_tab': AssetDetailService.active_tab(tab),
            'status_label': context.status_label,
            'status_badge': asset_status.status_badge(asset.status),
            'actions': context.available_actions,
            'action_labels': asset_status.ACTION_LABELS,
            'previous_id': previous_id,
            'next_id': next_id,
            'events': history_timeline.timeline(history_rows, limit=history_timeline.EVENTS_TAB_LIMIT),
            'history': history_timeline.timeline(history_rows),
            'assignments': context.assignments(),
            'users': User.query.filter_by(tenant_id=context.tenant_id, is_active=True, is_system=False)
                               .order_by(User.name).all(),
            'disposal_methods': DISPOSAL_METHODS,
            'max_replicas': MAX_REPLICAS,
            'warranty': warranty_status(asset.warranty_expiry),
            'schedules': [(schedule, MaintenanceTab.due_badge(schedule.next_due_date)) for schedule in schedules],
            'frequencies': FREQUENCIES,
            'reservations': ReservationsTab(context).reservations(),
            'documents': DocumentsTab(context, storage).documents(),
            'photos': PhotosTab(context, storage).photos(),
            'links': LinksTab(context).links(),
            'link_candidates': LinksTab(context).candidates(),
            'link_types': LINK_TYPES,
            'audits': AuditTab(context).audits(),
            'conditions': CONDITIONS,
            'contracts': contracts(context),
            'format_file_size': format_file_size,
            'action_label': history_timeline.action_label,
            'action_badge': history_timeline.action_badge,
            'visible_details': history_timeline.visible_details,
        }
