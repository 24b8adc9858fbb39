"""
Detail tab operations: warranty, maintenance, reservations, linking,
audit and contracts. Photos and documents live in asset_files.
"""

import calendar
import math
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional
from itam import db
from itam.data.assets.asset import Asset
from itam.data.assets.asset_audit import AssetAudit, CONDITIONS
from itam.data.assets.asset_link import AssetLink, LINK_TYPES
from itam.data.assets.maintenance_schedule import MaintenanceSchedule, FREQUENCIES
from itam.data.assets.purchase_order import PurchaseOrder
from itam.data.assets.reservation import AssetReservation
from itam.buisness.assets.asset_context import AssetContext
from itam.utils.form_values import blank_to_none, parse_date, parse_datetime, parse_int
from itam.logger import get_logger

logger = get_logger("itam.buisness.assets.asset_tabs")

WARRANTY_WARNING_DAYS = 30
MAINTENANCE_DUE_SOON_DAYS = 7


def add_months(value: datetime, months: int) -> datetime:
    """Calendar month arithmetic; the day is clamped to the target month's length"""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def next_due_after(frequency: Optional[str], now: datetime) -> Optional[datetime]:
    if frequency == 'daily':
        return now + timedelta(days=1)
    if frequency == 'weekly':
        return now + timedelta(days=7)
    if frequency == 'monthly':
        return add_months(now, 1)
    if frequency == 'quarterly':
        return add_months(now, 3)
    if frequency == 'yearly':
        return add_months(now, 12)
    return None


# ----------------------------------------------------------------------
# Warranty
# ----------------------------------------------------------------------

def warranty_status(expiry, today: Optional[date] = None) -> Optional[Dict[str, str]]:
    """
    Expiry warning for the warranty tab.

    Returns None when there is no expiry date or it is more than
    WARRANTY_WARNING_DAYS away.
    """
    if not expiry:
        return None
    if isinstance(expiry, datetime):
        expiry = expiry.date()
    today = today or date.today()
    days = (expiry - today).days
    if days < 0:
        return {'message': 'Expired', 'level': 'danger'}
    if days <= WARRANTY_WARNING_DAYS:
        return {'message': f'Expires in {days} days', 'level': 'warning'}
    return None


# ----------------------------------------------------------------------
# Maintenance
# ----------------------------------------------------------------------

class MaintenanceTab:

    def __init__(self, context: AssetContext, user_id: Optional[int] = None):
        self.context = context
        self.user_id = user_id

    def schedules(self) -> List[MaintenanceSchedule]:
        return MaintenanceSchedule.query.filter_by(
            asset_id=self.context.asset_id, tenant_id=self.context.tenant_id,
        ).order_by(MaintenanceSchedule.next_due_date.asc()).all()

    def _get(self, schedule_id: int) -> MaintenanceSchedule:
        return MaintenanceSchedule.query.filter_by(
            id=schedule_id, asset_id=self.context.asset_id, tenant_id=self.context.tenant_id,
        ).first_or_404()

    def create(self, title, description=None, frequency='monthly', next_due_date=None) -> MaintenanceSchedule:
        title = blank_to_none(title)
        if not title:
            raise ValueError('Please enter a title')
        frequency = blank_to_none(frequency)
        if frequency and frequency not in FREQUENCIES:
            raise ValueError(f'Invalid frequency: {frequency}')

        schedule = MaintenanceSchedule(
            tenant_id=self.context.tenant_id,
            organisation_id=self.context.asset.organisation_id,
            asset_id=self.context.asset_id,
            title=title,
            description=blank_to_none(description),
            frequency=frequency,
            next_due_date=parse_datetime(next_due_date),
            is_active=True,
            created_by_id=self.user_id,
        )
        db.session.add(schedule)
        db.session.commit()
        logger.info(f"Maintenance schedule '{title}' created for asset {self.context.asset_id}")
        return schedule

    def complete(self, schedule_id: int, now: Optional[datetime] = None) -> MaintenanceSchedule:
        schedule = self._get(schedule_id)
        now = now or datetime.utcnow()
        schedule.last_completed_date = now
        schedule.next_due_date = next_due_after(schedule.frequency, now)
        schedule.updated_by_id = self.user_id
        db.session.commit()
        logger.info(f"Maintenance schedule {schedule.id} completed, next due {schedule.next_due_date}")
        return schedule

    def delete(self, schedule_id: int) -> None:
        schedule = self._get(schedule_id)
        db.session.delete(schedule)
        db.session.commit()
        logger.info(f"Maintenance schedule {schedule_id} deleted")

    @staticmethod
    def due_badge(next_due_date, now: Optional[datetime] = None) -> Dict[str, str]:
        if not next_due_date:
            return {'label': 'No schedule', 'badge': 'secondary'}
        now = now or datetime.utcnow()
        days = math.ceil((next_due_date - now).total_seconds() / 86400)
        if days < 0:
            return {'label': 'Overdue', 'badge': 'danger'}
        if days <= MAINTENANCE_DUE_SOON_DAYS:
            return {'label': 'Due Soon', 'badge': 'warning'}
        return {'label': 'Scheduled', 'badge': 'secondary'}


# ----------------------------------------------------------------------
# Reservations
# ----------------------------------------------------------------------

class ReservationsTab:

    def __init__(self, context: AssetContext, user_id: Optional[int] = None):
        self.context = context
        self.user_id = user_id

    def reservations(self) -> List[AssetReservation]:
        return AssetReservation.query.filter_by(
            asset_id=self.context.asset_id, tenant_id=self.context.tenant_id,
        ).order_by(AssetReservation.start_date.desc()).all()

    def create(self, start_date, end_date, reserved_for_name=None, purpose=None, notes=None) -> AssetReservation:
        start = parse_date(start_date)
        end = parse_date(end_date)
        if start is None or end is None:
            raise ValueError('Please select start and end dates')
        if end < start:
            raise ValueError('End date must be after start date')

        reservation = AssetReservation(
            tenant_id=self.context.tenant_id,
            organisation_id=self.context.asset.organisation_id,
            asset_id=self.context.asset_id,
            start_date=start,
            end_date=end,
            reserved_for_name=blank_to_none(reserved_for_name),
            purpose=blank_to_none(purpose),
            notes=blank_to_none(notes),
            reserved_by=self.user_id,
            status='pending',
            created_by_id=self.user_id,
        )
        db.session.add(reservation)
        db.session.commit()
        logger.info(f"Reservation {reservation.id} created for asset {self.context.asset_id} ({start}..{end})")
        return reservation

    def cancel(self, reservation_id: int) -> AssetReservation:
        reservation = AssetReservation.query.filter_by(
            id=reservation_id, asset_id=self.context.asset_id, tenant_id=self.context.tenant_id,
        ).first_or_404()
        if reservation.status != 'pending':
            raise ValueError('Only pending reservations can be cancelled')
        reservation.status = 'cancelled'
        reservation.updated_by_id = self.user_id
        db.session.commit()
        logger.info(f"Reservation {reservation.id} cancelled")
        return reservation


# ----------------------------------------------------------------------
# Linking
# ----------------------------------------------------------------------

class LinksTab:

    def __init__(self, context: AssetContext, user_id: Optional[int] = None):
        self.context = context
        self.user_id = user_id

    def links(self) -> List[AssetLink]:
        return AssetLink.query.filter_by(
            asset_id=self.context.asset_id, tenant_id=self.context.tenant_id,
        ).order_by(AssetLink.created_at.desc()).all()

    def candidates(self) -> List[Asset]:
        """Active assets of the tenant that are not this asset and not linked yet"""
        linked = [link.linked_asset_id for link in self.links()]
        query = Asset.query.filter(
            Asset.tenant_id == self.context.tenant_id,
            Asset.is_active.is_(True),
            Asset.id != self.context.asset_id,
        )
        if linked:
            query = query.filter(Asset.id.notin_(linked))
        return query.order_by(Asset.asset_tag.asc()).all()

    def link(self, linked_asset_id, link_type='related', notes=None) -> AssetLink:
        linked_asset_id = parse_int(linked_asset_id)
        if linked_asset_id is None:
            raise ValueError('Please select an asset to link')
        if linked_asset_id == self.context.asset_id:
            raise ValueError('An asset cannot be linked to itself')
        link_type = blank_to_none(link_type) or 'related'
        if link_type not in LINK_TYPES:
            raise ValueError(f'Invalid link type: {link_type}')

        other = Asset.query.filter_by(id=linked_asset_id, tenant_id=self.context.tenant_id).first()
        if other is None:
            raise ValueError('Linked asset not found')
        existing = AssetLink.query.filter_by(asset_id=self.context.asset_id, linked_asset_id=linked_asset_id).first()
        if existing is not None:
            raise ValueError('These assets are already linked')

        link = AssetLink(
            tenant_id=self.context.tenant_id,
            organisation_id=self.context.asset.organisation_id,
            asset_id=self.context.asset_id,
            linked_asset_id=linked_asset_id,
            link_type=link_type,
            notes=blank_to_none(notes),
            created_by_id=self.user_id,
        )
        db.session.add(link)
        db.session.commit()
        logger.info(f"Asset {self.context.asset_id} linked to {linked_asset_id} ({link_type})")
        return link

    def unlink(self, link_id: int) -> None:
        link = AssetLink.query.filter_by(
            id=link_id, asset_id=self.context.asset_id, tenant_id=self.context.tenant_id,
        ).first_or_404()
        db.session.delete(link)
        db.session.commit()
        logger.info(f"Asset link {link_id} removed")


# ----------------------------------------------------------------------
# Audit
# ----------------------------------------------------------------------

class AuditTab:

    def __init__(self, context: AssetContext, user_id: Optional[int] = None):
        self.context = context
        self.user_id = user_id

    def audits(self) -> List[AssetAudit]:
        return AssetAudit.query.filter_by(
            asset_id=self.context.asset_id, tenant_id=self.context.tenant_id,
        ).order_by(AssetAudit.audited_at.desc()).all()

    def record(self, condition=None, location_verified=False, notes=None,
               audited_at: Optional[datetime] = None) -> AssetAudit:
        condition = blank_to_none(condition)
        if condition and condition not in CONDITIONS:
            raise ValueError(f'Invalid condition: {condition}')

        audit = AssetAudit(
            tenant_id=self.context.tenant_id,
            organisation_id=self.context.asset.organisation_id,
            asset_id=self.context.asset_id,
            audited_at=audited_at or datetime.utcnow(),
            condition=condition,
            location_verified=bool(location_verified),
            notes=blank_to_none(notes),
            audited_by=self.user_id,
            created_by_id=self.user_id,
        )
        db.session.add(audit)
        db.session.commit()

        self.context.log_history(
            'audit_recorded',
            performed_by=self.user_id,
            new_value=condition,
            details={'condition': condition, 'location_verified': bool(location_verified), 'notes': audit.notes},
        )
        logger.info(f"Audit recorded for asset {self.context.asset_id}")
        return audit


# ----------------------------------------------------------------------
# Contracts
# ----------------------------------------------------------------------

def contracts(context: AssetContext) -> Dict[str, object]:
    """Vendor of the asset and that vendor's purchase orders, newest first"""
    vendor = context.asset.vendor
    orders = []
    if vendor is not None:
        orders = PurchaseOrder.query.filter_by(
            vendor_id=vendor.id, tenant_id=context.tenant_id,
        ).order_by(PurchaseOrder.created_at.desc()).all()
    return {'vendor': vendor, 'purchase_orders': orders}
