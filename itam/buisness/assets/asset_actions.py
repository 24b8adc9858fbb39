"""
Asset action handlers

Each action validates its input, performs its dependent writes (each one
committed as it happens, so a failure part-way leaves earlier writes in
place), appends a history row and, for check-out/check-in, asks the
send-asset-email function for a notification.

Validation and precondition failures raise ValueError. Email failures never
raise; they are returned as warnings on the ActionResult.
"""

import random
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, List, Optional
from urllib.parse import quote
from itam import db
from itam.data.core.user_info.user import User
from itam.data.assets.asset import Asset, CHECKOUT_FIELDS
from itam.data.assets.asset_assignment import AssetAssignment
from itam.data.assets.repair import Repair
from itam.buisness.assets import asset_status
from itam.buisness.assets.asset_context import AssetContext
from itam.utils.form_values import blank_to_none, parse_amount, parse_datetime, parse_int
from itam.logger import get_logger

logger = get_logger("itam.buisness.assets.actions")

DEFAULT_RETURN_DAYS = 7
MAX_REPLICAS = 10
DEFAULT_REPAIR_DESCRIPTION = 'Repair/Maintenance scheduled'

DISPOSAL_METHODS = (
    ('sold', 'Sold'),
    ('donated', 'Donated'),
    ('recycled', 'Recycled'),
    ('scrapped', 'Scrapped'),
    ('returned', 'Returned to Vendor'),
    ('other', 'Other'),
)

# Quick status shortcuts on the actions menu and their success wording
QUICK_STATUS_MESSAGES = {
    asset_status.AVAILABLE: 'checked in',
    asset_status.MAINTENANCE: 'marked for maintenance',
    asset_status.LOST: 'marked as lost',
    asset_status.DISPOSED: 'disposed',
}

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

# Columns never copied when replicating
REPLICA_SKIP_FIELDS = ('id', 'created_at', 'updated_at', 'asset_id', 'asset_tag')


@dataclass
class ActionResult:
    message: str
    warnings: List[str] = field(default_factory=list)
    assets: List[Asset] = field(default_factory=list)
    redirect_to: Optional[str] = None


def generate_repair_number(now: Optional[datetime] = None) -> str:
    """RPR-YYYYMMDD-NNNN with a random four digit suffix"""
    now = now or datetime.utcnow()
    return f"RPR-{now.strftime('%Y%m%d')}-{random.randint(1000, 9999)}"


def _user_key(value) -> Optional[int]:
    """Selected user id from a form value; None when blank or not a number"""
    try:
        return parse_int(value)
    except ValueError:
        return None


def replica_count(replication_type: str, copy_count) -> int:
    if replication_type == 'single':
        return 1
    try:
        count = int(copy_count)
    except (TypeError, ValueError):
        count = 1
    return min(max(count, 1), MAX_REPLICAS)


def parse_recipients(raw: Optional[str]) -> List[str]:
    """
    Split a comma separated recipient list and validate each address.

    Raises:
        ValueError: When empty or when an address is invalid
    """
    if not raw or not raw.strip():
        raise ValueError('Please enter an email address')
    emails = [part.strip() for part in raw.split(',') if part.strip()]
    invalid = [email for email in emails if not EMAIL_PATTERN.match(email)]
    if invalid:
        raise ValueError(f'Invalid email address: {invalid[0]}')
    return emails


def build_mailto_link(asset: Asset, recipients: List[str], notes: Optional[str] = None,
                      attach_photos: bool = False, attach_documents: bool = False) -> str:
    subject = f"Regarding Asset: {asset.asset_tag or asset.name or 'Asset'}"
    body = notes or ''
    if attach_photos or attach_documents:
        body += '\n\n---\nAttachments requested:'
        if attach_photos:
            body += '\n• Photos'
        if attach_documents:
            body += '\n• Documents'
    return f"mailto:{','.join(recipients)}?subject={quote(subject, safe='')}&body={quote(body, safe='')}"


class AssetActions:
    """
    Actions performed on one asset by one user.

    Args:
        context: AssetContext of the target asset
        performed_by: The acting user
        email_client: Optional EmailFunctionClient; without it no emails are sent
    """

    def __init__(self, context: AssetContext, performed_by: Optional[User] = None, email_client=None):
        self.context = context
        self.performed_by = performed_by
        self.email_client = email_client

    @property
    def asset(self) -> Asset:
        return self.context.asset

    @property
    def _user_id(self) -> Optional[int]:
        return self.performed_by.id if self.performed_by else None

    def _tenant_user(self, user_id) -> User:
        user = None
        user_id = _user_key(user_id)
        if user_id:
            user = User.query.filter_by(id=user_id, tenant_id=self.context.tenant_id).first()
        if user is None:
            raise ValueError('Please select a user')
        return user

    def _close_open_assignments(self, when: datetime, notes: Optional[str] = None,
                                only_user: Optional[int] = None, set_notes: bool = True) -> int:
        query = AssetAssignment.query.filter(
            AssetAssignment.asset_id == self.asset.id,
            AssetAssignment.returned_at.is_(None),
        )
        if only_user is not None:
            query = query.filter(AssetAssignment.assigned_to == only_user)
        closed = 0
        for assignment in query.all():
            assignment.returned_at = when
            if set_notes:
                assignment.notes = notes
            closed += 1
        db.session.commit()
        return closed

    def _notify(self, template_id: str, user: Optional[User], variables: dict) -> List[str]:
        """Best-effort email; returns warnings for the caller to flash"""
        if self.email_client is None or user is None or not user.email:
            return []
        result = self.email_client.invoke(
            template_id,
            user.email,
            tenant_id=self.context.tenant_id,
            asset_id=self.asset.id,
            variables=variables,
        )
        if not result.ok:
            logger.warning(f"Email '{template_id}' for asset {self.asset.id} not sent: {result.message}")
            return [f'Email notification could not be sent: {result.message}']
        return []

    # ------------------------------------------------------------------
    # Check-out / check-in
    # ------------------------------------------------------------------

    def check_out(self, user_id, expected_return_date=None, notes: Optional[str] = None,
                  now: Optional[datetime] = None) -> ActionResult:
        if not user_id:
            raise ValueError('Please select a user')
        user = self._tenant_user(user_id)

        # Status is re-read so a stale page cannot check out an asset twice
        current = self.context.refresh_status()
        if not asset_status.can_check_out(current):
            raise ValueError(
                f'Asset cannot be checked out while {asset_status.status_label(current)}'
            )

        now = now or datetime.utcnow()
        expected = parse_datetime(expected_return_date) or now + timedelta(days=DEFAULT_RETURN_DAYS)
        notes = blank_to_none(notes)
        assignee_name = user.display_name

        asset = self.asset
        asset.status = asset_status.IN_USE
        asset.assigned_to = assignee_name
        asset.checked_out_at = now
        asset.checked_out_to = user.id
        asset.expected_return_date = expected
        asset.check_out_notes = notes
        asset.updated_by_id = self._user_id
        db.session.commit()

        db.session.add(AssetAssignment(
            tenant_id=asset.tenant_id,
            organisation_id=asset.organisation_id,
            asset_id=asset.id,
            assigned_to=user.id,
            assigned_by=self._user_id,
            assigned_at=now,
            notes=notes,
        ))
        db.session.commit()

        self.context.log_history(
            'checked_out',
            performed_by=self._user_id,
            details={
                'assigned_to': assignee_name,
                'user_id': user.id,
                'expected_return': expected.isoformat(),
                'notes': notes,
            },
        )
        logger.info(f"Asset {asset.id} checked out to user {user.id}")

        warnings = self._notify('checkout', user, {
            'user_name': assignee_name,
            'asset_name': asset.name,
            'asset_tag': asset.asset_tag,
            'category': asset.category.name if asset.category else None,
            'checkout_date': now.strftime('%d/%m/%Y'),
            'expected_return_date': expected.strftime('%d/%m/%Y'),
            'notes': notes,
        })
        return ActionResult('Asset checked out successfully', warnings=warnings)

    def check_in(self, checkin_date=None, notes: Optional[str] = None) -> ActionResult:
        current = self.context.refresh_status()
        if not asset_status.can_check_in(current):
            raise ValueError('Only checked out assets can be checked in')

        when = parse_datetime(checkin_date) or datetime.utcnow()
        notes = blank_to_none(notes)
        asset = self.asset
        previous_holder = db.session.get(User, asset.checked_out_to) if asset.checked_out_to else None

        asset.status = asset_status.AVAILABLE
        asset.clear_checkout()
        asset.updated_by_id = self._user_id
        db.session.commit()

        self._close_open_assignments(when, notes)

        self.context.log_history(
            'checked_in',
            performed_by=self._user_id,
            details={'returned_at': when.isoformat(), 'notes': notes},
        )
        logger.info(f"Asset {asset.id} checked in")

        warnings = self._notify('checkin', previous_holder, {
            'user_name': previous_holder.display_name if previous_holder else None,
            'asset_name': asset.name,
            'asset_tag': asset.asset_tag,
            'checkin_date': when.strftime('%d/%m/%Y'),
            'notes': notes,
        })
        return ActionResult('Asset checked in successfully', warnings=warnings)

    # ------------------------------------------------------------------
    # Repair / dispose / lost
    # ------------------------------------------------------------------

    def send_for_repair(self, schedule_date=None, assigned_to=None, cost=None,
                        notes: Optional[str] = None) -> ActionResult:
        started_at = parse_datetime(schedule_date) or datetime.utcnow()
        estimated_cost = parse_amount(cost, 'Repair cost')
        notes = blank_to_none(notes)
        technician = self._tenant_user(assigned_to) if assigned_to else None
        asset = self.asset

        repair = Repair(
            tenant_id=asset.tenant_id,
            organisation_id=asset.organisation_id,
            asset_id=asset.id,
            repair_number=generate_repair_number(),
            status='open',
            issue_description=notes or DEFAULT_REPAIR_DESCRIPTION,
            cost=estimated_cost,
            started_at=started_at,
            notes=notes,
            created_by_id=self._user_id,
        )
        db.session.add(repair)
        db.session.commit()

        asset.status = asset_status.MAINTENANCE
        asset.updated_by_id = self._user_id
        db.session.commit()

        self.context.log_history(
            'sent_for_repair',
            performed_by=self._user_id,
            details={
                'schedule_date': started_at.isoformat(),
                'assigned_to': technician.display_name if technician else None,
                'estimated_cost': float(estimated_cost) if estimated_cost is not None else None,
                'notes': notes,
            },
        )
        logger.info(f"Asset {asset.id} sent for repair ({repair.repair_number})")
        return ActionResult('Repair scheduled successfully')

    def dispose(self, disposal_method: Optional[str], disposal_date=None, disposal_value=None,
                notes: Optional[str] = None) -> ActionResult:
        if not disposal_method:
            raise ValueError('Please select a disposal method')
        if disposal_method not in dict(DISPOSAL_METHODS):
            raise ValueError(f'Invalid disposal method: {disposal_method}')

        when = parse_datetime(disposal_date) or datetime.utcnow()
        value = parse_amount(disposal_value, 'Disposal value')
        notes = blank_to_none(notes)
        asset = self.asset
        previous_status = asset.status

        custom = dict(asset.custom)
        custom.update({
            'disposal_method': disposal_method,
            'disposal_date': when.isoformat(),
            'disposal_value': float(value) if value is not None else None,
            'disposal_notes': notes,
        })
        asset.custom_fields = custom
        asset.status = asset_status.DISPOSED
        asset.clear_checkout()
        asset.updated_by_id = self._user_id
        db.session.commit()

        self.context.log_history(
            'disposed',
            performed_by=self._user_id,
            old_value=previous_status,
            new_value=asset_status.DISPOSED,
            details={
                'disposal_method': disposal_method,
                'disposal_date': when.isoformat(),
                'disposal_value': float(value) if value is not None else None,
                'notes': notes,
            },
        )
        logger.info(f"Asset {asset.id} disposed ({disposal_method})")
        return ActionResult('Asset disposed successfully')

    def mark_as_lost(self, lost_date=None, notes: Optional[str] = None) -> ActionResult:
        when = parse_datetime(lost_date) or datetime.utcnow()
        notes = blank_to_none(notes)
        asset = self.asset

        self._close_open_assignments(datetime.utcnow(), set_notes=False)

        asset.status = asset_status.LOST
        asset.clear_checkout()
        asset.updated_by_id = self._user_id
        db.session.commit()

        self.context.log_history(
            'marked_as_lost',
            performed_by=self._user_id,
            new_value=asset_status.LOST,
            details={'lost_date': when.isoformat(), 'notes': notes},
        )
        logger.info(f"Asset {asset.id} marked as lost")
        return ActionResult('Asset marked as lost')

    # ------------------------------------------------------------------
    # Replicate / reassign
    # ------------------------------------------------------------------

    def replicate(self, replication_type: str = 'single', copy_count=2) -> ActionResult:
        count = replica_count(replication_type, copy_count)
        source = self.asset
        columns = [
            column.name for column in Asset.__table__.columns
            if column.name not in REPLICA_SKIP_FIELDS and column.name not in CHECKOUT_FIELDS
        ]
        base_ts = int(datetime.utcnow().timestamp() * 1000)
        base_name = source.name or 'Asset'

        created = []
        for i in range(count):
            values = {name: getattr(source, name) for name in columns}
            if isinstance(values.get('custom_fields'), dict):
                values['custom_fields'] = dict(values['custom_fields'])
            values.update({
                'name': f'{base_name} (Copy {i + 1})' if count > 1 else f'{base_name} (Copy)',
                'asset_id': f'{source.asset_id}-COPY-{base_ts + i}',
                'asset_tag': f'{source.asset_tag}-COPY-{i + 1}' if source.asset_tag else None,
                'status': asset_status.AVAILABLE,
                'created_by_id': self._user_id,
                'updated_by_id': self._user_id,
            })
            copy = Asset(**values)
            db.session.add(copy)
            db.session.commit()
            created.append(copy)

        self.context.log_history(
            'replicated',
            performed_by=self._user_id,
            new_value=str(count),
            details={'copies': [copy.asset_tag or copy.asset_id for copy in created]},
        )
        logger.info(f"Asset {source.id} replicated {count} time(s)")
        message = f"{count} asset{'s' if count > 1 else ''} created successfully"
        return ActionResult(message, assets=created)

    def reassign(self, new_user_id, notes: Optional[str] = None) -> ActionResult:
        new_user_id = _user_key(new_user_id)
        if not new_user_id:
            raise ValueError('Please select a user to reassign to')
        current_holder_id = self.asset.checked_out_to
        if current_holder_id is not None and new_user_id == current_holder_id:
            raise ValueError('Asset is already assigned to this user')

        current = self.context.refresh_status()
        if not asset_status.can_reassign(current):
            raise ValueError('Only checked out assets can be reassigned')

        new_user = self._tenant_user(new_user_id)
        previous = db.session.get(User, current_holder_id) if current_holder_id else None
        previous_name = previous.display_name if previous else 'Unknown'
        new_name = new_user.display_name
        notes = blank_to_none(notes)
        now = datetime.utcnow()
        asset = self.asset

        asset.assigned_to = new_name
        asset.checked_out_to = new_user.id
        asset.updated_by_id = self._user_id
        db.session.commit()

        if current_holder_id:
            self._close_open_assignments(now, f'Reassigned to {new_name}', only_user=current_holder_id)

        db.session.add(AssetAssignment(
            tenant_id=asset.tenant_id,
            organisation_id=asset.organisation_id,
            asset_id=asset.id,
            assigned_to=new_user.id,
            assigned_by=self._user_id,
            assigned_at=now,
            notes=notes,
        ))
        db.session.commit()

        self.context.log_history(
            'reassigned',
            performed_by=self._user_id,
            old_value=previous_name,
            new_value=new_name,
            details={'from': previous_name, 'to': new_name, 'notes': notes},
        )
        logger.info(f"Asset {asset.id} reassigned to user {new_user.id}")
        return ActionResult('Asset reassigned successfully')

    # ------------------------------------------------------------------
    # Actions menu shortcuts
    # ------------------------------------------------------------------

    def set_status(self, status: str, clear_assignment: bool = False) -> ActionResult:
        """Quick status change from the actions menu"""
        if not asset_status.is_valid_status(status):
            raise ValueError(f'Invalid status: {status}')
        asset = self.asset
        previous_status = asset.status

        asset.status = status
        if clear_assignment:
            asset.clear_checkout()
        asset.updated_by_id = self._user_id
        db.session.commit()

        if status == asset_status.AVAILABLE and clear_assignment:
            self._close_open_assignments(datetime.utcnow(), set_notes=False)

        self.context.log_history(
            f'status_changed_to_{status}',
            performed_by=self._user_id,
            details={'previous_status': previous_status, 'new_status': status},
        )
        return ActionResult(f"Asset {QUICK_STATUS_MESSAGES.get(status, 'updated')} successfully")

    def email_asset(self, recipients: Optional[str], notes: Optional[str] = None,
                    attach_photos: bool = False, attach_documents: bool = False) -> ActionResult:
        emails = parse_recipients(recipients)
        link = build_mailto_link(self.asset, emails, notes, attach_photos, attach_documents)
        return ActionResult('Email client opened', redirect_to=link)


def bulk_update_status(tenant_id: int, asset_ids: Iterable[int], status: str,
                       performed_by: Optional[int] = None) -> int:
    """
    Set one status on many assets of a tenant.

    Returns:
        Number of assets updated
    """
    if not asset_status.is_valid_status(status):
        raise ValueError(f'Invalid status: {status}')
    ids = [int(asset_id) for asset_id in asset_ids]
    if not ids:
        raise ValueError('No assets selected')
    updated = Asset.query.filter(
        Asset.tenant_id == tenant_id,
        Asset.id.in_(ids),
    ).update({Asset.status: status, Asset.updated_by_id: performed_by}, synchronize_session=False)
    db.session.commit()
    logger.info(f"Bulk status '{status}' applied to {updated} asset(s)")
    return updated


def bulk_delete(tenant_id: int, asset_ids: Iterable[int], performed_by: Optional[int] = None) -> int:
    """Soft-delete many assets (is_active=False)"""
    ids = [int(asset_id) for asset_id in asset_ids]
    if not ids:
        raise ValueError('No assets selected')
    updated = Asset.query.filter(
        Asset.tenant_id == tenant_id,
        Asset.id.in_(ids),
    ).update({Asset.is_active: False, Asset.updated_by_id: performed_by}, synchronize_session=False)
    db.session.commit()
    logger.info(f"Bulk delete deactivated {updated} asset(s)")
    return updated
