"""
Asset Context
Provides a clean interface for loading, creating and editing ITAM assets.

Handles:
- Tenant-scoped lookup by numeric id or asset tag
- Previous/next navigation among active assets
- History rows (creation, status changes, consolidated field updates)
- Assignment queries used by the action handlers
"""

from typing import Any, Dict, List, Optional, Tuple, Union
from datetime import datetime
from itam import db
from itam.data.assets.asset import Asset
from itam.data.assets.asset_history import AssetHistory
from itam.data.assets.asset_assignment import AssetAssignment
from itam.data.assets.lookups import Category, Location, Department, Make, Vendor, Site
from itam.buisness.assets import asset_status
from itam.utils.form_values import blank_to_none, parse_amount, parse_date, parse_int, display_value
from itam.logger import get_logger

logger = get_logger("itam.buisness.assets.asset_context")

# Form field -> message when missing on create/edit
REQUIRED_FIELDS = (
    ('category_id', 'Category is required'),
    ('asset_tag', 'Asset Tag ID is required'),
    ('serial_number', 'Serial Number is required'),
    ('make_id', 'Make is required'),
    ('model', 'Model is required'),
    ('purchase_date', 'Purchase Date is required'),
    ('cost', 'Cost is required'),
    ('site_id', 'Site is required'),
    ('location_id', 'Location is required'),
)

# Columns whose changes are written to history on edit, in log order
TRACKED_FIELDS = (
    'name', 'status', 'category_id', 'location_id', 'department_id',
    'make_id', 'serial_number', 'purchase_price', 'description',
    'warranty_expiry', 'model', 'asset_tag', 'vendor_id', 'purchase_date',
)

# Foreign key columns resolved to names in history: field -> (model, label)
LOOKUP_FIELDS = {
    'category_id': (Category, 'Category'),
    'location_id': (Location, 'Location'),
    'department_id': (Department, 'Department'),
    'make_id': (Make, 'Make'),
    'vendor_id': (Vendor, 'Vendor'),
}

# custom_fields keys tracked on edit: key -> label
CUSTOM_FIELD_LABELS = (
    ('asset_configuration', 'Asset Configuration'),
    ('currency', 'Currency'),
    ('classification', 'Classification'),
    ('site_id', 'Site'),
    ('photo_url', 'Photo'),
    ('vendor', 'Purchased From'),
)

DEFAULT_CURRENCY = 'INR'


def field_label(field: str) -> str:
    if field in LOOKUP_FIELDS:
        return LOOKUP_FIELDS[field][1]
    return field.replace('_', ' ').title()


class AssetContext:
    """
    Context for a single asset of one tenant.

    The context never commits on its own behalf unless asked to; the action
    handlers commit each dependent write as it happens.
    """

    def __init__(self, asset: Union[Asset, int]):
        if isinstance(asset, int):
            self._asset = Asset.query.get_or_404(asset)
        else:
            self._asset = asset

    @classmethod
    def load(cls, identifier: Union[int, str], tenant_id: int) -> 'AssetContext':
        """
        Load an active or inactive asset by numeric id or asset tag within a tenant.

        Aborts with 404 when nothing matches.
        """
        query = Asset.query.filter(Asset.tenant_id == tenant_id)
        key = str(identifier)
        if key.isdigit():
            asset = query.filter(Asset.id == int(key)).first()
            if asset is not None:
                return cls(asset)
        asset = query.filter(db.or_(Asset.asset_tag == key, Asset.asset_id == key)).first_or_404()
        return cls(asset)

    @property
    def asset(self) -> Asset:
        return self._asset

    @property
    def asset_id(self) -> int:
        return self._asset.id

    @property
    def tenant_id(self) -> int:
        return self._asset.tenant_id

    @property
    def status(self) -> str:
        return self._asset.status

    @property
    def status_label(self) -> str:
        return asset_status.status_label(self._asset.status)

    @property
    def available_actions(self) -> List[str]:
        return asset_status.available_actions(self._asset.status)

    @property
    def site(self) -> Optional[Site]:
        site_id = self._asset.custom.get('site_id')
        if site_id:
            return Site.query.filter_by(id=site_id, tenant_id=self.tenant_id).first()
        if self._asset.location is not None:
            return self._asset.location.site
        return None

    def refresh_status(self) -> str:
        """Re-read the status from the database, discarding any stale in-session value"""
        db.session.refresh(self._asset, attribute_names=['status'])
        return self._asset.status

    def neighbours(self) -> Tuple[Optional[int], Optional[int]]:
        """
        (previous, next) asset ids for detail navigation.

        Previous is the nearest newer active asset, next the nearest older one.
        """
        created_at = self._asset.created_at
        if created_at is None:
            return None, None
        base = Asset.query.with_entities(Asset.id).filter(
            Asset.tenant_id == self.tenant_id,
            Asset.is_active.is_(True),
            Asset.id != self._asset.id,
        )
        newer = base.filter(Asset.created_at > created_at).order_by(Asset.created_at.asc()).first()
        older = base.filter(Asset.created_at < created_at).order_by(Asset.created_at.desc()).first()
        return (newer.id if newer else None, older.id if older else None)

    def history(self, limit: Optional[int] = None) -> List[AssetHistory]:
        """History rows, newest first"""
        query = AssetHistory.query.filter_by(asset_id=self._asset.id).order_by(
            AssetHistory.created_at.desc(), AssetHistory.id.desc()
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    def open_assignments(self) -> List[AssetAssignment]:
        return AssetAssignment.query.filter(
            AssetAssignment.asset_id == self._asset.id,
            AssetAssignment.returned_at.is_(None),
        ).all()

    def assignments(self) -> List[AssetAssignment]:
        return AssetAssignment.query.filter_by(asset_id=self._asset.id).order_by(
            AssetAssignment.assigned_at.desc()
        ).all()

    def log_history(
        self,
        action: str,
        performed_by: Optional[int] = None,
        old_value: Optional[str] = None,
        new_value: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        commit: bool = True,
    ) -> AssetHistory:
        """Append a history row for this asset"""
        row = AssetHistory(
            tenant_id=self._asset.tenant_id,
            organisation_id=self._asset.organisation_id,
            asset_id=self._asset.id,
            asset_tag=self._asset.asset_tag,
            action=action,
            old_value=old_value,
            new_value=new_value,
            details=details,
            performed_by=performed_by,
        )
        db.session.add(row)
        if commit:
            db.session.commit()
        logger.debug(f"History '{action}' recorded for asset {self._asset.id}")
        return row

    # ------------------------------------------------------------------
    # Create / edit
    # ------------------------------------------------------------------

    @staticmethod
    def validate_form(data: Dict[str, Any]) -> None:
        """
        Check the required asset form fields.

        Raises:
            ValueError: With the first missing field's message
        """
        for field, message in REQUIRED_FIELDS:
            if blank_to_none(data.get(field)) is None:
                raise ValueError(message)
        parse_amount(data.get('cost'), 'Cost')

    @staticmethod
    def ensure_unique_tag(tenant_id: int, asset_tag: Optional[str], exclude_id: Optional[int] = None) -> None:
        if not asset_tag:
            return
        query = Asset.query.filter(
            Asset.tenant_id == tenant_id,
            Asset.asset_tag == asset_tag,
        )
        if exclude_id is not None:
            query = query.filter(Asset.id != exclude_id)
        if query.first() is not None:
            raise ValueError('This Asset Tag ID is already in use.')

    @staticmethod
    def _custom_fields_from_form(data: Dict[str, Any], existing: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        custom = dict(existing or {})
        classification = data.get('classification') or []
        if isinstance(classification, str):
            classification = [classification]
        custom.update({
            'asset_configuration': blank_to_none(data.get('asset_configuration')) or '',
            'classification': list(classification),
            'currency': blank_to_none(data.get('currency')) or DEFAULT_CURRENCY,
            'vendor': blank_to_none(data.get('purchased_from')) or '',
            'photo_url': blank_to_none(data.get('photo_url')),
            'site_id': parse_int(data.get('site_id')),
        })
        return custom

    @staticmethod
    def _column_values_from_form(data: Dict[str, Any]) -> Dict[str, Any]:
        model = blank_to_none(data.get('model'))
        return {
            'asset_tag': blank_to_none(data.get('asset_tag')),
            'name': model or 'Unnamed Asset',
            'category_id': parse_int(data.get('category_id')),
            'location_id': parse_int(data.get('location_id')),
            'department_id': parse_int(data.get('department_id')),
            'make_id': parse_int(data.get('make_id')),
            'vendor_id': parse_int(data.get('vendor_id')),
            'model': model,
            'serial_number': blank_to_none(data.get('serial_number')),
            'purchase_price': parse_amount(data.get('cost'), 'Cost'),
            'description': blank_to_none(data.get('description')),
            'purchase_date': parse_date(data.get('purchase_date')),
            'warranty_expiry': parse_date(data.get('warranty_expiry')),
        }

    @classmethod
    def create(
        cls,
        tenant_id: int,
        data: Dict[str, Any],
        created_by_id: Optional[int] = None,
        organisation_id: Optional[int] = None,
    ) -> 'AssetContext':
        """
        Create an asset from form data and record a 'created' history row.

        The asset tag doubles as the internal asset id; without a tag an
        'AST-<ms>' id is generated.

        Raises:
            ValueError: On missing required fields or a duplicate tag
        """
        cls.validate_form(data)
        values = cls._column_values_from_form(data)
        cls.ensure_unique_tag(tenant_id, values['asset_tag'])

        asset_id = values['asset_tag'] or f'AST-{int(datetime.utcnow().timestamp() * 1000)}'
        asset = Asset(
            tenant_id=tenant_id,
            organisation_id=organisation_id,
            asset_id=asset_id,
            status=asset_status.AVAILABLE,
            is_active=True,
            custom_fields=cls._custom_fields_from_form(data),
            created_by_id=created_by_id,
            updated_by_id=created_by_id,
            **values,
        )
        db.session.add(asset)
        db.session.commit()
        logger.info(f"Asset {asset.asset_tag or asset.asset_id} created (id={asset.id})")

        context = cls(asset)
        try:
            context.log_history(
                'created',
                performed_by=created_by_id,
                new_value=asset.asset_tag or asset.asset_id,
                details={
                    'name': asset.name,
                    'category_id': asset.category_id,
                    'serial_number': asset.serial_number,
                    'model': asset.model,
                    'status': asset.status,
                },
            )
        except Exception as e:
            db.session.rollback()
            logger.error(f"Failed to log asset creation for asset {asset.id}: {e}")
        return context

    def _resolve_lookup(self, field: str, value) -> str:
        if value in (None, ''):
            return ''
        model, _ = LOOKUP_FIELDS[field]
        row = db.session.get(model, value)
        return row.name if row is not None else str(value)

    def _resolve_site(self, value) -> str:
        if not value:
            return ''
        site = db.session.get(Site, value)
        return site.name if site is not None else str(value)

    def edit(self, data: Dict[str, Any], updated_by_id: Optional[int] = None) -> List[AssetHistory]:
        """
        Apply form data to the asset and log the changes.

        A status change gets its own 'status_changed' row; every other change
        is consolidated into one 'fields_updated' row. A failure while logging
        is logged and does not undo the edit.

        Returns:
            The history rows written
        """
        self.validate_form(data)
        values = self._column_values_from_form(data)
        status = blank_to_none(data.get('status')) or self._asset.status
        if not asset_status.is_valid_status(status):
            raise ValueError(f'Invalid status: {status}')
        values['status'] = status
        self.ensure_unique_tag(self.tenant_id, values['asset_tag'], exclude_id=self._asset.id)

        old_values = {field: getattr(self._asset, field) for field in TRACKED_FIELDS}
        old_custom = dict(self._asset.custom)
        new_custom = self._custom_fields_from_form(data, existing=old_custom)

        for field, value in values.items():
            setattr(self._asset, field, value)
        self._asset.custom_fields = new_custom
        self._asset.updated_by_id = updated_by_id
        db.session.commit()
        logger.info(f"Asset {self._asset.id} updated by user {updated_by_id}")

        try:
            return self._log_edit(old_values, values, old_custom, new_custom, updated_by_id)
        except Exception as e:
            db.session.rollback()
            logger.error(f"Failed to log asset changes for asset {self._asset.id}: {e}")
            return []

    def _log_edit(self, old_values, new_values, old_custom, new_custom, performed_by) -> List[AssetHistory]:
        changes = []
        status_change = None

        for field in TRACKED_FIELDS:
            old_raw, new_raw = old_values.get(field), new_values.get(field)
            if display_value(old_raw) == display_value(new_raw):
                continue
            if field in LOOKUP_FIELDS:
                old_display = self._resolve_lookup(field, old_raw)
                new_display = self._resolve_lookup(field, new_raw)
            else:
                old_display, new_display = display_value(old_raw), display_value(new_raw)
            if field == 'status':
                status_change = (old_display or None, new_display or None)
            else:
                changes.append({'field': field_label(field), 'old': old_display or None, 'new': new_display or None})

        for key, label in CUSTOM_FIELD_LABELS:
            old_raw, new_raw = old_custom.get(key), new_custom.get(key)
            if display_value(old_raw) == display_value(new_raw):
                continue
            if key == 'site_id':
                old_display, new_display = self._resolve_site(old_raw), self._resolve_site(new_raw)
            else:
                old_display, new_display = display_value(old_raw), display_value(new_raw)
            changes.append({'field': label, 'old': old_display or None, 'new': new_display or None})

        rows = []
        if status_change:
            rows.append(self.log_history(
                'status_changed',
                performed_by=performed_by,
                old_value=status_change[0],
                new_value=status_change[1],
                details={'field': 'Status', 'old': status_change[0], 'new': status_change[1]},
                commit=False,
            ))
        if changes:
            count = len(changes)
            rows.append(self.log_history(
                'fields_updated',
                performed_by=performed_by,
                old_value=f"{count} field{'s' if count > 1 else ''} updated",
                new_value=', '.join(change['field'] for change in changes),
                details={'changes': changes},
                commit=False,
            ))
        if rows:
            db.session.commit()
        return rows

    def soft_delete(self, deleted_by_id: Optional[int] = None) -> None:
        self._asset.is_active = False
        self._asset.updated_by_id = deleted_by_id
        db.session.commit()
        logger.info(f"Asset {self._asset.id} deactivated by user {deleted_by_id}")
