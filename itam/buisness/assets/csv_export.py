"""
CSV export of the asset list

Columns follow the user's visible columns in fixed system order. Values are
resolved per column id so the export matches what the list shows.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional
from itam.data.assets.asset import Asset
from itam.data.assets.lookups import Site
from itam.buisness.assets import column_settings

CSV_MIMETYPE = 'text/csv;charset=utf-8'


def escape_csv(value: Any) -> str:
    """Quote a value containing a comma, quote or newline; double embedded quotes"""
    if value is None:
        return ''
    text = str(value)
    if ',' in text or '"' in text or '\n' in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def _format(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, datetime):
        return value.strftime('%Y-%m-%d %H:%M')
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (Decimal, float)):
        return f'{value:.2f}'
    if isinstance(value, (list, tuple)):
        return ', '.join(str(item) for item in value if item not in (None, ''))
    return str(value)


def _name(row) -> Optional[str]:
    return row.name if row is not None else None


class _SiteNames:
    """Site names for the export, loaded once per tenant"""

    def __init__(self, assets: List[Asset]):
        tenant_ids = {asset.tenant_id for asset in assets}
        self.names = {}
        if tenant_ids:
            for site in Site.query.filter(Site.tenant_id.in_(tenant_ids)).all():
                self.names[site.id] = site.name

    def __call__(self, asset: Asset) -> Optional[str]:
        site_id = asset.custom.get('site_id')
        if site_id:
            return self.names.get(site_id)
        if asset.location is not None and asset.location.site is not None:
            return asset.location.site.name
        return None


def _value_resolvers(sites: _SiteNames) -> Dict[str, Callable[[Asset], Any]]:
    return {
        'asset_photo': lambda a: a.custom.get('photo_url'),
        'asset_tag': lambda a: a.asset_tag,
        'status': lambda a: a.status,
        'category': lambda a: _name(a.category),
        'make': lambda a: _name(a.make),
        'model': lambda a: a.model,
        'serial_number': lambda a: a.serial_number,
        'asset_configuration': lambda a: a.custom.get('asset_configuration'),
        'description': lambda a: a.description,
        'cost': lambda a: a.purchase_price,
        'purchase_date': lambda a: a.purchase_date,
        'purchased_from': lambda a: a.custom.get('vendor'),
        'asset_classification': lambda a: a.custom.get('classification'),
        'department': lambda a: _name(a.department),
        'location': lambda a: _name(a.location),
        'site': sites,
        'event_date': lambda a: a.checked_out_at,
        'event_due_date': lambda a: a.expected_return_date,
        'event_notes': lambda a: a.check_out_notes,
        'created_by': lambda a: a.created_by.display_name if a.created_by is not None else None,
        'created_at': lambda a: a.created_at,
        'assigned_to': lambda a: a.assigned_to,
    }


def build_csv(assets: Iterable[Asset], columns: List[Dict[str, Any]]) -> str:
    """
    Render assets as CSV text.

    Args:
        assets: Records in the order they should appear
        columns: Column settings; only visible ones are exported, in system order

    Returns:
        Header row plus one row per asset, joined with '\\n'
    """
    assets = list(assets)
    visible = sorted(column_settings.visible_columns(columns), key=lambda c: c['order_index'])
    resolvers = _value_resolvers(_SiteNames(assets))

    lines = [','.join(escape_csv(column['label']) for column in visible)]
    for asset in assets:
        lines.append(','.join(
            escape_csv(_format(resolvers[column['id']](asset))) for column in visible
        ))
    return '\n'.join(lines)


def export_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"assets-export-{now.strftime('%Y-%m-%d-%H%M')}.csv"
