"""
Asset List Service
Presentation service for the asset list page.

Handles:
- Filtered, tenant-scoped asset queries (search, status, category)
- Sorting by list column id
- Page size/offset handling and the "from–to of total" label
- Form and filter option retrieval
"""

from typing import Dict, List, Optional, Tuple
from flask import Request
from flask_sqlalchemy.pagination import Pagination
from itam.data.assets.asset import Asset
from itam.data.assets.lookups import Category, Department, Location, Make, Site, Vendor
from itam.buisness.assets import asset_status

PAGE_SIZES = (25, 50, 100)
DEFAULT_PAGE_SIZE = 25

# List column id -> Asset column
SORT_MAP = {
    'asset_tag': Asset.asset_tag,
    'name': Asset.name,
    'status': Asset.status,
    'model': Asset.model,
    'serial_number': Asset.serial_number,
    'description': Asset.description,
    'cost': Asset.purchase_price,
    'purchase_date': Asset.purchase_date,
    'assigned_to': Asset.assigned_to,
    'event_date': Asset.checked_out_at,
    'event_due_date': Asset.expected_return_date,
    'event_notes': Asset.check_out_notes,
    'category': Asset.category_id,
    'location': Asset.location_id,
    'department': Asset.department_id,
    'make': Asset.make_id,
    'created_at': Asset.created_at,
}


def normalize_page(page: Optional[int]) -> int:
    return page if page and page > 0 else 1


def normalize_page_size(page_size: Optional[int]) -> int:
    return page_size if page_size in PAGE_SIZES else DEFAULT_PAGE_SIZE


def page_offsets(page: int, page_size: int) -> Tuple[int, int]:
    """(offset, limit) for a 1-based page"""
    page = normalize_page(page)
    return (page - 1) * page_size, page_size


def range_label(page: int, page_size: int, total: int) -> str:
    """'26–50 of 120'; '0 of 0' when there is nothing to show"""
    if not total:
        return '0 of 0'
    offset, _ = page_offsets(page, page_size)
    start = min(offset + 1, total)
    end = min(offset + page_size, total)
    return f'{start}–{end} of {total}'


class AssetListService:
    """
    Service for asset list presentation data.

    Provides methods for:
    - Building filtered asset queries
    - Retrieving filter and form options
    - Paginating asset lists
    """

    @staticmethod
    def build_filtered_query(
        tenant_id: int,
        search: Optional[str] = None,
        status: Optional[str] = None,
        category_id: Optional[int] = None,
        sort: Optional[str] = None,
        direction: str = 'desc',
    ):
        """
        Build a filtered asset query.

        Args:
            tenant_id: Tenant whose assets are listed
            search: Partial match on name, asset tag or serial number
            status: Exact status
            category_id: Category filter
            sort: List column id; unknown values fall back to newest first
            direction: 'asc' or 'desc'

        Returns:
            SQLAlchemy query object
        """
        query = Asset.query.filter(Asset.tenant_id == tenant_id, Asset.is_active.is_(True))

        if search:
            pattern = f'%{search.strip()}%'
            query = query.filter(
                Asset.name.ilike(pattern)
                | Asset.asset_tag.ilike(pattern)
                | Asset.serial_number.ilike(pattern)
            )

        if status:
            query = query.filter(Asset.status == status)

        if category_id:
            query = query.filter(Asset.category_id == category_id)

        column = SORT_MAP.get(sort) if sort else None
        if column is None:
            return query.order_by(Asset.created_at.desc(), Asset.id.desc())
        order = column.asc() if direction == 'asc' else column.desc()
        return query.order_by(order, Asset.id.desc())

    @staticmethod
    def current_filters(request: Request) -> Dict:
        return {
            'search': (request.args.get('search') or '').strip() or None,
            'status': request.args.get('status') or None,
            'category_id': request.args.get('category_id', type=int),
            'sort': request.args.get('sort') or None,
            'direction': 'asc' if request.args.get('direction') == 'asc' else 'desc',
        }

    @staticmethod
    def get_list_data(
        request: Request,
        tenant_id: int,
        page: int = 1,
        per_page: int = DEFAULT_PAGE_SIZE,
    ) -> Tuple[Pagination, Dict, Dict]:
        """
        Get paginated asset list with filters applied.

        Returns:
            Tuple of (pagination object, filter options dict, current filters dict)
        """
        filters = AssetListService.current_filters(request)
        query = AssetListService.build_filtered_query(tenant_id, **filters)

        page = normalize_page(page)
        per_page = normalize_page_size(per_page)
        assets = query.paginate(page=page, per_page=per_page, error_out=False)

        filter_options = {
            'statuses': asset_status.status_choices(),
            'categories': AssetListService._active(Category, tenant_id),
            'page_sizes': PAGE_SIZES,
        }
        filters['per_page'] = per_page
        filters['range_label'] = range_label(page, per_page, assets.total or 0)
        return assets, filter_options, filters

    @staticmethod
    def get_page_assets(request: Request, tenant_id: int, page: int = 1,
                        per_page: int = DEFAULT_PAGE_SIZE) -> List[Asset]:
        """The assets on one list page, in list order (used by the export)"""
        filters = AssetListService.current_filters(request)
        query = AssetListService.build_filtered_query(tenant_id, **filters)
        pagination = query.paginate(page=normalize_page(page), per_page=normalize_page_size(per_page),
                                    error_out=False)
        return pagination.items

    @staticmethod
    def _active(model, tenant_id: int):
        return model.query.filter(
            model.tenant_id == tenant_id, model.is_active.is_(True),
        ).order_by(model.name).all()

    @staticmethod
    def get_form_options(tenant_id: int) -> Dict:
        """
        Get form options for asset creation/editing.

        Returns:
            Dictionary of option lists keyed by form field
        """
        return {
            'categories': AssetListService._active(Category, tenant_id),
            'sites': AssetListService._active(Site, tenant_id),
            'locations': AssetListService._active(Location, tenant_id),
            'departments': AssetListService._active(Department, tenant_id),
            'makes': AssetListService._active(Make, tenant_id),
            'vendors': AssetListService._active(Vendor, tenant_id),
            'statuses': asset_status.status_choices(),
        }
