"""
ITAM asset models
"""

from itam.data.assets.lookups import Category, Site, Location, Department, Make, Vendor
from itam.data.assets.category_tag_format import CategoryTagFormat
from itam.data.assets.asset import Asset
from itam.data.assets.asset_history import AssetHistory
from itam.data.assets.asset_assignment import AssetAssignment
from itam.data.assets.repair import Repair
from itam.data.assets.reservation import AssetReservation
from itam.data.assets.maintenance_schedule import MaintenanceSchedule
from itam.data.assets.document import AssetDocument
from itam.data.assets.asset_link import AssetLink
from itam.data.assets.asset_audit import AssetAudit
from itam.data.assets.purchase_order import PurchaseOrder

__all__ = [
    'Category', 'Site', 'Location', 'Department', 'Make', 'Vendor',
    'CategoryTagFormat', 'Asset', 'AssetHistory', 'AssetAssignment', 'Repair',
    'AssetReservation', 'MaintenanceSchedule', 'AssetDocument', 'AssetLink',
    'AssetAudit', 'PurchaseOrder',
]
