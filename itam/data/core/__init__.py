"""
Core data models
Tenancy, users and key-value settings shared by the asset module
"""

from itam.data.core.tenant import Tenant
from itam.data.core.user_info.user import User
from itam.data.core.settings import Setting

__all__ = ['Tenant', 'User', 'Setting']
