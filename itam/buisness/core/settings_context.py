"""
Settings Context
Reads and writes JSON preferences in itam_settings.

A setting belongs either to one user (user_id set) or to the whole tenant
(user_id NULL). Lookups for a user never fall back to the tenant value; the
caller decides defaults.
"""

from typing import Any, Optional
from itam import db
from itam.data.core.settings import Setting
from itam.logger import get_logger

logger = get_logger("itam.buisness.core.settings")


class SettingsContext:

    def __init__(self, tenant_id: int, user_id: Optional[int] = None):
        self.tenant_id = tenant_id
        self.user_id = user_id

    def _row(self, key: str) -> Optional[Setting]:
        return Setting.query.filter_by(tenant_id=self.tenant_id, user_id=self.user_id, key=key).first()

    def get(self, key: str, default: Any = None) -> Any:
        row = self._row(key)
        if row is None or row.value is None:
            return default
        return row.value

    def set(self, key: str, value: Any, commit: bool = True) -> Setting:
        row = self._row(key)
        if row is None:
            row = Setting(tenant_id=self.tenant_id, user_id=self.user_id, key=key)
            db.session.add(row)
        row.value = value
        if commit:
            db.session.commit()
        scope = f'user {self.user_id}' if self.user_id else 'tenant'
        logger.debug(f"Setting '{key}' saved for {scope} (tenant {self.tenant_id})")
        return row

    def delete(self, key: str) -> bool:
        row = self._row(key)
        if row is None:
            return False
        db.session.delete(row)
        db.session.commit()
        return True
