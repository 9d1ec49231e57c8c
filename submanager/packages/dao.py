"""Data Access Object for packages."""

from typing import Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from submanager.core.base_dao import BaseDAO
from submanager.packages.models import Package


class PackageDAO(BaseDAO[Package]):
    def __init__(self, db_session: Session):
        super().__init__(Package, db_session)

    def name_taken(self, name: str, exclude_id: Optional[str] = None) -> bool:
        return self.exists_case_insensitive("name", name, exclude_id=exclude_id)

    def get_by_account(self, account_id: str) -> List[Package]:
        return self.get_all_by_field("account_id", account_id)

    def get_map(self) -> Dict[str, Package]:
        """All packages keyed by id, for resolving subscription references."""
        return {package.id: package for package in self.db.execute(select(Package)).scalars()}

    def delete_by_account(self, account_id: str) -> int:
        result = self.db.execute(
            delete(Package)
            .where(Package.account_id == account_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount
