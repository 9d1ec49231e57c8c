"""Table exports as CSV, JSON or Excel, built with pandas DataFrames."""

import io
import json
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from sqlalchemy.orm import Session

from submanager.accounts.dao import AccountDAO
from submanager.accounts.schemas import AccountRead
from submanager.activity.dao import ActivityLogDAO
from submanager.activity.schemas import ActivityLogRead
from submanager.customers.dao import CustomerDAO
from submanager.expenses.dao import ExpenseDAO
from submanager.expenses.schemas import ExpenseRead
from submanager.packages.dao import PackageDAO
from submanager.packages.schemas import PackageRead
from submanager.subscriptions.status import effective_status

CUSTOMER_COLUMNS = ["id", "name", "phone", "email", "package", "startDate", "endDate", "status"]


class ExportTable(str, Enum):
    ACCOUNTS = "accounts"
    PACKAGES = "packages"
    CUSTOMERS = "customers"
    ACTIVITY = "activity"
    EXPENSES = "expenses"


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"
    XLSX = "xlsx"


MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.JSON: "application/json",
    ExportFormat.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def _excel_cell(value: Any) -> Any:
    """Spreadsheet cells hold scalars; nested values (price tiers) are written as JSON."""
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return value


class ExportService:
    def __init__(self, db: Session, today: Optional[date] = None):
        self.db = db
        self.today = today

    # ===== ROWS =====

    def _accounts(self) -> List[Dict[str, Any]]:
        return [
            AccountRead.model_validate(row).model_dump(mode="json", by_alias=True, exclude={"details"})
            for row in AccountDAO(self.db).get_all()
        ]

    def _packages(self) -> List[Dict[str, Any]]:
        return [
            PackageRead.model_validate(row).model_dump(mode="json", by_alias=True, exclude={"details"})
            for row in PackageDAO(self.db).get_all()
        ]

    def _customers(self) -> List[Dict[str, Any]]:
        """One row per subscription; customers without history get one blank row."""
        packages = PackageDAO(self.db).get_map()
        rows = []
        for customer in CustomerDAO(self.db).get_all():
            base = {
                "id": customer.id,
                "name": customer.name,
                "phone": customer.phone,
                "email": customer.email or "",
            }
            if not customer.subscriptions:
                rows.append({**base, "package": "", "startDate": "", "endDate": "", "status": ""})
                continue
            for subscription in customer.subscriptions:
                package = packages.get(subscription.package_id)
                rows.append(
                    {
                        **base,
                        "package": package.name if package else "Unknown Package",
                        "startDate": subscription.start_date.isoformat(),
                        "endDate": subscription.end_date.isoformat(),
                        "status": effective_status(subscription, self.today).value,
                    }
                )
        return rows

    def _activity(self) -> List[Dict[str, Any]]:
        return [
            ActivityLogRead.model_validate(row).model_dump(mode="json", by_alias=True)
            for row in ActivityLogDAO(self.db).get_all()
        ]

    def _expenses(self) -> List[Dict[str, Any]]:
        return [
            ExpenseRead.model_validate(row).model_dump(mode="json", by_alias=True)
            for row in ExpenseDAO(self.db).get_all()
        ]

    def build_frame(self, table: ExportTable) -> pd.DataFrame:
        loaders = {
            ExportTable.ACCOUNTS: self._accounts,
            ExportTable.PACKAGES: self._packages,
            ExportTable.CUSTOMERS: self._customers,
            ExportTable.ACTIVITY: self._activity,
            ExportTable.EXPENSES: self._expenses,
        }
        rows = loaders[table]()
        if table == ExportTable.CUSTOMERS:
            return pd.DataFrame(rows, columns=CUSTOMER_COLUMNS)
        return pd.DataFrame(rows)

    # ===== RENDERING =====

    def export(self, table: ExportTable, fmt: ExportFormat) -> Tuple[bytes, str, str]:
        """Return (content, media type, file name)."""
        df = self.build_frame(table)
        file_name = f"{table.value}_{(self.today or date.today()).isoformat()}.{fmt.value}"

        if fmt == ExportFormat.CSV:
            content = df.to_csv(index=False).encode("utf-8")
        elif fmt == ExportFormat.JSON:
            content = df.to_json(orient="records", date_format="iso").encode("utf-8")
        else:
            df = df.apply(lambda column: column.map(_excel_cell))
            excel_buffer = io.BytesIO()
            with pd.ExcelWriter(excel_buffer, engine="openpyxl") as writer:
                df.to_excel(writer, sheet_name=table.value[:31], index=False)
            content = excel_buffer.getvalue()

        return content, MEDIA_TYPES[fmt], file_name
