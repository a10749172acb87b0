"""
Ledger Reconciliation Module

Computes opening/closing balances and period totals from transaction rows.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

ALL_INSTITUTIONS = "All Institutions"
ALL_TYPES = "All Types"

# Value the client sends for an unset filter
ALL_FILTER = "all"

# Amounts are stored as NUMERIC(15,2)
MONEY_DIGITS = 15
MONEY_PLACES = 2
CENT = Decimal("0.01")


class TransactionType(Enum):
    """Direction of a ledger transaction."""
    RECEIPT = "receipt"
    PAYMENT = "payment"


def to_decimal(value: Any) -> Decimal:
    """Convert a database or JSON amount to Decimal without float drift."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def fits_money_column(value: Decimal) -> bool:
    """Return True if the value is stored in NUMERIC(15,2) without rounding."""
    if not value.is_finite():
        return False
    if abs(value) >= Decimal(10) ** (MONEY_DIGITS - MONEY_PLACES):
        return False
    return value == value.quantize(CENT)


def parse_opening_balance(raw: Any) -> Decimal:
    """Parse the stored opening balance setting.

    Args:
        raw: Stored setting value (text) or None

    Returns:
        Opening balance, 0 if absent, unparsable or out of range
    """
    if raw is None or str(raw).strip() == "":
        return Decimal("0")
    try:
        balance = Decimal(str(raw).strip())
    except InvalidOperation:
        logger.warning(f"Unparsable opening balance setting: {raw!r}")
        return Decimal("0")
    if not fits_money_column(balance):
        logger.warning(f"Opening balance setting out of range: {raw!r}")
        return Decimal("0")
    return balance


def normalize_filter(value: Any) -> int | None:
    """Normalize an optional id filter; '' and 'all' mean no filter."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if value == "" or value.lower() == ALL_FILTER:
            return None
    return int(value)


@dataclass
class ReportFilter:
    """Report query parameters."""

    start_date: date
    end_date: date
    institution_id: int | None = None
    type_id: int | None = None

    def validate(self) -> tuple[bool, str]:
        """Validate the date range."""
        if self.start_date is None or self.end_date is None:
            return False, "Start date and end date are required"
        if self.start_date > self.end_date:
            return False, "Start date must not be after end date"
        return True, ""


@dataclass
class ReconciliationReport:
    """Reconciliation result for a period."""

    start_date: date
    end_date: date
    opening_balance: Decimal = Decimal("0")
    transactions: list[dict] = field(default_factory=list)
    institution_name: str = ALL_INSTITUTIONS
    type_name: str = ALL_TYPES

    @property
    def total_receipts(self) -> Decimal:
        """Sum of receipt amounts."""
        return sum(
            (to_decimal(t["amount"]) for t in self.transactions
             if t["transaction_type"] == TransactionType.RECEIPT.value),
            Decimal("0"),
        )

    @property
    def total_payments(self) -> Decimal:
        """Sum of payment amounts."""
        return sum(
            (to_decimal(t["amount"]) for t in self.transactions
             if t["transaction_type"] == TransactionType.PAYMENT.value),
            Decimal("0"),
        )

    @property
    def closing_balance(self) -> Decimal:
        """Opening balance plus receipts minus payments."""
        return self.opening_balance + self.total_receipts - self.total_payments

    def to_dict(self) -> dict:
        return {
            "transactions": self.transactions,
            "openingBalance": float(self.opening_balance),
            "totalReceipts": float(self.total_receipts),
            "totalPayments": float(self.total_payments),
            "closingBalance": float(self.closing_balance),
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "institutionName": self.institution_name,
            "typeName": self.type_name,
        }


class LedgerReconciliation:
    """Builds reconciliation reports from fetched transaction rows."""

    def reconcile(
        self,
        report_filter: ReportFilter,
        transactions: list[dict],
        opening_balance: Decimal = Decimal("0"),
        institution_name: str | None = None,
        type_name: str | None = None,
    ) -> ReconciliationReport:
        """Build a reconciliation report.

        Rows outside the period or not matching the filters are dropped, so
        callers may pass a superset. Rows are ordered by date then id.

        Args:
            report_filter: Period and optional filters
            transactions: Transaction rows (dicts with database column names)
            opening_balance: Balance carried into the period
            institution_name: Resolved institution name, if filtered
            type_name: Resolved receipt type name, if filtered

        Returns:
            ReconciliationReport
        """
        selected = [
            t for t in transactions
            if self._in_period(t, report_filter) and self._matches(t, report_filter)
        ]
        selected.sort(key=lambda t: (self._row_date(t), t.get("id") or 0))

        report = ReconciliationReport(
            start_date=report_filter.start_date,
            end_date=report_filter.end_date,
            opening_balance=to_decimal(opening_balance),
            transactions=selected,
            institution_name=institution_name or ALL_INSTITUTIONS,
            type_name=type_name or ALL_TYPES,
        )

        logger.debug(
            f"Reconciled {len(selected)} transactions "
            f"{report_filter.start_date}..{report_filter.end_date}: "
            f"closing {report.closing_balance}"
        )
        return report

    @staticmethod
    def _row_date(row: dict) -> date:
        value = row.get("date")
        if isinstance(value, str):
            return date.fromisoformat(value[:10])
        return value

    def _in_period(self, row: dict, report_filter: ReportFilter) -> bool:
        return report_filter.start_date <= self._row_date(row) <= report_filter.end_date

    @staticmethod
    def _matches(row: dict, report_filter: ReportFilter) -> bool:
        if report_filter.institution_id is not None and row.get("institution_id") != report_filter.institution_id:
            return False
        if report_filter.type_id is not None and row.get("type_id") != report_filter.type_id:
            return False
        return True
