"""
Reports API Routes

Reconciliation report and opening balance endpoints.
"""

import logging
from datetime import date as Date
from decimal import Decimal, InvalidOperation
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from revenue.backup import upsert_setting
from revenue.ledger import (
    LedgerReconciliation,
    ReportFilter,
    fits_money_column,
    normalize_filter,
    parse_opening_balance,
    transaction_scope,
)

from ..auth import User, get_current_user, require_privileged
from ..database import engine, execute_query
from .transactions import TRANSACTION_SELECT, Transaction, build_where, to_transaction

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])

OPENING_BALANCE_KEY = "opening_balance"


class ReconciliationResponse(BaseModel):
    """Reconciliation report for a period."""

    transactions: list[Transaction]
    openingBalance: float
    totalReceipts: float
    totalPayments: float
    closingBalance: float
    startDate: Date
    endDate: Date
    institutionName: str
    typeName: str


class OpeningBalanceInput(BaseModel):
    """Opening balance payload."""

    openingBalance: Any = None


class OpeningBalanceResponse(BaseModel):
    message: str | None = None
    openingBalance: float


def get_opening_balance() -> Decimal:
    """Read the opening balance setting (0 if unset)."""
    rows = execute_query(
        "SELECT setting_value FROM settings WHERE setting_key = :key",
        {"key": OPENING_BALANCE_KEY},
    )
    return parse_opening_balance(rows[0]["setting_value"] if rows else None)


def _lookup_name(table: str, row_id: int | None) -> str | None:
    if row_id is None:
        return None
    rows = execute_query(f"SELECT name FROM {table} WHERE id = :id", {"id": row_id})
    return rows[0]["name"] if rows else None


def _parse_date(value: str) -> Date:
    try:
        return Date.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date: {value}")


def _parse_filter(value: str | None, label: str) -> int | None:
    try:
        return normalize_filter(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {label}")


@router.get("", response_model=ReconciliationResponse)
async def get_report(
    startDate: str | None = Query(None),
    endDate: str | None = Query(None),
    institutionId: str | None = Query(None),
    typeId: str | None = Query(None),
    user: User = Depends(get_current_user),
) -> ReconciliationResponse:
    """Generate a reconciliation report for a date range.

    Args:
        startDate: First day of the period (YYYY-MM-DD, required)
        endDate: Last day of the period (YYYY-MM-DD, required)
        institutionId: Optional institution filter ('all' for none)
        typeId: Optional receipt type filter ('all' for none)
        user: Authenticated user; non-privileged users only see their own transactions

    Returns:
        Opening balance, totals, closing balance and transaction detail
    """
    if not startDate or not endDate:
        raise HTTPException(status_code=400, detail="Start date and end date are required")

    report_filter = ReportFilter(
        start_date=_parse_date(startDate),
        end_date=_parse_date(endDate),
        institution_id=_parse_filter(institutionId, "institution"),
        type_id=_parse_filter(typeId, "receipt type"),
    )

    is_valid, error = report_filter.validate()
    if not is_valid:
        raise HTTPException(status_code=400, detail=error)

    conditions = ["t.date BETWEEN :start_date AND :end_date"]
    filter_params = {
        "start_date": report_filter.start_date.isoformat(),
        "end_date": report_filter.end_date.isoformat(),
    }

    if report_filter.institution_id is not None:
        conditions.append("t.institution_id = :institution_id")
        filter_params["institution_id"] = report_filter.institution_id

    if report_filter.type_id is not None:
        conditions.append("t.type_id = :type_id")
        filter_params["type_id"] = report_filter.type_id

    where_clause, params = build_where(conditions, transaction_scope(user.role, user.id))
    params.update(filter_params)

    rows = execute_query(f"{TRANSACTION_SELECT} {where_clause} ORDER BY t.date, t.id", params)

    report = LedgerReconciliation().reconcile(
        report_filter,
        rows,
        opening_balance=get_opening_balance(),
        institution_name=_lookup_name("institutions", report_filter.institution_id),
        type_name=_lookup_name("receipt_types", report_filter.type_id),
    )

    data = report.to_dict()
    data["transactions"] = [to_transaction(row) for row in report.transactions]

    return ReconciliationResponse(**data)


@router.get("/opening-balance", response_model=OpeningBalanceResponse)
async def read_opening_balance(
    user: User = Depends(get_current_user),
) -> OpeningBalanceResponse:
    """Get the current opening balance."""
    return OpeningBalanceResponse(openingBalance=float(get_opening_balance()))


@router.put("/opening-balance", response_model=OpeningBalanceResponse)
async def update_opening_balance(
    input_data: OpeningBalanceInput,
    user: User = Depends(require_privileged),
) -> OpeningBalanceResponse:
    """Overwrite the opening balance setting.

    Args:
        input_data: New opening balance (number or numeric string)
        user: Authenticated super admin or manager

    Returns:
        Confirmation and the stored balance
    """
    value = input_data.openingBalance
    try:
        if value is None or isinstance(value, bool):
            raise InvalidOperation
        balance = Decimal(str(value).strip())
        if not fits_money_column(balance):
            raise InvalidOperation
    except InvalidOperation:
        raise HTTPException(status_code=400, detail="Valid opening balance is required")

    with engine.begin() as conn:
        upsert_setting(conn, OPENING_BALANCE_KEY, str(balance))

    logger.info(f"Opening balance set to {balance} by {user.username}")
    return OpeningBalanceResponse(
        message="Opening balance updated successfully",
        openingBalance=float(balance),
    )
