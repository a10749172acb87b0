"""
Transactions API Routes

Provides endpoints for recording and viewing receipts and payments.
Transactions are immutable once recorded.
"""

import logging
from datetime import date as Date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from revenue.ledger import TransactionType, VisibilityScope, fits_money_column, transaction_scope

from ..auth import User, get_current_user
from ..database import execute_insert, execute_query

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])

# Transaction rows enriched with display names
TRANSACTION_SELECT = """
    SELECT
        t.id,
        t.transaction_type,
        t.amount,
        t.institution_id,
        t.type_id,
        t.date,
        t.receipt_number,
        t.description,
        t.created_by,
        i.name AS institution_name,
        rt.name AS type_name,
        u.name AS created_by_name
    FROM transactions t
    JOIN institutions i ON t.institution_id = i.id
    JOIN receipt_types rt ON t.type_id = rt.id
    JOIN users u ON t.created_by = u.id
"""


class Transaction(BaseModel):
    """Transaction model."""

    id: int
    transaction_type: TransactionType
    amount: float
    institution_id: int
    type_id: int
    date: Date
    receipt_number: str | None
    description: str | None
    created_by: int
    institution_name: str
    type_name: str
    created_by_name: str


class TransactionCreateInput(BaseModel):
    """New transaction payload."""

    transactionType: TransactionType | None = None
    amount: Decimal | None = None
    institutionId: int | None = None
    typeId: int | None = None
    date: str | None = None
    receiptNumber: str | None = None
    description: str | None = None


def build_where(conditions: list[str], scope: VisibilityScope) -> tuple[str, dict]:
    """Combine filter conditions with the caller's visibility scope."""
    all_conditions = conditions + scope.conditions
    where_clause = "WHERE " + " AND ".join(all_conditions) if all_conditions else ""
    return where_clause, dict(scope.params)


def to_transaction(row: dict) -> Transaction:
    return Transaction(**{**row, "amount": float(row["amount"])})


@router.get("", response_model=list[Transaction])
async def list_transactions(
    user: User = Depends(get_current_user),
) -> list[Transaction]:
    """List transactions visible to the caller, newest first.

    Super admins and managers see every transaction; other users only see
    the ones they recorded.

    Args:
        user: Authenticated user

    Returns:
        List of transactions
    """
    where_clause, params = build_where([], transaction_scope(user.role, user.id))

    rows = execute_query(
        f"{TRANSACTION_SELECT} {where_clause} ORDER BY t.date DESC, t.id DESC",
        params,
    )

    return [to_transaction(row) for row in rows]


@router.post("", response_model=Transaction, status_code=201)
async def create_transaction(
    input_data: TransactionCreateInput,
    user: User = Depends(get_current_user),
) -> Transaction:
    """Record a receipt or payment.

    Args:
        input_data: Transaction fields
        user: Authenticated user (recorded as creator)

    Returns:
        Created transaction with display names
    """
    if not all([
        input_data.transactionType,
        input_data.amount,
        input_data.institutionId,
        input_data.typeId,
        input_data.date,
    ]):
        raise HTTPException(
            status_code=400,
            detail="Transaction type, amount, institution, type, and date are required",
        )

    if input_data.amount <= 0:
        raise HTTPException(status_code=400, detail="Amount must be greater than zero")

    if not fits_money_column(input_data.amount):
        raise HTTPException(
            status_code=400,
            detail="Amount must have at most 13 digits and 2 decimal places",
        )

    try:
        txn_date = Date.fromisoformat(input_data.date)
    except ValueError:
        raise HTTPException(status_code=400, detail="Date must be in YYYY-MM-DD format")

    if not execute_query("SELECT id FROM institutions WHERE id = :id", {"id": input_data.institutionId}):
        raise HTTPException(status_code=400, detail="Institution not found")

    if not execute_query("SELECT id FROM receipt_types WHERE id = :id", {"id": input_data.typeId}):
        raise HTTPException(status_code=400, detail="Receipt type not found")

    transaction_id = execute_insert("transactions", {
        "transaction_type": input_data.transactionType.value,
        "amount": str(input_data.amount),
        "institution_id": input_data.institutionId,
        "type_id": input_data.typeId,
        "date": txn_date.isoformat(),
        "receipt_number": input_data.receiptNumber,
        "description": input_data.description,
        "created_by": user.id,
    })

    rows = execute_query(f"{TRANSACTION_SELECT} WHERE t.id = :id", {"id": transaction_id})

    logger.info(
        f"{input_data.transactionType.value} {transaction_id} of {input_data.amount} "
        f"recorded by {user.username}"
    )
    return to_transaction(rows[0])
