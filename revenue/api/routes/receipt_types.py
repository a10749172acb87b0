"""
Receipt Types API Routes

Categories of revenue (fees, permits, rates) used to classify transactions.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..auth import User, get_current_user, require_privileged
from ..database import execute_insert, execute_query, execute_write

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/receipt-types", tags=["receipt-types"])


class ReceiptType(BaseModel):
    """Receipt type model."""

    id: int
    name: str


class NameInput(BaseModel):
    """Create/rename payload."""

    name: str | None = None


def _require_name(input_data: NameInput) -> str:
    name = (input_data.name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Receipt type name is required")
    return name


def _fetch(type_id: int) -> dict | None:
    rows = execute_query("SELECT id, name FROM receipt_types WHERE id = :id", {"id": type_id})
    return rows[0] if rows else None


@router.get("", response_model=list[ReceiptType])
async def list_receipt_types(
    user: User = Depends(get_current_user),
) -> list[ReceiptType]:
    """List receipt types ordered by name."""
    rows = execute_query("SELECT id, name FROM receipt_types ORDER BY name")
    return [ReceiptType(**row) for row in rows]


@router.post("", response_model=ReceiptType, status_code=201)
async def create_receipt_type(
    input_data: NameInput,
    user: User = Depends(require_privileged),
) -> ReceiptType:
    """Add a receipt type."""
    name = _require_name(input_data)
    type_id = execute_insert("receipt_types", {"name": name})

    logger.info(f"Receipt type {name!r} created by {user.username}")
    return ReceiptType(**_fetch(type_id))


@router.put("/{type_id}", response_model=ReceiptType)
async def update_receipt_type(
    type_id: int,
    input_data: NameInput,
    user: User = Depends(require_privileged),
) -> ReceiptType:
    """Rename a receipt type."""
    name = _require_name(input_data)

    execute_write(
        "UPDATE receipt_types SET name = :name WHERE id = :id",
        {"id": type_id, "name": name},
    )

    row = _fetch(type_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Receipt type not found")

    return ReceiptType(**row)


@router.delete("/{type_id}")
async def delete_receipt_type(
    type_id: int,
    user: User = Depends(require_privileged),
) -> dict:
    """Delete a receipt type that no transaction references."""
    usage = execute_query(
        "SELECT COUNT(*) AS count FROM transactions WHERE type_id = :id",
        {"id": type_id},
    )
    if usage[0]["count"] > 0:
        raise HTTPException(
            status_code=400,
            detail="This receipt type is used in transactions and cannot be deleted",
        )

    deleted = execute_write("DELETE FROM receipt_types WHERE id = :id", {"id": type_id})
    if deleted == 0:
        raise HTTPException(status_code=404, detail="Receipt type not found")

    logger.info(f"Receipt type {type_id} deleted by {user.username}")
    return {"message": "Receipt type deleted successfully"}
