"""
Institutions API Routes

Institutions that receipts and payments are booked against.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..auth import User, get_current_user, require_privileged
from ..database import execute_insert, execute_query, execute_write

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/institutions", tags=["institutions"])


class Institution(BaseModel):
    """Institution model."""

    id: int
    name: str


class NameInput(BaseModel):
    """Create/rename payload."""

    name: str | None = None


def _require_name(input_data: NameInput) -> str:
    name = (input_data.name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Institution name is required")
    return name


def _fetch(institution_id: int) -> dict | None:
    rows = execute_query("SELECT id, name FROM institutions WHERE id = :id", {"id": institution_id})
    return rows[0] if rows else None


@router.get("", response_model=list[Institution])
async def list_institutions(
    user: User = Depends(get_current_user),
) -> list[Institution]:
    """List institutions ordered by name."""
    rows = execute_query("SELECT id, name FROM institutions ORDER BY name")
    return [Institution(**row) for row in rows]


@router.post("", response_model=Institution, status_code=201)
async def create_institution(
    input_data: NameInput,
    user: User = Depends(require_privileged),
) -> Institution:
    """Add an institution."""
    name = _require_name(input_data)
    institution_id = execute_insert("institutions", {"name": name})

    logger.info(f"Institution {name!r} created by {user.username}")
    return Institution(**_fetch(institution_id))


@router.put("/{institution_id}", response_model=Institution)
async def update_institution(
    institution_id: int,
    input_data: NameInput,
    user: User = Depends(require_privileged),
) -> Institution:
    """Rename an institution."""
    name = _require_name(input_data)

    execute_write(
        "UPDATE institutions SET name = :name WHERE id = :id",
        {"id": institution_id, "name": name},
    )

    row = _fetch(institution_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Institution not found")

    return Institution(**row)


@router.delete("/{institution_id}")
async def delete_institution(
    institution_id: int,
    user: User = Depends(require_privileged),
) -> dict:
    """Delete an institution that no transaction references."""
    usage = execute_query(
        "SELECT COUNT(*) AS count FROM transactions WHERE institution_id = :id",
        {"id": institution_id},
    )
    if usage[0]["count"] > 0:
        raise HTTPException(
            status_code=400,
            detail="This institution is used in transactions and cannot be deleted",
        )

    deleted = execute_write("DELETE FROM institutions WHERE id = :id", {"id": institution_id})
    if deleted == 0:
        raise HTTPException(status_code=404, detail="Institution not found")

    logger.info(f"Institution {institution_id} deleted by {user.username}")
    return {"message": "Institution deleted successfully"}
