"""
Users API Routes

User administration, restricted to super admins.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from revenue.ledger import Role

from ..auth import User, hash_password, require_super_admin
from ..database import execute_insert, execute_query, execute_write

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

USER_COLUMNS = "id, name, email, username, role"


class UserOut(BaseModel):
    """User as returned by the API (never includes the password)."""

    id: int
    name: str
    email: str
    username: str
    role: Role


class UserInput(BaseModel):
    """Create/update payload."""

    name: str | None = None
    email: str | None = None
    username: str | None = None
    password: str | None = None
    role: str | None = None


def _fetch_user(user_id: int) -> dict | None:
    rows = execute_query(f"SELECT {USER_COLUMNS} FROM users WHERE id = :id", {"id": user_id})
    return rows[0] if rows else None


def _parse_role(value: str) -> Role:
    try:
        return Role.parse(value)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid role")


def _ensure_unique(username: str, email: str, exclude_id: int | None = None) -> None:
    query = "SELECT id FROM users WHERE (username = :username OR email = :email)"
    params = {"username": username, "email": email}
    if exclude_id is not None:
        query += " AND id <> :exclude_id"
        params["exclude_id"] = exclude_id

    if execute_query(query, params):
        raise HTTPException(status_code=400, detail="Username or email already exists")


@router.get("", response_model=list[UserOut])
async def list_users(
    user: User = Depends(require_super_admin),
) -> list[UserOut]:
    """List all users ordered by name."""
    rows = execute_query(f"SELECT {USER_COLUMNS} FROM users ORDER BY name")
    return [UserOut(**row) for row in rows]


@router.post("", response_model=UserOut, status_code=201)
async def create_user(
    input_data: UserInput,
    user: User = Depends(require_super_admin),
) -> UserOut:
    """Create a user.

    Args:
        input_data: Name, email, username, password and role (all required)
        user: Authenticated super admin

    Returns:
        Created user
    """
    if not all([input_data.name, input_data.email, input_data.username, input_data.password, input_data.role]):
        raise HTTPException(
            status_code=400,
            detail="Name, email, username, password, and role are required",
        )

    role = _parse_role(input_data.role)
    _ensure_unique(input_data.username, input_data.email)

    user_id = execute_insert("users", {
        "name": input_data.name,
        "email": input_data.email,
        "username": input_data.username,
        "password": hash_password(input_data.password),
        "role": role.value,
    })

    logger.info(f"User {input_data.username} ({role.value}) created by {user.username}")
    return UserOut(**_fetch_user(user_id))


@router.put("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: int,
    input_data: UserInput,
    user: User = Depends(require_super_admin),
) -> UserOut:
    """Update a user; the password changes only when provided.

    Args:
        user_id: User ID
        input_data: Name, email, username, role and optional password
        user: Authenticated super admin

    Returns:
        Updated user
    """
    if _fetch_user(user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")

    if not all([input_data.name, input_data.email, input_data.username, input_data.role]):
        raise HTTPException(status_code=400, detail="Name, email, username, and role are required")

    role = _parse_role(input_data.role)
    _ensure_unique(input_data.username, input_data.email, exclude_id=user_id)

    query = "UPDATE users SET name = :name, email = :email, username = :username, role = :role"
    params = {
        "id": user_id,
        "name": input_data.name,
        "email": input_data.email,
        "username": input_data.username,
        "role": role.value,
    }

    if input_data.password:
        query += ", password = :password"
        params["password"] = hash_password(input_data.password)

    execute_write(query + " WHERE id = :id", params)

    return UserOut(**_fetch_user(user_id))


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    user: User = Depends(require_super_admin),
) -> dict:
    """Delete a user who has not authored any transaction.

    Args:
        user_id: User ID
        user: Authenticated super admin

    Returns:
        Confirmation message
    """
    if user_id == user.id:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")

    usage = execute_query(
        "SELECT COUNT(*) AS count FROM transactions WHERE created_by = :id",
        {"id": user_id},
    )
    if usage[0]["count"] > 0:
        raise HTTPException(
            status_code=400,
            detail="This user has created transactions and cannot be deleted",
        )

    deleted = execute_write("DELETE FROM users WHERE id = :id", {"id": user_id})
    if deleted == 0:
        raise HTTPException(status_code=404, detail="User not found")

    logger.info(f"User {user_id} deleted by {user.username}")
    return {"message": "User deleted successfully"}
