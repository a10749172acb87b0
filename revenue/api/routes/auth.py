"""
Auth API Routes

Login and current-user endpoints.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..auth import User, create_access_token, get_current_user, verify_password
from ..database import execute_query
from .users import UserOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    """Login credentials."""

    username: str | None = None
    password: str | None = None


class LoginResponse(BaseModel):
    """Successful login."""

    user: UserOut
    token: str


@router.post("/login", response_model=LoginResponse)
async def login(credentials: LoginRequest) -> LoginResponse:
    """Authenticate with username and password.

    Args:
        credentials: Username and password

    Returns:
        User (without password) and bearer token
    """
    if not credentials.username or not credentials.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    rows = execute_query(
        "SELECT id, name, email, username, password, role FROM users WHERE username = :username",
        {"username": credentials.username},
    )

    if not rows or not verify_password(credentials.password, rows[0]["password"]):
        logger.info(f"Failed login for username {credentials.username!r}")
        raise HTTPException(status_code=401, detail="Invalid username or password")

    user = {k: v for k, v in rows[0].items() if k != "password"}
    token = create_access_token(user)

    logger.info(f"User {user['username']} logged in")
    return LoginResponse(user=UserOut(**user), token=token)


@router.get("/me", response_model=UserOut)
async def get_me(
    user: User = Depends(get_current_user),
) -> UserOut:
    """Get the current user as stored in the database."""
    rows = execute_query(
        "SELECT id, name, email, username, role FROM users WHERE id = :id",
        {"id": user.id},
    )

    if not rows:
        raise HTTPException(status_code=404, detail="User not found")

    return UserOut(**rows[0])
