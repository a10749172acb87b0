"""
Authentication Module

Provides JWT bearer authentication and role checks for the ledger API.
"""

import logging
import os
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from fastapi import Depends, HTTPException, Header, status
from pydantic import BaseModel

from revenue.ledger import ADMIN_ROLES, PRIVILEGED_ROLES, Role
from revenue.ledger.roles import has_role

logger = logging.getLogger(__name__)

JWT_SECRET = os.getenv("JWT_SECRET", "revenue-ledger-development-secret")
JWT_ALGORITHM = "HS256"
JWT_EXPIRES_HOURS = int(os.getenv("JWT_EXPIRES_HOURS", "24"))

BCRYPT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


class User(BaseModel):
    """Authenticated user model (token claims)."""

    id: int
    name: str
    email: str
    username: str
    role: Role


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    hashed = bcrypt.hashpw(password.encode("utf-8")[:_BCRYPT_MAX_BYTES], bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    return hashed.decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8")[:_BCRYPT_MAX_BYTES], hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.warning("Stored password is not a valid bcrypt hash")
        return False


def create_access_token(user: dict, expires_delta: timedelta | None = None) -> str:
    """Issue a signed token for a user row.

    Args:
        user: User row with id, name, email, username and role
        expires_delta: Token lifetime (defaults to JWT_EXPIRES_HOURS)

    Returns:
        Encoded JWT
    """
    expires_at = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=JWT_EXPIRES_HOURS))
    payload = {
        "id": user["id"],
        "name": user["name"],
        "email": user["email"],
        "username": user["username"],
        "role": Role.parse(user["role"]).value,
        "exp": expires_at,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> User:
    """Verify a token and return its user claims.

    Raises:
        HTTPException: 401 if the token is invalid, expired or malformed
    """
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        return User(
            id=payload["id"],
            name=payload["name"],
            email=payload["email"],
            username=payload["username"],
            role=Role.parse(payload["role"]),
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise _unauthorized("Invalid token")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    authorization: str | None = Header(None),
) -> User:
    """Get current authenticated user from the Authorization header.

    Args:
        authorization: "Bearer <token>"

    Returns:
        Authenticated User

    Raises:
        HTTPException: If authentication fails
    """
    if not authorization:
        raise _unauthorized("Access token required")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _unauthorized("Access token required")

    return decode_access_token(token.strip())


def require_roles(allowed: frozenset[Role]):
    """Dependency factory for role checks.

    Args:
        allowed: Roles permitted to call the endpoint

    Returns:
        Dependency function
    """
    async def check_role(user: User = Depends(get_current_user)) -> User:
        if not has_role(user.role, allowed):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return check_role


# Common role dependencies
require_privileged = require_roles(PRIVILEGED_ROLES)
require_super_admin = require_roles(ADMIN_ROLES)
