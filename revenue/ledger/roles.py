"""
Roles and Visibility Module

Defines the closed set of user roles and the transaction visibility scope
shared by the transaction list and the reconciliation report.
"""

from dataclasses import dataclass, field
from enum import Enum


class Role(Enum):
    """User role."""
    SUPER_ADMIN = "super_admin"
    MANAGER = "manager"
    DATA_ENTRY = "data_entry"

    @classmethod
    def parse(cls, value: "str | Role") -> "Role":
        """Parse a stored role string.

        Args:
            value: Role string or Role

        Returns:
            Role

        Raises:
            ValueError: If the value is not a known role
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Invalid role: {value!r}") from None


# Roles allowed to maintain reference data and see every transaction
PRIVILEGED_ROLES = frozenset({Role.SUPER_ADMIN, Role.MANAGER})

# Roles allowed to manage users and restore backups
ADMIN_ROLES = frozenset({Role.SUPER_ADMIN})

# Every role must be classified for visibility
_SEES_ALL_TRANSACTIONS = {
    Role.SUPER_ADMIN: True,
    Role.MANAGER: True,
    Role.DATA_ENTRY: False,
}


def sees_all_transactions(role: Role) -> bool:
    """Return True if the role may see transactions created by other users."""
    return _SEES_ALL_TRANSACTIONS[role]


def has_role(role: Role, allowed: frozenset[Role] | set[Role]) -> bool:
    """Check role membership."""
    return role in allowed


@dataclass
class VisibilityScope:
    """SQL fragment restricting transactions to those a caller may see."""

    conditions: list[str] = field(default_factory=list)
    params: dict = field(default_factory=dict)

    @property
    def is_restricted(self) -> bool:
        return bool(self.conditions)


def transaction_scope(role: Role, user_id: int, column: str = "t.created_by") -> VisibilityScope:
    """Build the visibility scope for a caller.

    Args:
        role: Caller role
        user_id: Caller user ID
        column: Qualified created_by column in the query

    Returns:
        VisibilityScope with zero or one condition
    """
    if sees_all_transactions(role):
        return VisibilityScope()

    return VisibilityScope(
        conditions=[f"{column} = :scope_user_id"],
        params={"scope_user_id": user_id},
    )
