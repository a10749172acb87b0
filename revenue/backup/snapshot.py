"""
Backup Snapshot Module

Shape and validation of the JSON backup document.
"""

import logging
from dataclasses import dataclass, field
from datetime import date as Date, datetime, timezone
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from revenue.ledger.reconciliation import MONEY_DIGITS, MONEY_PLACES
from revenue.ledger.roles import Role

logger = logging.getLogger(__name__)

# Top-level collections every backup document carries, in export order
COLLECTIONS = ("users", "institutions", "receiptTypes", "transactions", "settings")


class BackupValidationError(ValueError):
    """Raised when a backup document cannot be restored."""

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []


class UserRow(BaseModel):
    """Exported user (never carries the password hash)."""

    id: int
    name: str
    email: str
    username: str
    role: Role


class InstitutionRow(BaseModel):
    id: int
    name: str


class ReceiptTypeRow(BaseModel):
    id: int
    name: str


class TransactionRow(BaseModel):
    """Transaction row as stored."""

    id: int
    transaction_type: Literal["receipt", "payment"]
    amount: Decimal = Field(gt=0, max_digits=MONEY_DIGITS, decimal_places=MONEY_PLACES)
    institution_id: int
    type_id: int
    date: Date
    receipt_number: str | None = None
    description: str | None = None
    created_by: int


class SettingRow(BaseModel):
    setting_key: str
    setting_value: str | None = None

    @field_validator("setting_value", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        # Settings are text; numeric values from hand-edited backups are accepted
        if isinstance(value, (int, float, Decimal)):
            return str(value)
        return value


@dataclass
class BackupSnapshot:
    """Validated backup contents."""

    users: list[UserRow] = field(default_factory=list)
    institutions: list[InstitutionRow] = field(default_factory=list)
    receipt_types: list[ReceiptTypeRow] = field(default_factory=list)
    transactions: list[TransactionRow] = field(default_factory=list)
    settings: list[SettingRow] = field(default_factory=list)
    timestamp: str | None = None

    @property
    def row_count(self) -> int:
        return (
            len(self.users) + len(self.institutions) + len(self.receipt_types)
            + len(self.transactions) + len(self.settings)
        )

    @classmethod
    def from_document(cls, document: Any) -> "BackupSnapshot":
        """Validate a backup document.

        Args:
            document: Parsed JSON document

        Returns:
            BackupSnapshot

        Raises:
            BackupValidationError: If a collection is missing or a row is invalid
        """
        if not isinstance(document, dict):
            raise BackupValidationError("Backup data must be a JSON object")

        missing = [
            name for name in COLLECTIONS
            if not isinstance(document.get(name), list)
        ]
        if missing:
            raise BackupValidationError(
                f"Backup data is missing collections: {', '.join(missing)}",
                missing=missing,
            )

        try:
            return cls(
                users=[UserRow.model_validate(r) for r in document["users"]],
                institutions=[InstitutionRow.model_validate(r) for r in document["institutions"]],
                receipt_types=[ReceiptTypeRow.model_validate(r) for r in document["receiptTypes"]],
                transactions=[TransactionRow.model_validate(r) for r in document["transactions"]],
                settings=[SettingRow.model_validate(r) for r in document["settings"]],
                timestamp=document.get("timestamp"),
            )
        except ValidationError as e:
            logger.warning(f"Invalid backup row: {e}")
            raise BackupValidationError(f"Backup data contains invalid rows: {e.error_count()} error(s)") from e


def build_document(
    users: list[dict],
    institutions: list[dict],
    receipt_types: list[dict],
    transactions: list[dict],
    settings: list[dict],
    generated_at: datetime | None = None,
) -> dict:
    """Assemble an export document from table rows.

    Password columns are dropped from user rows.
    """
    generated_at = generated_at or datetime.now(timezone.utc)

    return {
        "users": [{k: v for k, v in u.items() if k != "password"} for u in users],
        "institutions": institutions,
        "receiptTypes": receipt_types,
        "transactions": transactions,
        "settings": settings,
        "timestamp": generated_at.isoformat(),
    }
