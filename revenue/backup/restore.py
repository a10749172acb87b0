"""
Backup Restore Module

Replaces ledger data with the contents of a backup inside one database
transaction. Either every row is applied or nothing is.
"""

import logging

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .snapshot import BackupSnapshot

logger = logging.getLogger(__name__)

# Children first: transactions reference institutions and receipt types
CLEAR_ORDER = ("transactions", "receipt_types", "institutions")


class RestoreError(RuntimeError):
    """Raised when a restore was rolled back."""


class BackupRestorer:
    """Applies a validated backup snapshot."""

    def __init__(self, engine: Engine):
        """Initialize restorer.

        Args:
            engine: SQLAlchemy engine; one connection is used for the whole restore
        """
        self.engine = engine

    def restore(self, snapshot: BackupSnapshot) -> dict[str, int]:
        """Restore a snapshot.

        Users are left untouched so the operator keeps access during restore.

        Args:
            snapshot: Validated backup snapshot

        Returns:
            Row counts written per table

        Raises:
            RestoreError: If any statement failed; the transaction was rolled back
        """
        try:
            with self.engine.begin() as conn:
                for table in CLEAR_ORDER:
                    conn.execute(text(f"DELETE FROM {table}"))

                for row in snapshot.institutions:
                    conn.execute(
                        text("INSERT INTO institutions (id, name) VALUES (:id, :name)"),
                        {"id": row.id, "name": row.name},
                    )

                for row in snapshot.receipt_types:
                    conn.execute(
                        text("INSERT INTO receipt_types (id, name) VALUES (:id, :name)"),
                        {"id": row.id, "name": row.name},
                    )

                for row in snapshot.transactions:
                    conn.execute(
                        text("""
                            INSERT INTO transactions
                                (id, transaction_type, amount, institution_id, type_id,
                                 date, receipt_number, description, created_by)
                            VALUES
                                (:id, :transaction_type, :amount, :institution_id, :type_id,
                                 :date, :receipt_number, :description, :created_by)
                        """),
                        {
                            "id": row.id,
                            "transaction_type": row.transaction_type,
                            "amount": str(row.amount),
                            "institution_id": row.institution_id,
                            "type_id": row.type_id,
                            "date": row.date.isoformat(),
                            "receipt_number": row.receipt_number,
                            "description": row.description,
                            "created_by": row.created_by,
                        },
                    )

                for row in snapshot.settings:
                    upsert_setting(conn, row.setting_key, row.setting_value)

        except SQLAlchemyError as e:
            logger.error(f"Backup restore rolled back: {e}")
            raise RestoreError("Failed to import backup") from e

        counts = {
            "institutions": len(snapshot.institutions),
            "receipt_types": len(snapshot.receipt_types),
            "transactions": len(snapshot.transactions),
            "settings": len(snapshot.settings),
        }
        logger.info(f"Backup restored: {counts}")
        return counts


def upsert_setting(conn, key: str, value: str | None) -> None:
    """Insert or overwrite a settings row by key."""
    result = conn.execute(
        text("UPDATE settings SET setting_value = :value WHERE setting_key = :key"),
        {"key": key, "value": value},
    )
    if result.rowcount == 0:
        conn.execute(
            text("INSERT INTO settings (setting_key, setting_value) VALUES (:key, :value)"),
            {"key": key, "value": value},
        )
