"""
Backup Export Module

Reads every mutable table into a single backup document.
"""

import logging
from datetime import datetime

from sqlalchemy import text
from sqlalchemy.engine import Connection

from .snapshot import build_document

logger = logging.getLogger(__name__)

EXPORT_QUERIES = {
    "users": "SELECT id, name, email, username, role FROM users ORDER BY id",
    "institutions": "SELECT id, name FROM institutions ORDER BY id",
    "receipt_types": "SELECT id, name FROM receipt_types ORDER BY id",
    "transactions": """
        SELECT
            id,
            transaction_type,
            amount,
            institution_id,
            type_id,
            date,
            receipt_number,
            description,
            created_by
        FROM transactions
        ORDER BY id
    """,
    "settings": "SELECT setting_key, setting_value FROM settings ORDER BY setting_key",
}


class BackupExporter:
    """Exports the database as a backup document."""

    def __init__(self, connection: Connection):
        """Initialize exporter.

        Args:
            connection: Open SQLAlchemy connection
        """
        self.connection = connection

    def _fetch(self, name: str) -> list[dict]:
        result = self.connection.execute(text(EXPORT_QUERIES[name]))
        return [dict(row) for row in result.mappings().all()]

    def export(self, generated_at: datetime | None = None) -> dict:
        """Export all tables.

        Args:
            generated_at: Generation timestamp (defaults to now, UTC)

        Returns:
            Backup document
        """
        tables = {name: self._fetch(name) for name in EXPORT_QUERIES}

        logger.info(
            "Exported backup: "
            + ", ".join(f"{name}={len(rows)}" for name, rows in tables.items())
        )

        return build_document(
            users=tables["users"],
            institutions=tables["institutions"],
            receipt_types=tables["receipt_types"],
            transactions=tables["transactions"],
            settings=tables["settings"],
            generated_at=generated_at,
        )
