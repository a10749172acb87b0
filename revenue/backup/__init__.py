"""
Backup Module

JSON export of all ledger tables and atomic restore.
"""

from .snapshot import (
    COLLECTIONS,
    BackupSnapshot,
    BackupValidationError,
    build_document,
)
from .export import BackupExporter
from .restore import BackupRestorer, RestoreError, upsert_setting

__all__ = [
    "COLLECTIONS",
    "BackupSnapshot",
    "BackupValidationError",
    "build_document",
    "BackupExporter",
    "BackupRestorer",
    "RestoreError",
    "upsert_setting",
]
