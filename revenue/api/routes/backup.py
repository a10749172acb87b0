"""
Backup API Routes

Full JSON export and all-or-nothing restore.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

from revenue.backup import (
    BackupExporter,
    BackupRestorer,
    BackupSnapshot,
    BackupValidationError,
    RestoreError,
)

from ..auth import User, require_super_admin
from ..database import engine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/backup", tags=["backup"])


class ImportRequest(BaseModel):
    """Restore payload."""

    backupData: Any = None


@router.get("/export")
async def export_backup(
    user: User = Depends(require_super_admin),
) -> dict:
    """Export every table as one JSON document.

    Args:
        user: Authenticated super admin

    Returns:
        Backup document (users without passwords) with a generation timestamp
    """
    with engine.connect() as conn:
        document = BackupExporter(conn).export()

    logger.info(f"Backup exported by {user.username}")
    return jsonable_encoder(document)


@router.post("/import")
async def import_backup(
    request: ImportRequest,
    user: User = Depends(require_super_admin),
) -> dict:
    """Restore a backup document.

    Transactions, receipt types and institutions are replaced and settings
    upserted in a single database transaction. Users are left as they are.

    Args:
        request: {"backupData": <export document>}
        user: Authenticated super admin

    Returns:
        Confirmation and restored row counts
    """
    if not request.backupData:
        raise HTTPException(status_code=400, detail="Backup data is required")

    try:
        snapshot = BackupSnapshot.from_document(request.backupData)
    except BackupValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        counts = BackupRestorer(engine).restore(snapshot)
    except RestoreError:
        raise HTTPException(status_code=500, detail="Failed to import backup")

    logger.info(f"Backup from {snapshot.timestamp} restored by {user.username}")
    return {"message": "Backup restored successfully", "restored": counts}
