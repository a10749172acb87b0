"""
API Routes Package

Contains all route modules for the ledger API.
"""

from .auth import router as auth_router
from .institutions import router as institutions_router
from .receipt_types import router as receipt_types_router
from .transactions import router as transactions_router
from .users import router as users_router
from .reports import router as reports_router
from .backup import router as backup_router

__all__ = [
    "auth_router",
    "institutions_router",
    "receipt_types_router",
    "transactions_router",
    "users_router",
    "reports_router",
    "backup_router",
]
