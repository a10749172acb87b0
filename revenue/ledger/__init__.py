"""
Ledger Module

Role model, transaction visibility and reconciliation arithmetic.
"""

from .roles import (
    Role,
    PRIVILEGED_ROLES,
    ADMIN_ROLES,
    VisibilityScope,
    transaction_scope,
    sees_all_transactions,
)
from .reconciliation import (
    LedgerReconciliation,
    ReconciliationReport,
    ReportFilter,
    TransactionType,
    fits_money_column,
    parse_opening_balance,
    normalize_filter,
    to_decimal,
)

__all__ = [
    # Roles
    "Role",
    "PRIVILEGED_ROLES",
    "ADMIN_ROLES",
    "VisibilityScope",
    "transaction_scope",
    "sees_all_transactions",
    # Reconciliation
    "LedgerReconciliation",
    "ReconciliationReport",
    "ReportFilter",
    "TransactionType",
    "fits_money_column",
    "parse_opening_balance",
    "normalize_filter",
    "to_decimal",
]
