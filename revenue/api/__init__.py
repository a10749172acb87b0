"""
FastAPI Backend for the Revenue Ledger

Provides REST API endpoints for the ledger frontend.
"""

from .main import app

__all__ = ["app"]
