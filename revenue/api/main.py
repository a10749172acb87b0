"""
FastAPI Main Application

Entry point for the revenue ledger API.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .routes import (
    auth_router,
    institutions_router,
    receipt_types_router,
    transactions_router,
    users_router,
    reports_router,
    backup_router,
)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting Revenue Ledger API...")
    yield
    # Shutdown
    logger.info("Shutting down Revenue Ledger API...")


app = FastAPI(
    title="Revenue Ledger API",
    description="API for institution revenue receipts, payments and reconciliation",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS configuration
cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Hide database failures behind a generic 500."""
    logger.exception(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Include routers
app.include_router(auth_router, prefix="/api")
app.include_router(institutions_router, prefix="/api")
app.include_router(receipt_types_router, prefix="/api")
app.include_router(transactions_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(reports_router, prefix="/api")
app.include_router(backup_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Revenue Ledger API",
        "version": "1.0.0",
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/api")
async def api_info():
    """API information endpoint."""
    return {
        "endpoints": {
            "auth": "/api/auth/login",
            "institutions": "/api/institutions",
            "receipt_types": "/api/receipt-types",
            "transactions": "/api/transactions",
            "users": "/api/users",
            "reports": "/api/reports?startDate=&endDate=",
            "backup": "/api/backup/export",
        },
        "authentication": "Authorization: Bearer <token> header required",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "revenue.api.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("ENVIRONMENT", "development") == "development",
    )
