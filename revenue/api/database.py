"""
Database Connection Module

Provides MySQL database connection and session management.
"""

import os
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Database URL from environment
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"mysql+pymysql://{os.getenv('DB_USER', 'root')}:"
    f"{os.getenv('DB_PASSWORD', '')}@"
    f"{os.getenv('DB_HOST', 'localhost')}:"
    f"{os.getenv('DB_PORT', '3306')}/"
    f"{os.getenv('DB_NAME', 'revenue_management')}"
)


def build_engine(url: str) -> Engine:
    """Create an engine for the given URL.

    SQLite (used by tests and local demos) shares one connection and has
    foreign keys switched on; everything else gets a pre-pinged pool.
    """
    if url.startswith("sqlite"):
        sqlite_engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

        @event.listens_for(sqlite_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return sqlite_engine

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=10,
    )


# Create engine
engine = build_engine(DATABASE_URL)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """Get database session as context manager.

    Yields:
        Database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def execute_query(query: str, params: dict | None = None) -> list[dict]:
    """Execute raw SQL query and return results as dictionaries.

    Args:
        query: SQL query string
        params: Query parameters

    Returns:
        List of result dictionaries
    """
    with get_db_context() as db:
        result = db.execute(text(query), params or {})

        # For SELECT queries, return results
        if result.returns_rows:
            return [dict(row) for row in result.mappings().all()]

        # For INSERT/UPDATE/DELETE, commit and return empty
        db.commit()
        return []


def execute_write(query: str, params: dict | None = None) -> int:
    """Execute an UPDATE/DELETE and return the affected row count.

    Args:
        query: SQL statement
        params: Statement parameters

    Returns:
        Number of rows matched
    """
    with get_db_context() as db:
        result = db.execute(text(query), params or {})
        db.commit()
        return result.rowcount


def execute_insert(table: str, data: dict) -> int:
    """Execute INSERT and return the new row id.

    Args:
        table: Table name
        data: Column-value dictionary

    Returns:
        Auto-generated primary key
    """
    columns = ", ".join(data.keys())
    placeholders = ", ".join(f":{k}" for k in data.keys())
    query = f"INSERT INTO {table} ({columns}) VALUES ({placeholders})"

    with get_db_context() as db:
        result = db.execute(text(query), data)
        db.commit()
        return result.lastrowid
