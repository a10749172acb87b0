"""
Database Schema Module

Table definitions for the revenue ledger. Queries elsewhere are raw SQL;
this metadata is only used to create and drop the schema.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
)
from sqlalchemy.engine import Engine

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("email", String(100), nullable=False, unique=True),
    Column("username", String(50), nullable=False, unique=True),
    Column("password", String(255), nullable=False),
    Column("role", String(20), nullable=False),
    CheckConstraint("role IN ('super_admin', 'manager', 'data_entry')", name="ck_users_role"),
)

institutions = Table(
    "institutions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
)

receipt_types = Table(
    "receipt_types",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
)

transactions = Table(
    "transactions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("transaction_type", String(10), nullable=False),
    Column("amount", Numeric(15, 2), nullable=False),
    Column("institution_id", Integer, ForeignKey("institutions.id"), nullable=False),
    Column("type_id", Integer, ForeignKey("receipt_types.id"), nullable=False),
    Column("date", Date, nullable=False),
    Column("receipt_number", String(50)),
    Column("description", Text),
    Column("created_by", Integer, ForeignKey("users.id"), nullable=False),
    CheckConstraint("transaction_type IN ('receipt', 'payment')", name="ck_transactions_type"),
    CheckConstraint("amount > 0", name="ck_transactions_amount"),
)

settings = Table(
    "settings",
    metadata,
    Column("setting_key", String(50), primary_key=True),
    Column("setting_value", Text),
)


def create_schema(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    metadata.create_all(engine)


def drop_schema(engine: Engine) -> None:
    """Drop all tables."""
    metadata.drop_all(engine)
