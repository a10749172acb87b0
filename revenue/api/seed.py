"""
Database Setup Module

Creates the schema and loads initial users, reference data and sample
transactions from config/seed_data.yaml.
"""

import logging
from pathlib import Path

import yaml
from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from revenue.backup import upsert_setting
from revenue.ledger import Role

from .auth import hash_password
from .schema import create_schema, drop_schema

logger = logging.getLogger(__name__)


class DatabaseSeeder:
    """Creates and seeds the ledger database."""

    def __init__(self, engine: Engine, config_dir: Path | str | None = None):
        """Initialize the seeder.

        Args:
            engine: SQLAlchemy engine
            config_dir: Path to configuration directory
        """
        self.engine = engine
        self.config_dir = Path(config_dir) if config_dir else Path(__file__).parent.parent.parent / "config"
        self._load_config()

    def _load_config(self) -> None:
        """Load seed data from YAML."""
        seed_file = self.config_dir / "seed_data.yaml"
        if seed_file.exists():
            with open(seed_file) as f:
                self.config = yaml.safe_load(f) or {}
        else:
            # Default seed: a single administrator
            self.config = {
                "opening_balance": "0",
                "users": [
                    {
                        "id": 1,
                        "name": "Admin User",
                        "email": "admin@example.com",
                        "username": "admin",
                        "password": "admin123",
                        "role": Role.SUPER_ADMIN.value,
                    }
                ],
            }

    def setup(self, reset: bool = False, seed: bool = True) -> dict[str, int]:
        """Create the schema and optionally load seed data.

        Args:
            reset: Drop all tables first
            seed: Load seed data after creating the schema

        Returns:
            Rows inserted per table
        """
        if reset:
            logger.warning("Dropping all tables")
            drop_schema(self.engine)

        create_schema(self.engine)
        logger.info("Database schema created")

        if not seed:
            return {}

        with self.engine.begin() as conn:
            counts = {
                "users": self._seed_users(conn),
                "institutions": self._seed_rows(conn, "institutions", ["id", "name"]),
                "receipt_types": self._seed_rows(conn, "receipt_types", ["id", "name"]),
                "transactions": self._seed_transactions(conn),
            }
            self._seed_opening_balance(conn)

        logger.info(f"Database seeded: {counts}")
        return counts

    def _seed_users(self, conn: Connection) -> int:
        """Insert seed users whose username is not taken yet."""
        inserted = 0
        for user in self.config.get("users", []):
            exists = conn.execute(
                text("SELECT id FROM users WHERE username = :username OR email = :email"),
                {"username": user["username"], "email": user["email"]},
            ).first()
            if exists:
                continue

            conn.execute(
                text("""
                    INSERT INTO users (id, name, email, username, password, role)
                    VALUES (:id, :name, :email, :username, :password, :role)
                """),
                {
                    "id": user["id"],
                    "name": user["name"],
                    "email": user["email"],
                    "username": user["username"],
                    "password": hash_password(str(user["password"])),
                    "role": Role.parse(user["role"]).value,
                },
            )
            inserted += 1
        return inserted

    def _seed_rows(
        self,
        conn: Connection,
        table: str,
        columns: list[str],
        rows: list[dict] | None = None,
    ) -> int:
        """Insert seed rows into an empty table."""
        if conn.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar() > 0:
            return 0

        if rows is None:
            rows = self.config.get(table, [])
        placeholders = ", ".join(f":{c}" for c in columns)
        for row in rows:
            conn.execute(
                text(f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"),
                {c: row.get(c) for c in columns},
            )
        return len(rows)

    def _seed_transactions(self, conn: Connection) -> int:
        columns = [
            "id", "transaction_type", "amount", "institution_id", "type_id",
            "date", "receipt_number", "description", "created_by",
        ]
        rows = [
            {**row, "amount": str(row["amount"]), "date": str(row["date"])}
            for row in self.config.get("transactions", [])
        ]
        return self._seed_rows(conn, "transactions", columns, rows)

    def _seed_opening_balance(self, conn: Connection) -> None:
        exists = conn.execute(
            text("SELECT setting_value FROM settings WHERE setting_key = 'opening_balance'")
        ).first()
        if exists is None:
            upsert_setting(conn, "opening_balance", str(self.config.get("opening_balance", "0")))


def main():
    """CLI entry point."""
    import argparse

    from .database import engine

    parser = argparse.ArgumentParser(description="Create and seed the revenue ledger database")
    parser.add_argument("--seed", action="store_true", help="Load config/seed_data.yaml")
    parser.add_argument("--reset", action="store_true", help="Drop all tables first")
    parser.add_argument("--config-dir", default=None, help="Directory containing seed_data.yaml")

    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    seeder = DatabaseSeeder(engine, config_dir=args.config_dir)
    counts = seeder.setup(reset=args.reset, seed=args.seed)

    for table, count in counts.items():
        print(f"{table}: {count} rows")


if __name__ == "__main__":
    main()
