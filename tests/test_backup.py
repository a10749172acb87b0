"""
Backup Module Tests

Tests for backup document validation, export and atomic restore.
"""

import copy
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from revenue.backup import (
    COLLECTIONS,
    BackupExporter,
    BackupRestorer,
    BackupSnapshot,
    BackupValidationError,
    RestoreError,
    build_document,
)


@pytest.fixture
def document() -> dict:
    """Minimal valid backup document."""
    return {
        "users": [{"id": 1, "name": "Admin User", "email": "admin@example.com", "username": "admin", "role": "super_admin"}],
        "institutions": [{"id": 10, "name": "Port Authority"}],
        "receiptTypes": [{"id": 20, "name": "Harbour Dues"}],
        "transactions": [
            {
                "id": 100,
                "transaction_type": "receipt",
                "amount": "1250.50",
                "institution_id": 10,
                "type_id": 20,
                "date": "2024-06-01",
                "receipt_number": "HD-1",
                "description": None,
                "created_by": 1,
            }
        ],
        "settings": [{"setting_key": "opening_balance", "setting_value": "500"}],
        "timestamp": "2024-06-02T08:00:00+00:00",
    }


class TestBackupSnapshot:
    """Tests for BackupSnapshot validation."""

    def test_valid_document(self, document):
        snapshot = BackupSnapshot.from_document(document)

        assert snapshot.transactions[0].amount == Decimal("1250.50")
        assert snapshot.settings[0].setting_value == "500"
        assert snapshot.row_count == 5

    @pytest.mark.parametrize("collection", COLLECTIONS)
    def test_missing_collection(self, document, collection):
        """Test every collection is required."""
        del document[collection]

        with pytest.raises(BackupValidationError) as exc_info:
            BackupSnapshot.from_document(document)

        assert exc_info.value.missing == [collection]

    def test_not_an_object(self):
        with pytest.raises(BackupValidationError):
            BackupSnapshot.from_document(["users"])

    def test_invalid_transaction_type(self, document):
        document["transactions"][0]["transaction_type"] = "refund"

        with pytest.raises(BackupValidationError, match="invalid rows"):
            BackupSnapshot.from_document(document)

    @pytest.mark.parametrize("amount", ["0.001", "123456789012345678901.23"])
    def test_amount_outside_column(self, document, amount):
        document["transactions"][0]["amount"] = amount

        with pytest.raises(BackupValidationError, match="invalid rows"):
            BackupSnapshot.from_document(document)

    def test_unknown_role(self, document):
        document["users"][0]["role"] = "auditor"

        with pytest.raises(BackupValidationError, match="invalid rows"):
            BackupSnapshot.from_document(document)

    def test_numeric_setting_value(self, document):
        document["settings"][0]["setting_value"] = 750.25
        snapshot = BackupSnapshot.from_document(document)

        assert snapshot.settings[0].setting_value == "750.25"


class TestBuildDocument:
    """Tests for export document assembly."""

    def test_passwords_dropped(self):
        doc = build_document(
            users=[{"id": 1, "username": "admin", "password": "$2b$hash"}],
            institutions=[],
            receipt_types=[],
            transactions=[],
            settings=[],
            generated_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )

        assert doc["users"] == [{"id": 1, "username": "admin"}]
        assert doc["timestamp"] == "2024-01-01T00:00:00+00:00"
        assert set(COLLECTIONS) <= set(doc)


class TestBackupRestorer:
    """Tests for BackupRestorer against the seeded database."""

    def _export(self, engine) -> dict:
        with engine.connect() as conn:
            return BackupExporter(conn).export()

    def test_restore_replaces_data(self, database, document):
        counts = BackupRestorer(database).restore(BackupSnapshot.from_document(document))
        data = self._export(database)

        assert counts["transactions"] == 1
        assert [i["name"] for i in data["institutions"]] == ["Port Authority"]
        assert [t["id"] for t in data["transactions"]] == [100]
        assert data["settings"] == [{"setting_key": "opening_balance", "setting_value": "500"}]
        # Users are never touched by restore
        assert len(data["users"]) == 3

    def test_failed_restore_rolls_back(self, database, document):
        """Test a foreign-key failure leaves the database unchanged."""
        before = self._export(database)
        document["transactions"][0]["created_by"] = 99

        with pytest.raises(RestoreError):
            BackupRestorer(database).restore(BackupSnapshot.from_document(document))

        after = self._export(database)
        before.pop("timestamp")
        after.pop("timestamp")
        assert after == before


class TestBackupApi:
    """Tests for the backup endpoints."""

    def test_export_super_admin_only(self, client, manager_headers):
        assert client.get("/api/backup/export", headers=manager_headers).status_code == 403

    def test_export_shape(self, client, admin_headers):
        data = client.get("/api/backup/export", headers=admin_headers).json()

        assert set(COLLECTIONS) | {"timestamp"} == set(data)
        assert len(data["transactions"]) == 5
        assert all("password" not in u for u in data["users"])

    def test_round_trip_is_idempotent(self, client, admin_headers):
        """Test export, import, export yields the same data."""
        first = client.get("/api/backup/export", headers=admin_headers).json()

        response = client.post("/api/backup/import", json={"backupData": first}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Backup restored successfully"

        second = client.get("/api/backup/export", headers=admin_headers).json()
        first.pop("timestamp")
        second.pop("timestamp")
        assert second == first

    def test_import_requires_data(self, client, admin_headers):
        response = client.post("/api/backup/import", json={}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Backup data is required"

    def test_import_missing_collection_changes_nothing(self, client, admin_headers):
        before = client.get("/api/backup/export", headers=admin_headers).json()
        broken = copy.deepcopy(before)
        broken["transactions"] = []
        del broken["settings"]

        response = client.post("/api/backup/import", json={"backupData": broken}, headers=admin_headers)
        after = client.get("/api/backup/export", headers=admin_headers).json()

        assert response.status_code == 400
        assert "settings" in response.json()["detail"]
        before.pop("timestamp")
        after.pop("timestamp")
        assert after == before

    def test_import_row_failure_rolls_back(self, client, admin_headers):
        before = client.get("/api/backup/export", headers=admin_headers).json()
        broken = copy.deepcopy(before)
        broken["transactions"][0]["institution_id"] = 404

        response = client.post("/api/backup/import", json={"backupData": broken}, headers=admin_headers)
        after = client.get("/api/backup/export", headers=admin_headers).json()

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to import backup"
        before.pop("timestamp")
        after.pop("timestamp")
        assert after == before

    def test_import_super_admin_only(self, client, manager_headers):
        response = client.post("/api/backup/import", json={"backupData": {}}, headers=manager_headers)
        assert response.status_code == 403
