"""
Ledger Module Tests

Tests for roles, transaction visibility and reconciliation arithmetic.
"""

import random
from datetime import date
from decimal import Decimal

import pytest

from revenue.ledger import (
    LedgerReconciliation,
    ReconciliationReport,
    ReportFilter,
    Role,
    fits_money_column,
    normalize_filter,
    parse_opening_balance,
    sees_all_transactions,
    transaction_scope,
)


class TestRole:
    """Tests for the Role enumeration."""

    def test_parse_known_roles(self):
        """Test every stored role string parses."""
        assert Role.parse("super_admin") is Role.SUPER_ADMIN
        assert Role.parse("manager") is Role.MANAGER
        assert Role.parse("data_entry") is Role.DATA_ENTRY

    def test_parse_unknown_role(self):
        """Test unknown roles are rejected."""
        with pytest.raises(ValueError, match="Invalid role"):
            Role.parse("auditor")

    def test_every_role_classified(self):
        """Test visibility is defined for every role."""
        for role in Role:
            assert isinstance(sees_all_transactions(role), bool)


class TestVisibility:
    """Tests for transaction visibility scoping."""

    @pytest.mark.parametrize("role", [Role.SUPER_ADMIN, Role.MANAGER])
    def test_privileged_scope_is_unrestricted(self, role):
        scope = transaction_scope(role, 7)
        assert scope.is_restricted is False
        assert scope.params == {}

    def test_data_entry_scope_restricts_to_creator(self):
        scope = transaction_scope(Role.DATA_ENTRY, 7)
        assert scope.conditions == ["t.created_by = :scope_user_id"]
        assert scope.params == {"scope_user_id": 7}

    def test_custom_column(self):
        scope = transaction_scope(Role.DATA_ENTRY, 2, column="created_by")
        assert scope.conditions == ["created_by = :scope_user_id"]


class TestOpeningBalance:
    """Tests for opening balance parsing."""

    def test_absent_is_zero(self):
        assert parse_opening_balance(None) == Decimal("0")
        assert parse_opening_balance("") == Decimal("0")

    def test_text_value(self):
        assert parse_opening_balance("10000.50") == Decimal("10000.50")

    def test_garbage_is_zero(self):
        assert parse_opening_balance("ten thousand") == Decimal("0")

    def test_out_of_range_is_zero(self):
        assert parse_opening_balance("1e400") == Decimal("0")
        assert parse_opening_balance("0.001") == Decimal("0")
        assert parse_opening_balance("-250.25") == Decimal("-250.25")


class TestMoneyColumn:
    """Tests for NUMERIC(15,2) range checks."""

    @pytest.mark.parametrize("value", ["0.01", "250.5", "9999999999999.99", "-9999999999999.99", "5000.000"])
    def test_fits(self, value):
        assert fits_money_column(Decimal(value)) is True

    @pytest.mark.parametrize("value", ["0.001", "10000000000000", "1e400", "Infinity", "NaN"])
    def test_does_not_fit(self, value):
        assert fits_money_column(Decimal(value)) is False


class TestNormalizeFilter:
    """Tests for optional id filters."""

    def test_unset_values(self):
        assert normalize_filter(None) is None
        assert normalize_filter("") is None
        assert normalize_filter("all") is None
        assert normalize_filter("ALL") is None

    def test_numeric_values(self):
        assert normalize_filter("3") == 3
        assert normalize_filter(4) == 4

    def test_invalid_value(self):
        with pytest.raises(ValueError):
            normalize_filter("abc")


class TestReportFilter:
    """Tests for ReportFilter validation."""

    def test_valid_range(self):
        is_valid, error = ReportFilter(date(2024, 4, 1), date(2024, 4, 30)).validate()
        assert is_valid is True
        assert error == ""

    def test_missing_dates(self):
        is_valid, error = ReportFilter(None, date(2024, 4, 30)).validate()
        assert is_valid is False
        assert "required" in error

    def test_inverted_range(self):
        is_valid, error = ReportFilter(date(2024, 5, 1), date(2024, 4, 1)).validate()
        assert is_valid is False


class TestLedgerReconciliation:
    """Tests for LedgerReconciliation."""

    @pytest.fixture
    def reconciler(self):
        return LedgerReconciliation()

    @pytest.fixture
    def april(self):
        return ReportFilter(start_date=date(2024, 4, 1), end_date=date(2024, 4, 30))

    def test_totals(self, reconciler, april, sample_transactions):
        """Test receipts, payments and closing balance."""
        report = reconciler.reconcile(april, sample_transactions, opening_balance=Decimal("10000"))

        assert report.total_receipts == Decimal("15500.00")
        assert report.total_payments == Decimal("3500.00")
        assert report.closing_balance == Decimal("22000.00")
        assert report.institution_name == "All Institutions"
        assert report.type_name == "All Types"

    def test_example_period(self, reconciler):
        """Test opening 10000 + receipt 5000 - payment 2000 = 13000."""
        rows = [
            {"id": 1, "transaction_type": "receipt", "amount": "5000", "date": "2024-03-01",
             "institution_id": 1, "type_id": 1},
            {"id": 2, "transaction_type": "payment", "amount": "2000", "date": "2024-03-02",
             "institution_id": 1, "type_id": 1},
        ]
        report = reconciler.reconcile(
            ReportFilter(date(2024, 3, 1), date(2024, 3, 2)),
            rows,
            opening_balance=Decimal("10000"),
        )

        assert report.total_receipts == Decimal("5000")
        assert report.total_payments == Decimal("2000")
        assert report.closing_balance == Decimal("13000")

    def test_order_independent(self, reconciler, april, sample_transactions):
        """Test closing balance does not depend on row order."""
        shuffled = list(sample_transactions)
        random.Random(42).shuffle(shuffled)

        a = reconciler.reconcile(april, sample_transactions, Decimal("100"))
        b = reconciler.reconcile(april, shuffled, Decimal("100"))

        assert a.closing_balance == b.closing_balance
        assert [t["id"] for t in b.transactions] == [1, 2, 3, 4, 5]

    def test_exact_decimal_sums(self, reconciler, april):
        """Test cents do not drift."""
        rows = [
            {"id": i, "transaction_type": "receipt", "amount": 0.1, "date": date(2024, 4, 2),
             "institution_id": 1, "type_id": 1}
            for i in range(1, 11)
        ]
        report = reconciler.reconcile(april, rows)

        assert report.total_receipts == Decimal("1.0")
        assert report.closing_balance == Decimal("1.0")

    def test_filters_and_period(self, reconciler, sample_transactions):
        """Test rows outside the period or filters are dropped."""
        report_filter = ReportFilter(
            start_date=date(2024, 4, 1),
            end_date=date(2024, 4, 2),
            institution_id=1,
        )
        report = reconciler.reconcile(
            report_filter, sample_transactions, institution_name="Ministry of Finance"
        )

        assert [t["id"] for t in report.transactions] == [1, 3]
        assert report.closing_balance == Decimal("4000.00")
        assert report.institution_name == "Ministry of Finance"

    def test_empty_period(self, reconciler, sample_transactions):
        """Test an empty period succeeds with zero totals."""
        report = reconciler.reconcile(
            ReportFilter(date(2025, 1, 1), date(2025, 1, 31)),
            sample_transactions,
            opening_balance=Decimal("250"),
        )

        assert report.transactions == []
        assert report.total_receipts == Decimal("0")
        assert report.total_payments == Decimal("0")
        assert report.closing_balance == Decimal("250")


class TestReconciliationReport:
    """Tests for ReconciliationReport serialization."""

    def test_to_dict(self):
        report = ReconciliationReport(
            start_date=date(2024, 4, 1),
            end_date=date(2024, 4, 30),
            opening_balance=Decimal("100.50"),
            transactions=[
                {"transaction_type": "receipt", "amount": Decimal("20.25")},
                {"transaction_type": "payment", "amount": Decimal("0.75")},
            ],
        )

        data = report.to_dict()
        assert data["openingBalance"] == 100.5
        assert data["totalReceipts"] == 20.25
        assert data["totalPayments"] == 0.75
        assert data["closingBalance"] == 120.0
        assert data["startDate"] == "2024-04-01"
        assert data["institutionName"] == "All Institutions"
