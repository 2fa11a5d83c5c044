"""Tests for parsing document records into invoices, expenses and leads."""

from datetime import date, datetime, timezone

import pytest

from flowfin.exceptions import InvalidRecordError
from flowfin.models import Expense, Invoice, InvoiceStatus, Lead, month_key, parse_timestamp


class TestParseTimestamp:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("2024-03-05", datetime(2024, 3, 5, tzinfo=timezone.utc)),
            ("2024-03-05T10:30:00Z", datetime(2024, 3, 5, 10, 30, tzinfo=timezone.utc)),
            ({"seconds": 1700000000, "nanoseconds": 0}, datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)),
            (1700000000, datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)),
            (date(2024, 1, 31), datetime(2024, 1, 31, tzinfo=timezone.utc)),
            (datetime(2024, 1, 31, 8), datetime(2024, 1, 31, 8, tzinfo=timezone.utc)),
        ],
    )
    def test_supported_forms(self, raw: object, expected: datetime) -> None:
        assert parse_timestamp(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "not a date", {}, True, [2024, 1, 1]])
    def test_unusable_values(self, raw: object) -> None:
        assert parse_timestamp(raw) is None

    def test_month_key(self) -> None:
        assert month_key(datetime(2024, 3, 5, tzinfo=timezone.utc)) == "2024-03"


class TestInvoice:
    def test_from_record(self) -> None:
        invoice = Invoice.from_record({
            "id": "inv-1",
            "status": "Paid",
            "total": "1200.50",
            "currency": "EUR",
            "projectId": "p1",
            "invoiceNumber": "2024-001",
            "issueDate": "2024-02-01",
            "dueDate": "2024-03-01",
        })
        assert invoice.is_paid
        assert invoice.total == "1200.50"  # kept raw until conversion
        assert invoice.currency == "EUR"
        assert invoice.project_id == "p1"
        assert invoice.issue_date == datetime(2024, 2, 1, tzinfo=timezone.utc)

    def test_defaults(self) -> None:
        invoice = Invoice.from_record({"id": "inv-2", "currency": ""})
        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.total is None
        assert invoice.currency is None
        assert not invoice.is_paid

    def test_revenue_date_falls_back(self) -> None:
        invoice = Invoice.from_record({"id": "x", "updatedAt": {"seconds": 1700000000}})
        assert invoice.revenue_date() == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

    def test_rejects_non_object(self) -> None:
        with pytest.raises(InvalidRecordError):
            Invoice.from_record(["not", "a", "record"])


class TestExpense:
    def test_spend_date_prefers_date(self) -> None:
        expense = Expense.from_record({
            "id": "e1",
            "amount": 50,
            "date": "2024-05-10",
            "createdAt": "2024-06-01",
        })
        assert expense.spend_date() == datetime(2024, 5, 10, tzinfo=timezone.utc)

    def test_spend_date_falls_back_to_created(self) -> None:
        expense = Expense.from_record({"id": "e1", "createdAt": "2024-06-01"})
        assert expense.spend_date() == datetime(2024, 6, 1, tzinfo=timezone.utc)


class TestLead:
    def test_stage_from_legacy_status(self) -> None:
        lead = Lead.from_record({"id": "l1", "status": "Won", "value": "$5,000"})
        assert lead.stage == "Won"
        assert lead.value == "$5,000"

    def test_stage_wins_over_status(self) -> None:
        lead = Lead.from_record({"id": "l1", "stage": "proposal", "status": "New"})
        assert lead.stage == "proposal"

    def test_name_falls_back_to_company(self) -> None:
        lead = Lead.from_record({"id": "l1", "company": "Globex", "tags": ["warm"]})
        assert lead.name == "Globex"
        assert lead.tags == ["warm"]
        assert lead.stage is None
