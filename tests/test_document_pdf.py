"""
Tests for the monthly report document and its PDF rendering.
"""

from datetime import date
from decimal import Decimal

import pytest

from bookkeeping.config import OrganizationSettings
from bookkeeping.models import (
    ExpenseCategory,
    PaymentMethod,
    ProfitSharingPolicy,
    new_transaction,
)
from bookkeeping.reports import (
    EMPTY_CELL,
    build_monthly_report,
    build_report_document,
    render_report_pdf,
    report_filename,
)


POLICY = ProfitSharingPolicy(partners=["Mardi Jayadi", "Daden", "Hamdan", "Umi"])
SIGNED_ON = date(2024, 4, 2)


@pytest.fixture
def organization():
    return OrganizationSettings()


@pytest.fixture
def march_report(sample_transactions):
    return build_monthly_report(sample_transactions, 2024, 3, POLICY)


class TestReportDocument:
    """Tests for build_report_document."""

    def test_header_and_signature(self, march_report, organization):
        document = build_report_document(march_report, organization, today=SIGNED_ON)

        assert document.organization_name == "Damar Global Network"
        assert document.title == "Monthly Financial Report - March 2024"
        assert document.period_key == "2024-03"
        assert document.signature_place_date == "Tangerang, 2 April 2024"
        assert document.signatory_title == "Direktur Utama"
        assert document.signatory_name == "Mardi Jayadi"

    def test_summary_rows(self, march_report, organization):
        document = build_report_document(march_report, organization, today=SIGNED_ON)
        assert document.summary_rows == [
            ["Total Income", "Rp 2.000.000"],
            ["Total Expense", "Rp 1.500.000"],
            ["Ending Balance (Profit/Loss)", "Rp 500.000"],
            ["Total via Transfer", "Rp 2.500.000"],
            ["Total via Cash", "Rp 1.000.000"],
        ]

    def test_profit_sharing_rows(self, march_report, organization):
        document = build_report_document(march_report, organization, today=SIGNED_ON)

        assert document.has_profit_sharing
        assert document.profit_sharing_rows[0] == ["Mardi Jayadi", "Rp 125.000,00"]
        assert len(document.profit_sharing_rows) == 4

    def test_transaction_rows_use_dash_for_other_column(self, march_report, organization):
        document = build_report_document(march_report, organization, today=SIGNED_ON)
        rows = document.transaction_rows

        assert rows[0] == ["2/3/2024", "Subscriber dues", "Transfer", "Rp 2.000.000", EMPTY_CELL]
        assert rows[1] == ["5/3/2024", "Office rent", "Cash", EMPTY_CELL, "Rp 750.000"]
        assert len(rows) == 4

    def test_loss_month_has_no_profit_table(self, organization):
        tx = new_transaction(
            "expense", "Internet bill", Decimal("500000"), date(2024, 3, 15),
            PaymentMethod.TRANSFER, ExpenseCategory.ISP_DUES,
        )
        report = build_monthly_report([tx], 2024, 3, POLICY)
        document = build_report_document(report, organization, today=SIGNED_ON)

        assert not document.has_profit_sharing
        assert document.summary_rows[2] == ["Ending Balance (Profit/Loss)", "Rp -500.000"]

    def test_filename(self, march_report):
        assert report_filename(march_report) == "Financial_Report_2024-03.pdf"


class TestPdfRendering:
    """Tests for render_report_pdf."""

    def test_renders_pdf_bytes(self, march_report, organization):
        document = build_report_document(march_report, organization, today=SIGNED_ON)
        pdf = render_report_pdf(document)

        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 1000

    def test_renders_empty_month(self, sample_transactions, organization):
        report = build_monthly_report(sample_transactions, 2024, 5, POLICY)
        document = build_report_document(report, organization, today=SIGNED_ON)
        assert render_report_pdf(document).startswith(b"%PDF")

    def test_markup_in_descriptions_is_escaped(self, organization):
        tx = new_transaction("income", "Dues <b>& more", Decimal("1000"), date(2024, 3, 1))
        report = build_monthly_report([tx], 2024, 3, POLICY)
        document = build_report_document(report, organization, today=SIGNED_ON)
        assert render_report_pdf(document).startswith(b"%PDF")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
