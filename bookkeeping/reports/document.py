"""
Report Document Builder

Turns a MonthlyReport into the rows and text blocks that the exported
document shows. Every cell is already formatted, so the renderer only
lays things out and tests can check the content without parsing a PDF.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from bookkeeping.config import OrganizationSettings
from bookkeeping.models import MonthlyReport
from bookkeeping.reports.formatting import (
    format_date,
    format_long_date,
    format_rupiah,
    month_key,
    month_label,
)

SUMMARY_HEADER = ["Description", "Amount"]
PROFIT_SHARING_HEADER = ["Name", "Amount Received"]
TRANSACTION_HEADER = ["Date", "Description", "Method", "Income", "Expense"]

EMPTY_CELL = "-"


class ReportDocument(BaseModel):
    """Rendering-ready content of a monthly report."""

    organization_name: str
    organization_address: str
    title: str
    period_key: str = Field(..., description="YYYY-MM of the reported month")

    summary_rows: list[list[str]] = Field(default_factory=list)
    profit_sharing_rows: list[list[str]] = Field(
        default_factory=list,
        description="Empty when there is no profit to share"
    )
    transaction_rows: list[list[str]] = Field(default_factory=list)

    signature_place_date: str
    signatory_title: str
    signatory_name: str

    @property
    def has_profit_sharing(self) -> bool:
        return bool(self.profit_sharing_rows)


def build_report_document(
    report: MonthlyReport,
    organization: OrganizationSettings,
    today: Optional[date] = None,
) -> ReportDocument:
    """
    Build the document content for a monthly report.

    Args:
        report: Output of build_monthly_report
        organization: Letterhead and signatory
        today: Date printed beside the signature (defaults to today)
    """
    today = today or date.today()
    label = month_label(report.year, report.month)

    summary_rows = [
        ["Total Income", format_rupiah(report.total_income)],
        ["Total Expense", format_rupiah(report.total_expense)],
        ["Ending Balance (Profit/Loss)", format_rupiah(report.balance)],
        ["Total via Transfer", format_rupiah(report.total_transfer)],
        ["Total via Cash", format_rupiah(report.total_cash)],
    ]

    profit_sharing_rows = [
        [share.partner, format_rupiah(share.amount, _places(share.amount))]
        for share in report.profit_shares
    ]

    transaction_rows = []
    for tx in report.transactions:
        amount = format_rupiah(tx.amount)
        transaction_rows.append([
            format_date(tx.transaction_date),
            tx.description,
            tx.payment_method.label,
            amount if tx.is_income else EMPTY_CELL,
            EMPTY_CELL if tx.is_income else amount,
        ])

    return ReportDocument(
        organization_name=organization.name,
        organization_address=organization.address,
        title=f"Monthly Financial Report - {label}",
        period_key=month_key(report.year, report.month),
        summary_rows=summary_rows,
        profit_sharing_rows=profit_sharing_rows,
        transaction_rows=transaction_rows,
        signature_place_date=f"{organization.city}, {format_long_date(today)}",
        signatory_title=organization.signatory_title,
        signatory_name=organization.signatory_name,
    )


def report_filename(report: MonthlyReport) -> str:
    """'Financial_Report_2024-03.pdf'."""
    return f"Financial_Report_{month_key(report.year, report.month)}.pdf"


def _places(amount) -> int:
    # Shares are already quantized; keep their precision on display
    return max(0, -amount.as_tuple().exponent)
