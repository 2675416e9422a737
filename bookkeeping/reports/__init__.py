"""
Reporting Package

Aggregation over transactions, display formatting, and the monthly
report document with its PDF rendering.
"""

from bookkeeping.reports.aggregation import (
    build_monthly_report,
    compute_totals,
    expense_breakdown,
    filter_by_date_range,
    filter_by_month,
    sort_by_date,
    split_profit,
)
from bookkeeping.reports.document import (
    EMPTY_CELL,
    PROFIT_SHARING_HEADER,
    SUMMARY_HEADER,
    TRANSACTION_HEADER,
    ReportDocument,
    build_report_document,
    report_filename,
)
from bookkeeping.reports.formatting import (
    MONTH_NAMES,
    format_date,
    format_long_date,
    format_rupiah,
    month_key,
    month_label,
)
from bookkeeping.reports.pdf import render_report_pdf

__all__ = [
    # Aggregation
    "build_monthly_report",
    "compute_totals",
    "expense_breakdown",
    "filter_by_date_range",
    "filter_by_month",
    "sort_by_date",
    "split_profit",
    # Document
    "EMPTY_CELL",
    "PROFIT_SHARING_HEADER",
    "SUMMARY_HEADER",
    "TRANSACTION_HEADER",
    "ReportDocument",
    "build_report_document",
    "render_report_pdf",
    "report_filename",
    # Formatting
    "MONTH_NAMES",
    "format_date",
    "format_long_date",
    "format_rupiah",
    "month_key",
    "month_label",
]
