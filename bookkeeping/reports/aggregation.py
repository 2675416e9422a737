"""
Aggregation Engine

Pure functions over a list of transactions. Nothing here reads or writes
storage; the dashboard, the chart and the monthly report all derive
their numbers from the same functions.

DESIGN DECISION: Month membership is decided on the stored calendar
date, which is already normalized to UTC when a record is decoded.
A transaction therefore belongs to exactly one month no matter what
timezone the app runs in.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from bookkeeping.models import (
    CategoryTotal,
    ExpenseCategory,
    FinancialTotals,
    MonthlyReport,
    PaymentMethod,
    ProfitShare,
    ProfitSharingPolicy,
    Transaction,
)


def compute_totals(transactions: Iterable[Transaction]) -> FinancialTotals:
    """Sum income and expense. The balance is their difference."""
    income = Decimal("0")
    expense = Decimal("0")
    for tx in transactions:
        if tx.is_income:
            income += tx.amount
        else:
            expense += tx.amount
    return FinancialTotals(total_income=income, total_expense=expense)


def filter_by_month(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
) -> list[Transaction]:
    """Transactions dated in the given calendar month."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return [
        tx for tx in transactions
        if tx.transaction_date.year == year and tx.transaction_date.month == month
    ]


def filter_by_date_range(
    transactions: Iterable[Transaction],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[Transaction]:
    """Transactions between start and end, both inclusive. A None bound is open."""
    result = []
    for tx in transactions:
        if start is not None and tx.transaction_date < start:
            continue
        if end is not None and tx.transaction_date > end:
            continue
        result.append(tx)
    return result


def sort_by_date(
    transactions: Iterable[Transaction],
    descending: bool = False,
) -> list[Transaction]:
    """Stable sort on the transaction date; same-day entries keep their order."""
    return sorted(transactions, key=lambda tx: tx.transaction_date, reverse=descending)


def expense_breakdown(transactions: Iterable[Transaction]) -> list[CategoryTotal]:
    """
    Expense totals per category, in order of first appearance.

    Categories with no expenses are omitted.
    """
    totals: dict[ExpenseCategory, Decimal] = {}
    for tx in transactions:
        if tx.is_income:
            continue
        totals[tx.category] = totals.get(tx.category, Decimal("0")) + tx.amount
    return [
        CategoryTotal(category=category, total=total)
        for category, total in totals.items()
        if total > 0
    ]


def split_profit(balance: Decimal, policy: ProfitSharingPolicy) -> list[ProfitShare]:
    """
    Split a positive balance equally between the partners.

    No shares are produced when the balance is zero or negative.
    """
    if balance <= 0:
        return []
    step = Decimal(1).scaleb(-policy.decimal_places)
    share = (balance / len(policy.partners)).quantize(step, rounding=ROUND_HALF_UP)
    return [ProfitShare(partner=partner, amount=share) for partner in policy.partners]


def build_monthly_report(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
    policy: ProfitSharingPolicy,
) -> MonthlyReport:
    """
    Everything the monthly report shows for one calendar month.

    Income/expense and transfer/cash are two independent partitions of
    the month's transactions. Rows are sorted oldest first.
    """
    monthly = filter_by_month(transactions, year, month)
    totals = compute_totals(monthly)

    total_transfer = Decimal("0")
    total_cash = Decimal("0")
    for tx in monthly:
        if tx.payment_method == PaymentMethod.CASH:
            total_cash += tx.amount
        else:
            total_transfer += tx.amount

    return MonthlyReport(
        year=year,
        month=month,
        totals=totals,
        total_transfer=total_transfer,
        total_cash=total_cash,
        profit_shares=split_profit(totals.balance, policy),
        transactions=sort_by_date(monthly),
    )
