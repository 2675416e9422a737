"""
Tests for aggregation, profit sharing and display formatting.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from bookkeeping.models import (
    ExpenseCategory,
    PaymentMethod,
    ProfitSharingPolicy,
    new_transaction,
)
from bookkeeping.reports import (
    build_monthly_report,
    compute_totals,
    expense_breakdown,
    filter_by_date_range,
    filter_by_month,
    format_date,
    format_long_date,
    format_rupiah,
    month_key,
    month_label,
    sort_by_date,
    split_profit,
)


POLICY = ProfitSharingPolicy(partners=["Mardi Jayadi", "Daden", "Hamdan", "Umi"])


class TestTotals:
    """Tests for income/expense totals."""

    def test_empty_ledger(self):
        totals = compute_totals([])
        assert totals.total_income == 0
        assert totals.total_expense == 0
        assert totals.balance == 0

    def test_balance_is_income_minus_expense(self, sample_transactions):
        totals = compute_totals(sample_transactions)
        assert totals.total_income == Decimal("2300000")
        assert totals.total_expense == Decimal("1500000")
        assert totals.balance == totals.total_income - totals.total_expense


class TestFilters:
    """Tests for month and date range filtering."""

    def test_filter_by_month(self, sample_transactions):
        march = filter_by_month(sample_transactions, 2024, 3)
        april = filter_by_month(sample_transactions, 2024, 4)

        assert len(march) == 4
        assert [tx.description for tx in april] == ["Voucher sales"]
        assert filter_by_month(sample_transactions, 2023, 3) == []

    @pytest.mark.parametrize("month", [0, 13, -1])
    def test_invalid_month_rejected(self, sample_transactions, month):
        with pytest.raises(ValueError):
            filter_by_month(sample_transactions, 2024, month)

    @pytest.mark.parametrize("offset_hours", range(-12, 15))
    def test_month_boundary_independent_of_offset(self, offset_hours):
        """The last minutes of March in UTC stay in March, whatever the local offset."""
        utc_moment = datetime(2024, 3, 31, 23, 30, tzinfo=timezone.utc)
        local = utc_moment.astimezone(timezone(timedelta(hours=offset_hours)))
        tx = new_transaction("income", "Late dues", Decimal("1000"), local)

        assert filter_by_month([tx], 2024, 3) == [tx]
        assert filter_by_month([tx], 2024, 4) == []

    def test_date_range_is_inclusive(self, sample_transactions):
        ranged = filter_by_date_range(sample_transactions, date(2024, 3, 5), date(2024, 3, 28))
        assert [tx.description for tx in ranged] == [
            "Office rent", "Upstream bandwidth", "Technician salary",
        ]

    def test_open_bounds(self, sample_transactions):
        assert len(filter_by_date_range(sample_transactions)) == 5
        assert len(filter_by_date_range(sample_transactions, start=date(2024, 3, 16))) == 2
        assert len(filter_by_date_range(sample_transactions, end=date(2024, 3, 2))) == 1

    def test_sort_is_stable(self):
        same_day = [
            new_transaction("income", name, Decimal("1"), date(2024, 3, 1))
            for name in ("a", "b", "c")
        ]
        earlier = new_transaction("income", "z", Decimal("1"), date(2024, 2, 1))

        ascending = sort_by_date([*same_day, earlier])
        descending = sort_by_date([*same_day, earlier], descending=True)

        assert [tx.description for tx in ascending] == ["z", "a", "b", "c"]
        assert [tx.description for tx in descending] == ["a", "b", "c", "z"]


class TestExpenseBreakdown:
    """Tests for the per-category expense totals."""

    def test_first_appearance_order(self, sample_transactions):
        breakdown = expense_breakdown(sample_transactions)
        assert [(c.category, c.total) for c in breakdown] == [
            (ExpenseCategory.RENT, Decimal("750000")),
            (ExpenseCategory.ISP_DUES, Decimal("500000")),
            (ExpenseCategory.SALARY, Decimal("250000")),
        ]

    def test_same_category_is_summed(self):
        txs = [
            new_transaction("expense", "Cable", Decimal("100"), date(2024, 3, 1), category="operational"),
            new_transaction("expense", "Clamp", Decimal("50"), date(2024, 3, 2), category="operational"),
        ]
        breakdown = expense_breakdown(txs)
        assert len(breakdown) == 1
        assert breakdown[0].total == Decimal("150")

    def test_income_only_ledger_has_no_slices(self):
        txs = [new_transaction("income", "Dues", Decimal("100"), date(2024, 3, 1))]
        assert expense_breakdown(txs) == []


class TestProfitSharing:
    """Tests for splitting a positive balance."""

    def test_equal_split(self):
        shares = split_profit(Decimal("1000"), POLICY)
        assert [s.partner for s in shares] == POLICY.partners
        assert all(str(s.amount) == "250.00" for s in shares)

    def test_rounding_half_up(self):
        policy = ProfitSharingPolicy(partners=["A", "B", "C"])
        shares = split_profit(Decimal("100"), policy)
        assert [s.amount for s in shares] == [Decimal("33.33")] * 3

    def test_whole_rupiah_policy(self):
        policy = ProfitSharingPolicy(partners=["A", "B"], decimal_places=0)
        assert split_profit(Decimal("3"), policy)[0].amount == Decimal("2")

    @pytest.mark.parametrize("balance", [Decimal("0"), Decimal("-500000")])
    def test_no_shares_without_profit(self, balance):
        assert split_profit(balance, POLICY) == []


class TestMonthlyReport:
    """Tests for build_monthly_report."""

    def test_march_report(self, sample_transactions):
        report = build_monthly_report(list(reversed(sample_transactions)), 2024, 3, POLICY)

        assert report.total_income == Decimal("2000000")
        assert report.total_expense == Decimal("1500000")
        assert report.balance == Decimal("500000")
        assert report.total_transfer == Decimal("2500000")
        assert report.total_cash == Decimal("1000000")
        assert report.total_transfer + report.total_cash == (
            report.total_income + report.total_expense
        )
        assert [s.amount for s in report.profit_shares] == [Decimal("125000.00")] * 4
        dates = [tx.transaction_date for tx in report.transactions]
        assert dates == sorted(dates)

    def test_internet_bill_scenario(self):
        """A single transferred expense leaves a loss and nothing to share."""
        tx = new_transaction(
            "expense", "Internet bill", Decimal("500000"), date(2024, 3, 15),
            PaymentMethod.TRANSFER, ExpenseCategory.ISP_DUES,
        )
        report = build_monthly_report([tx], 2024, 3, POLICY)

        assert report.total_income == 0
        assert report.total_expense == Decimal("500000")
        assert report.total_transfer == Decimal("500000")
        assert report.total_cash == 0
        assert report.balance == Decimal("-500000")
        assert not report.has_profit_sharing

    def test_empty_month(self, sample_transactions):
        report = build_monthly_report(sample_transactions, 2024, 5, POLICY)
        assert report.is_empty
        assert report.balance == 0
        assert report.profit_shares == []


class TestFormatting:
    """Tests for Rupiah and date formatting."""

    @pytest.mark.parametrize("amount, expected", [
        (Decimal("1500000"), "Rp 1.500.000"),
        (Decimal("0"), "Rp 0"),
        (Decimal("-500000"), "Rp -500.000"),
        (Decimal("1234.5"), "Rp 1.234,50"),
        (Decimal("250.00"), "Rp 250"),
        (150000, "Rp 150.000"),
    ])
    def test_format_rupiah(self, amount, expected):
        assert format_rupiah(amount) == expected

    def test_format_rupiah_fixed_places(self):
        assert format_rupiah(Decimal("125000.00"), 2) == "Rp 125.000,00"
        assert format_rupiah(Decimal("33.335"), 2) == "Rp 33,34"

    def test_dates(self):
        assert format_date(date(2024, 3, 5)) == "5/3/2024"
        assert format_long_date(date(2026, 10, 19)) == "19 October 2026"

    def test_month_helpers(self):
        assert month_label(2024, 3) == "March 2024"
        assert month_key(2024, 3) == "2024-03"
        with pytest.raises(ValueError):
            month_label(2024, 13)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
