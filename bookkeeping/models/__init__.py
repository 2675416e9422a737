"""
Data Models Package

This package contains all Pydantic models used in the ISP Bookkeeping system.
All data flowing through the system must conform to these schemas.
"""

from bookkeeping.models.ledger import (
    Account,
    AccountListAdapter,
    CategoryTotal,
    Customer,
    CustomerListAdapter,
    ExpenseCategory,
    ExpenseTransaction,
    FinancialTotals,
    IncomeTransaction,
    MonthlyReport,
    PaymentMethod,
    ProfitShare,
    ProfitSharingPolicy,
    SessionUser,
    SubscriptionCategory,
    Transaction,
    TransactionListAdapter,
    TransactionType,
    UserRole,
    ValidationIssue,
    ValidationResult,
    new_record_id,
    new_transaction,
    normalize_date,
)
from bookkeeping.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Account",
    "AccountListAdapter",
    "CategoryTotal",
    "Customer",
    "CustomerListAdapter",
    "ExpenseCategory",
    "ExpenseTransaction",
    "FinancialTotals",
    "IncomeTransaction",
    "MonthlyReport",
    "PaymentMethod",
    "ProfitShare",
    "ProfitSharingPolicy",
    "SessionUser",
    "SubscriptionCategory",
    "Transaction",
    "TransactionListAdapter",
    "TransactionType",
    "UserRole",
    "ValidationIssue",
    "ValidationResult",
    "new_record_id",
    "new_transaction",
    "normalize_date",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
