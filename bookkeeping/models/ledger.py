"""
Core Data Models for ISP Bookkeeping

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Serialize to the same JSON layout the stored data already uses
4. Read older stored records without losing them

DESIGN DECISION: A transaction is a tagged variant. An expense carries a
category, an income cannot. This is enforced by the type itself rather than
by an optional field that callers have to remember to clear.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    computed_field,
    field_serializer,
    field_validator,
    model_validator,
)


def new_record_id() -> str:
    """Random 128-bit identifier for a new record."""
    return str(uuid4())


def normalize_date(value: Any) -> date:
    """
    Reduce a date-like value to a calendar date.

    Aware datetimes are converted to UTC first, so a record stored as
    "2024-03-31T23:30:00-02:00" lands on 1 April, exactly as the stored
    UTC timestamp says. Naive datetimes keep their own calendar day.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Date is required")
        if "T" in text or " " in text:
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            return normalize_date(datetime.fromisoformat(text))
        return date.fromisoformat(text)
    raise ValueError(f"Unsupported date value: {value!r}")


def _match_member(enum_cls, value: Any, aliases: dict):
    """Resolve an enum member from its value, its name or a known alias."""
    if not isinstance(value, str):
        return None
    wanted = value.strip().lower()
    for member in enum_cls:
        names = {member.value, member.name.lower()}
        names.update(alias.lower() for alias in aliases.get(member, ()))
        if wanted in names:
            return member
    return None


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of money flow."""
    INCOME = "income"
    EXPENSE = "expense"


class PaymentMethod(str, Enum):
    """
    How the money moved.

    Older stored records use the display labels "Transfer" and "Tunai";
    both are accepted on input.
    """
    TRANSFER = "transfer"
    CASH = "cash"

    @classmethod
    def _missing_(cls, value):
        return _match_member(cls, value, _PAYMENT_ALIASES)

    @property
    def label(self) -> str:
        return _PAYMENT_LABELS[self]


class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    DESIGN DECISION: Using explicit categories rather than free text ensures
    the expenditure chart groups consistently.
    """
    OPERATIONAL = "operational"
    SALARY = "salary"
    RENT = "rent"
    UTILITIES = "utilities"
    ISP_DUES = "isp_dues"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value):
        return _match_member(cls, value, _CATEGORY_ALIASES)

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


class SubscriptionCategory(str, Enum):
    """Subscription plans offered to customers."""
    PPPOE = "pppoe"
    STATIC = "static"
    HOTSPOT = "hotspot"
    VOUCHER = "voucher"

    @classmethod
    def _missing_(cls, value):
        return _match_member(cls, value, _SUBSCRIPTION_ALIASES)

    @property
    def label(self) -> str:
        return _SUBSCRIPTION_LABELS[self]


class UserRole(str, Enum):
    """Account roles. Only admins manage accounts."""
    ADMIN = "admin"
    USER = "user"


_PAYMENT_LABELS = {
    PaymentMethod.TRANSFER: "Transfer",
    PaymentMethod.CASH: "Cash",
}
_PAYMENT_ALIASES = {
    PaymentMethod.TRANSFER: ("Transfer",),
    PaymentMethod.CASH: ("Cash", "Tunai"),
}

_CATEGORY_LABELS = {
    ExpenseCategory.OPERATIONAL: "Operational",
    ExpenseCategory.SALARY: "Salary",
    ExpenseCategory.RENT: "Rent",
    ExpenseCategory.UTILITIES: "Electricity & Internet",
    ExpenseCategory.ISP_DUES: "ISP Dues",
    ExpenseCategory.OTHER: "Other",
}
_CATEGORY_ALIASES = {
    ExpenseCategory.OPERATIONAL: ("Operasional",),
    ExpenseCategory.SALARY: ("Gaji",),
    ExpenseCategory.RENT: ("Sewa",),
    ExpenseCategory.UTILITIES: ("Listrik & Internet", "Electricity & Internet"),
    ExpenseCategory.ISP_DUES: ("Setoran ISP", "ISP Dues", "customer_dues"),
    ExpenseCategory.OTHER: ("Lain-lain",),
}

_SUBSCRIPTION_LABELS = {
    SubscriptionCategory.PPPOE: "PPPoE",
    SubscriptionCategory.STATIC: "Static",
    SubscriptionCategory.HOTSPOT: "Hotspot",
    SubscriptionCategory.VOUCHER: "Voucher Partner",
}
_SUBSCRIPTION_ALIASES = {
    SubscriptionCategory.HOTSPOT: ("Hostpot",),
    SubscriptionCategory.VOUCHER: ("Mitra Voucher", "Voucher Partner"),
}


# =============================================================================
# TRANSACTIONS
# =============================================================================

class _TransactionBase(BaseModel):
    """
    Fields shared by both transaction variants.

    Field aliases match the stored JSON layout (camelCase keys,
    "date" holding a UTC timestamp).
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    id: str = Field(
        default_factory=new_record_id,
        min_length=1,
        description="Unique transaction ID"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="What the money was for"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount in Rupiah"
    )
    transaction_date: date = Field(
        ...,
        alias="date",
        description="Calendar date of the transaction"
    )
    payment_method: PaymentMethod = Field(
        default=PaymentMethod.TRANSFER,
        alias="paymentMethod",
        description="Transfer or cash"
    )

    @field_validator("transaction_date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> date:
        return normalize_date(v)

    @field_validator("payment_method", mode="before")
    @classmethod
    def default_payment_method(cls, v: Any) -> Any:
        # Records written before payment methods existed carry null
        if v is None:
            return PaymentMethod.TRANSFER
        return PaymentMethod(v) if isinstance(v, str) else v

    @field_serializer("transaction_date", when_used="json")
    def serialize_date(self, v: date) -> str:
        return f"{v.isoformat()}T00:00:00.000Z"


class IncomeTransaction(_TransactionBase):
    """Money received. Never carries a category."""

    type: Literal["income"] = "income"

    @property
    def is_income(self) -> bool:
        return True


class ExpenseTransaction(_TransactionBase):
    """Money spent, always filed under an expense category."""

    type: Literal["expense"] = "expense"
    category: ExpenseCategory = Field(
        ...,
        description="Expense category (required)"
    )

    @model_validator(mode="before")
    @classmethod
    def default_legacy_category(cls, data: Any) -> Any:
        # Old expenses saved without a category were filed as ISP dues
        if isinstance(data, dict) and data.get("category") is None:
            data = {**data, "category": ExpenseCategory.ISP_DUES}
        return data

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, v: Any) -> Any:
        return ExpenseCategory(v) if isinstance(v, str) else v

    @property
    def is_income(self) -> bool:
        return False


Transaction = Annotated[
    Union[IncomeTransaction, ExpenseTransaction],
    Field(discriminator="type"),
]

TransactionListAdapter = TypeAdapter(list[Transaction])


def new_transaction(
    type: Union[TransactionType, str],
    description: str,
    amount: Union[Decimal, int, float, str],
    transaction_date: Union[date, datetime, str],
    payment_method: Union[PaymentMethod, str] = PaymentMethod.TRANSFER,
    category: Optional[Union[ExpenseCategory, str]] = None,
    record_id: Optional[str] = None,
) -> Union[IncomeTransaction, ExpenseTransaction]:
    """
    Build the right transaction variant from a flat set of fields.

    Raises ValueError if an expense has no category. A category passed
    for an income is ignored.
    """
    kind = TransactionType(type)
    fields: dict[str, Any] = {
        "description": description,
        "amount": amount if isinstance(amount, Decimal) else Decimal(str(amount)),
        "transaction_date": transaction_date,
        "payment_method": payment_method,
    }
    if record_id is not None:
        fields["id"] = record_id

    if kind is TransactionType.INCOME:
        return IncomeTransaction(**fields)

    if category is None:
        raise ValueError("Expense transactions require a category")
    return ExpenseTransaction(category=category, **fields)


# =============================================================================
# CUSTOMERS
# =============================================================================

class Customer(BaseModel):
    """
    A subscriber and the amount they are billed each period.

    Customers are not linked to transactions; recording a payment
    from a customer is a separate income transaction.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    id: str = Field(
        default_factory=new_record_id,
        min_length=1,
        description="Unique customer ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Full name"
    )
    phone: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Phone number"
    )
    address: str = Field(
        default="",
        max_length=500,
        description="Installation address"
    )
    subscription_category: SubscriptionCategory = Field(
        default=SubscriptionCategory.PPPOE,
        alias="subscriptionCategory",
        description="Subscription plan"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Periodic bill in Rupiah"
    )

    @field_validator("subscription_category", mode="before")
    @classmethod
    def coerce_subscription(cls, v: Any) -> Any:
        return SubscriptionCategory(v) if isinstance(v, str) else v


CustomerListAdapter = TypeAdapter(list[Customer])


# =============================================================================
# ACCOUNTS AND SESSION
# =============================================================================

class SessionUser(BaseModel):
    """
    Public projection of the logged-in account.

    CRITICAL: Never carries a password or password hash.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str
    role: UserRole
    must_change_password: bool = Field(
        default=False,
        alias="mustChangePassword"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class Account(BaseModel):
    """A login identity. Usernames are unique and case-sensitive."""
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    id: str = Field(
        default_factory=new_record_id,
        min_length=1,
        description="Unique account ID"
    )
    username: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Login name"
    )
    password_hash: str = Field(
        ...,
        min_length=1,
        alias="passwordHash",
        repr=False,
        description="Salted password hash"
    )
    role: UserRole = Field(
        default=UserRole.USER,
        description="Account role"
    )
    must_change_password: bool = Field(
        default=False,
        alias="mustChangePassword",
        description="Force a password change at next login"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def to_session(self) -> SessionUser:
        return SessionUser(
            id=self.id,
            username=self.username,
            role=self.role,
            must_change_password=self.must_change_password,
        )


AccountListAdapter = TypeAdapter(list[Account])


# =============================================================================
# REPORT MODELS
# =============================================================================

class FinancialTotals(BaseModel):
    """Income, expense and the balance between them."""

    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")

    @computed_field
    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expense


class CategoryTotal(BaseModel):
    """Sum of expenses filed under one category."""

    category: ExpenseCategory
    total: Decimal


class ProfitSharingPolicy(BaseModel):
    """Who shares a positive monthly balance, split equally."""

    partners: list[str] = Field(
        ...,
        min_length=1,
        description="Ordered partner names"
    )
    decimal_places: int = Field(
        default=2,
        ge=0,
        le=4,
        description="Rounding applied to each share"
    )


class ProfitShare(BaseModel):
    """One partner's share of the monthly profit."""

    partner: str
    amount: Decimal


class MonthlyReport(BaseModel):
    """
    Aggregated view of one calendar month.

    transfer/cash totals and income/expense totals are independent
    partitions of the same transactions.
    """

    year: int = Field(..., ge=1)
    month: int = Field(..., ge=1, le=12)
    totals: FinancialTotals = Field(default_factory=FinancialTotals)
    total_transfer: Decimal = Decimal("0")
    total_cash: Decimal = Decimal("0")
    profit_shares: list[ProfitShare] = Field(default_factory=list)
    transactions: list[Transaction] = Field(
        default_factory=list,
        description="The month's transactions, oldest first"
    )

    @property
    def total_income(self) -> Decimal:
        return self.totals.total_income

    @property
    def total_expense(self) -> Decimal:
        return self.totals.total_expense

    @property
    def balance(self) -> Decimal:
        return self.totals.balance

    @property
    def is_empty(self) -> bool:
        return not self.transactions

    @property
    def has_profit_sharing(self) -> bool:
        return bool(self.profit_shares)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in submitted form input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'duplicate')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Outcome of validating one form submission."""

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def message(self) -> str:
        """First error message, for inline display."""
        for issue in self.issues:
            if issue.severity == "error":
                return issue.message
        return ""
