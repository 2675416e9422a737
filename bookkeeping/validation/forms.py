"""
Form Validation

DESIGN DECISION: Form input is checked in two stages, like any other
data entering the books:

STAGE 1 - FIELD CHECKS:
- Required fields present and non-blank
- Amount parses as a positive number
- Enumerated values (type, payment method, category) recognized

STAGE 2 - SEMANTIC CHECKS:
- Username not already taken
- Dates in the future (warning only)

Only when both stages pass without errors is a record built. An invalid
submission never reaches a collection, so nothing is mutated.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from bookkeeping.models import (
    Customer,
    ExpenseCategory,
    PaymentMethod,
    SubscriptionCategory,
    Transaction,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    new_transaction,
    normalize_date,
)


TRANSACTION_FORM_MESSAGE = "Please fill in all fields correctly. Amount must be positive."
CUSTOMER_FORM_MESSAGE = "Please fill in name, phone and amount correctly."
ACCOUNT_REQUIRED_MESSAGE = "Username and password cannot be empty."
ACCOUNT_DUPLICATE_MESSAGE = "Username already exists."


def parse_amount(value: Any) -> Optional[Decimal]:
    """Positive Decimal from form input, or None if it is not one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


def _blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def _result(issues: list[ValidationIssue]) -> ValidationResult:
    return ValidationResult(
        is_valid=not any(issue.severity == "error" for issue in issues),
        issues=issues,
    )


class FormValidator:
    """
    Validates raw form submissions.

    Each validate_* method returns (record or None, ValidationResult).
    The record is None whenever the result has errors.
    """

    def __init__(self, today: Optional[date] = None):
        self._today = today

    @property
    def today(self) -> date:
        return self._today or date.today()

    def validate_transaction(
        self,
        description: Any,
        amount: Any,
        type: Any,
        transaction_date: Any,
        payment_method: Any = PaymentMethod.TRANSFER,
        category: Any = None,
        record_id: Optional[str] = None,
    ) -> tuple[Optional[Transaction], ValidationResult]:
        """Check an add/edit transaction form."""
        issues: list[ValidationIssue] = []

        if _blank(description):
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message=TRANSACTION_FORM_MESSAGE,
            ))

        parsed_amount = parse_amount(amount)
        if parsed_amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=TRANSACTION_FORM_MESSAGE,
            ))

        kind = None
        try:
            kind = TransactionType(type)
        except ValueError:
            issues.append(ValidationIssue(
                field="type",
                issue_type="invalid_value",
                message="Transaction type must be income or expense.",
            ))

        method = None
        try:
            method = PaymentMethod(payment_method)
        except ValueError:
            issues.append(ValidationIssue(
                field="payment_method",
                issue_type="invalid_value",
                message="Payment method must be transfer or cash.",
            ))

        expense_category = None
        if kind is TransactionType.EXPENSE:
            if _blank(category):
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="missing",
                    message="Please choose a category for this expense.",
                ))
            else:
                try:
                    expense_category = ExpenseCategory(category)
                except ValueError:
                    issues.append(ValidationIssue(
                        field="category",
                        issue_type="invalid_value",
                        message=f"Unknown expense category: {category}",
                    ))

        tx_date = None
        try:
            tx_date = normalize_date(transaction_date)
        except (TypeError, ValueError):
            issues.append(ValidationIssue(
                field="date",
                issue_type="invalid_value",
                message="Please enter a valid date.",
            ))

        # Stage 2 only on structurally valid input
        if tx_date is not None and tx_date > self.today:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message="This transaction is dated in the future.",
                severity="warning",
            ))

        result = _result(issues)
        if not result.is_valid:
            return None, result

        try:
            record = new_transaction(
                type=kind,
                description=str(description),
                amount=parsed_amount,
                transaction_date=tx_date,
                payment_method=method,
                category=expense_category,
                record_id=record_id,
            )
        except ValidationError as e:
            return None, self._from_model_error(e, TRANSACTION_FORM_MESSAGE)
        return record, result

    def validate_customer(
        self,
        name: Any,
        phone: Any,
        amount: Any,
        address: Any = "",
        subscription_category: Any = SubscriptionCategory.PPPOE,
        record_id: Optional[str] = None,
    ) -> tuple[Optional[Customer], ValidationResult]:
        """Check an add-customer form."""
        issues: list[ValidationIssue] = []

        for field, value in (("name", name), ("phone", phone)):
            if _blank(value):
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message=CUSTOMER_FORM_MESSAGE,
                ))

        parsed_amount = parse_amount(amount)
        if parsed_amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=CUSTOMER_FORM_MESSAGE,
            ))

        plan = None
        try:
            plan = SubscriptionCategory(subscription_category)
        except ValueError:
            issues.append(ValidationIssue(
                field="subscription_category",
                issue_type="invalid_value",
                message=f"Unknown subscription category: {subscription_category}",
            ))

        result = _result(issues)
        if not result.is_valid:
            return None, result

        fields: dict[str, Any] = {
            "name": str(name),
            "phone": str(phone),
            "address": "" if address is None else str(address),
            "subscription_category": plan,
            "amount": parsed_amount,
        }
        if record_id is not None:
            fields["id"] = record_id
        try:
            record = Customer(**fields)
        except ValidationError as e:
            return None, self._from_model_error(e, CUSTOMER_FORM_MESSAGE)
        return record, result

    def validate_account(
        self,
        username: Any,
        password: Any,
        existing_usernames: Iterable[str] = (),
    ) -> ValidationResult:
        """Check a new-account form. Usernames compare case-sensitively."""
        issues: list[ValidationIssue] = []

        if _blank(username) or not password:
            issues.append(ValidationIssue(
                field="username" if _blank(username) else "password",
                issue_type="missing",
                message=ACCOUNT_REQUIRED_MESSAGE,
            ))
        elif str(username).strip() in set(existing_usernames):
            issues.append(ValidationIssue(
                field="username",
                issue_type="duplicate",
                message=ACCOUNT_DUPLICATE_MESSAGE,
            ))

        return _result(issues)

    @staticmethod
    def _from_model_error(error: ValidationError, message: str) -> ValidationResult:
        issues = [
            ValidationIssue(
                field=".".join(str(part) for part in detail.get("loc", ())) or "form",
                issue_type="invalid_value",
                message=message,
            )
            for detail in error.errors()
        ]
        return _result(issues)
