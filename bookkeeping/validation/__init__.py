"""Form validation package."""

from bookkeeping.validation.forms import (
    ACCOUNT_DUPLICATE_MESSAGE,
    ACCOUNT_REQUIRED_MESSAGE,
    CUSTOMER_FORM_MESSAGE,
    TRANSACTION_FORM_MESSAGE,
    FormValidator,
    parse_amount,
)

__all__ = [
    "ACCOUNT_DUPLICATE_MESSAGE",
    "ACCOUNT_REQUIRED_MESSAGE",
    "CUSTOMER_FORM_MESSAGE",
    "TRANSACTION_FORM_MESSAGE",
    "FormValidator",
    "parse_amount",
]
