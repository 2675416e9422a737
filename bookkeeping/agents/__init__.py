"""AI Agents package."""

from bookkeeping.agents.summary_agent import (
    DISABLED_MESSAGE,
    ERROR_MESSAGE,
    NO_TRANSACTIONS_MESSAGE,
    FinancialSummaryAgent,
    build_summary_prompt,
    format_transaction_line,
)

__all__ = [
    "DISABLED_MESSAGE",
    "ERROR_MESSAGE",
    "NO_TRANSACTIONS_MESSAGE",
    "FinancialSummaryAgent",
    "build_summary_prompt",
    "format_transaction_line",
]
