"""
AI Financial Summary Agent

DESIGN DECISION: The summary is an optional extra. The books work the
same with or without it, so the agent never raises: a missing API key,
an empty ledger and any failure of the remote call each produce a fixed
message the UI can show as-is.

CRITICAL BOUNDARIES:
- CAN: Describe spending habits from the transactions it is given
- CAN: Offer one practical suggestion
- CANNOT: Change, add or remove records
- CANNOT: See anything but the transaction list passed in

The LLM is a WRITER over the user's own data, not a source of figures.
"""

from typing import Any, Iterable, Optional

import google.generativeai as genai
import structlog

from bookkeeping.audit import AuditLogger
from bookkeeping.config import GeminiSettings, get_settings
from bookkeeping.models import Transaction
from bookkeeping.reports.formatting import format_date, format_rupiah


logger = structlog.get_logger(__name__)

DISABLED_MESSAGE = "AI features are disabled because no API key is configured."
NO_TRANSACTIONS_MESSAGE = (
    "No transactions to analyse yet. Please add a few transactions first."
)
ERROR_MESSAGE = (
    "Sorry, something went wrong while analysing your finances. "
    "Please try again later."
)


def format_transaction_line(tx: Transaction) -> str:
    """One prompt line, e.g. '- Income: Internet bill - Rp 500.000 on 15/3/2024'."""
    kind = "Income" if tx.is_income else "Expense"
    return (
        f"- {kind}: {tx.description} - {format_rupiah(tx.amount)}"
        f" on {format_date(tx.transaction_date)}"
    )


def build_summary_prompt(transactions: Iterable[Transaction]) -> str:
    lines = "\n".join(format_transaction_line(tx) for tx in transactions)
    return f"""You are a friendly and sharp personal finance adviser.

Based on the transactions below, write a short summary (2-3 sentences) of the
user's spending habits and one practical suggestion they can apply right away
to improve their financial health. Use Markdown.

Transactions:
{lines}

Answer format:
**Financial Summary:**
[summary here]

**Practical Suggestion:**
[one suggestion here]"""


class FinancialSummaryAgent:
    """
    Writes a short Markdown summary of a transaction list with Gemini.

    Usage:
        agent = FinancialSummaryAgent()
        text = await agent.summarize(transactions)
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Args:
            settings: Gemini settings (defaults to the global settings)
            model: Anything with an async generate_content_async(prompt);
                   built from settings when omitted
            audit_logger: Receives external_service_error events
        """
        self._settings = settings or get_settings().gemini
        self._model = model
        self._audit = audit_logger or AuditLogger()

    @property
    def is_enabled(self) -> bool:
        return self._model is not None or self._settings.is_configured

    def _get_model(self):
        """Configure Google Generative AI on first use."""
        if self._model is None:
            genai.configure(api_key=self._settings.api_key)
            self._model = genai.GenerativeModel(
                model_name=self._settings.model_name,
                generation_config={
                    "temperature": self._settings.temperature,
                    "max_output_tokens": self._settings.max_tokens,
                }
            )
        return self._model

    async def summarize(self, transactions: Iterable[Transaction]) -> str:
        """Markdown summary of the transactions, or a fixed fallback message."""
        if not self.is_enabled:
            logger.warning("ai_summary_disabled", reason="missing_api_key")
            return DISABLED_MESSAGE

        transactions = list(transactions)
        if not transactions:
            return NO_TRANSACTIONS_MESSAGE

        prompt = build_summary_prompt(transactions)
        try:
            response = await self._get_model().generate_content_async(prompt)
            text = (response.text or "").strip()
        except Exception as e:
            self._audit.log_external_service_error("gemini", str(e))
            return ERROR_MESSAGE

        if not text:
            self._audit.log_external_service_error("gemini", "empty response")
            return ERROR_MESSAGE

        logger.info("ai_summary_generated", transaction_count=len(transactions))
        return text
