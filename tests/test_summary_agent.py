"""
Tests for the AI financial summary agent.

No real Gemini calls: the agent is given a fake model.
"""

import asyncio

import pytest

from bookkeeping.agents import (
    DISABLED_MESSAGE,
    ERROR_MESSAGE,
    NO_TRANSACTIONS_MESSAGE,
    FinancialSummaryAgent,
    build_summary_prompt,
    format_transaction_line,
)
from bookkeeping.audit import AuditLogger
from bookkeeping.config import GeminiSettings
from bookkeeping.models import AuditEventType


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    """Records prompts and answers with a fixed text or error."""

    def __init__(self, text="**Financial Summary:**\nAll good.", error=None):
        self.text = text
        self.error = error
        self.prompts = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return FakeResponse(self.text)


def _summarize(agent, transactions):
    return asyncio.run(agent.summarize(transactions))


class TestPrompt:
    def test_transaction_line(self, sample_transactions):
        assert format_transaction_line(sample_transactions[0]) == (
            "- Income: Subscriber dues - Rp 2.000.000 on 2/3/2024"
        )
        assert format_transaction_line(sample_transactions[1]).startswith("- Expense: Office rent")

    def test_prompt_lists_every_transaction(self, sample_transactions):
        prompt = build_summary_prompt(sample_transactions)
        assert prompt.count("\n- ") == len(sample_transactions)
        assert "**Practical Suggestion:**" in prompt


class TestFinancialSummaryAgent:
    """Tests for FinancialSummaryAgent.summarize."""

    def test_disabled_without_api_key(self, sample_transactions):
        agent = FinancialSummaryAgent(settings=GeminiSettings(api_key=None))
        assert not agent.is_enabled
        assert _summarize(agent, sample_transactions) == DISABLED_MESSAGE

    def test_blank_api_key_counts_as_missing(self):
        assert not GeminiSettings(api_key="   ").is_configured

    def test_no_transactions(self):
        model = FakeModel()
        agent = FinancialSummaryAgent(settings=GeminiSettings(api_key=None), model=model)

        assert _summarize(agent, []) == NO_TRANSACTIONS_MESSAGE
        assert model.prompts == []

    def test_returns_model_text(self, sample_transactions):
        model = FakeModel(text="  **Financial Summary:**\nSpend less on rent.  ")
        agent = FinancialSummaryAgent(settings=GeminiSettings(api_key=None), model=model)

        result = _summarize(agent, sample_transactions)

        assert result == "**Financial Summary:**\nSpend less on rent."
        assert "Office rent" in model.prompts[0]

    def test_failure_is_reported_and_audited(self, store, sample_transactions):
        audit = AuditLogger(store)
        model = FakeModel(error=RuntimeError("quota exceeded"))
        agent = FinancialSummaryAgent(
            settings=GeminiSettings(api_key=None), model=model, audit_logger=audit
        )

        assert _summarize(agent, sample_transactions) == ERROR_MESSAGE

        event = audit.recent_events()[0]
        assert event.event_type == AuditEventType.EXTERNAL_SERVICE_ERROR
        assert "quota exceeded" in event.error_message

    def test_empty_response_is_an_error(self, sample_transactions):
        agent = FinancialSummaryAgent(
            settings=GeminiSettings(api_key=None), model=FakeModel(text="")
        )
        assert _summarize(agent, sample_transactions) == ERROR_MESSAGE


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
