"""
Tests for Chat Portfolio Editing (defibuddy/services/chat_service.py)
"""

import pytest

from defibuddy.exceptions import UpstreamUnavailableError
from defibuddy.models.portfolio import PortfolioItem
from defibuddy.services.chat_service import (
    CLEARED_REPLY,
    INVALID_PORTFOLIO_REPLY,
    UNPARSEABLE_REPLY,
    ChatEditService,
    describe_portfolio,
)

from conftest import FakeLLM, llm_json


@pytest.fixture
def portfolio():
    return [
        PortfolioItem(name="Bitcoin", symbol="BTC", percentage=60),
        PortfolioItem(name="Ethereum", percentage=40),
    ]


class TestDescribePortfolio:

    def test_items(self, portfolio):
        assert describe_portfolio(portfolio) == "Bitcoin (BTC): 60%, Ethereum: 40%"

    def test_empty(self):
        assert describe_portfolio([]) == "Empty portfolio (no assets)"


class TestChatEditService:

    def test_applies_edit(self, portfolio):
        llm = FakeLLM(llm_json({
            "reply": "Added 20% LINK.",
            "portfolio": [
                {"name": "Bitcoin", "symbol": "BTC", "percentage": 48},
                {"name": "Ethereum", "symbol": "ETH", "percentage": 32},
                {"name": "Chainlink", "symbol": "LINK", "percentage": 20},
            ],
        }))

        reply, items = ChatEditService(llm).edit("Add 20% LINK", portfolio)

        assert reply == "Added 20% LINK."
        assert [(i.symbol, i.percentage) for i in items] == [("BTC", 48), ("ETH", 32), ("LINK", 20)]

    def test_prompt_carries_portfolio_and_instruction(self, portfolio):
        llm = FakeLLM(llm_json({"reply": "ok", "portfolio": []}))
        ChatEditService(llm, model="chat-test").edit("Make it equal", portfolio)

        call = llm.calls[0]
        assert call["model"] == "chat-test"
        assert "Current portfolio: Bitcoin (BTC): 60%, Ethereum: 40%" in call["system"]
        assert call["user"] == "Make it equal"

    def test_fractional_percentages_renormalized(self, portfolio):
        llm = FakeLLM(llm_json({
            "reply": "Split evenly.",
            "portfolio": [
                {"name": "Bitcoin", "percentage": 33.3},
                {"name": "Ethereum", "percentage": 33.3},
                {"name": "Solana", "percentage": 33.4},
            ],
        }))

        _, items = ChatEditService(llm).edit("Add SOL and split evenly", portfolio)

        assert [i.percentage for i in items] == [34, 33, 33]

    def test_empty_portfolio_is_cleared(self, portfolio):
        llm = FakeLLM(llm_json({"reply": "", "portfolio": []}))

        reply, items = ChatEditService(llm).edit("Remove everything", portfolio)

        assert items == []
        assert reply == CLEARED_REPLY

    @pytest.mark.parametrize("content", [None, "", "this is not json"])
    def test_unparseable_reply_keeps_portfolio(self, portfolio, content):
        reply, items = ChatEditService(FakeLLM(content)).edit("Add LINK", portfolio)

        assert reply == UNPARSEABLE_REPLY
        assert items == portfolio

    def test_schema_mismatch_reuses_model_reply(self, portfolio):
        llm = FakeLLM(llm_json({"reply": "I can't do that.", "portfolio": "nope"}))

        reply, items = ChatEditService(llm).edit("Add LINK", portfolio)

        assert reply == "I can't do that."
        assert items == portfolio

    def test_schema_mismatch_without_reply(self, portfolio):
        llm = FakeLLM(llm_json({"portfolio": [{"name": "Bitcoin", "percentage": -5}]}))

        reply, items = ChatEditService(llm).edit("Sell half", portfolio)

        assert reply == INVALID_PORTFOLIO_REPLY
        assert items == portfolio

    def test_infinite_percentage_keeps_portfolio(self, portfolio):
        llm = FakeLLM('{"reply": "ok", "portfolio": [{"name": "Bitcoin", "percentage": Infinity}]}')

        reply, items = ChatEditService(llm).edit("Go all in on Bitcoin", portfolio)

        assert reply == "ok"
        assert items == portfolio

    def test_upstream_failure_propagates(self, portfolio):
        class DownLLM:
            def complete_json(self, model, system_prompt, user_prompt):
                raise UpstreamUnavailableError(service="openai")

        with pytest.raises(UpstreamUnavailableError):
            ChatEditService(DownLLM()).edit("Add LINK", portfolio)
