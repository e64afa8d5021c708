"""
Chat Edit Service

Applies a natural-language instruction ("add 10% SOL", "make it equal")
to the current portfolio through the LLM. Replies that cannot be parsed
leave the portfolio unchanged.
"""

import json
import logging
from typing import List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from ..config.app_config import CHAT_MODEL
from ..models.portfolio import ChatReply, PortfolioItem
from .llm_client import LLMClient, get_llm_client
from .normalization import rescale_percentages

logger = logging.getLogger(__name__)

UNPARSEABLE_REPLY = "I had trouble processing that. Could you try rephrasing?"
INVALID_PORTFOLIO_REPLY = "I had trouble updating the portfolio. Please try again."
CLEARED_REPLY = "Your portfolio is now empty."

SYSTEM_PROMPT = """You are a portfolio management assistant for DefiBuddy. The user has a crypto portfolio and wants to modify it via natural language.

Current portfolio: {portfolio}

RULES:
- Always return valid JSON with two fields: "reply" (string message to user) and "portfolio" (array of objects with "name", "symbol" (optional), and "percentage" fields).
- Percentages MUST always sum to exactly 100.
- When adding an asset, distribute its percentage by reducing others proportionally.
- When removing an asset, redistribute its percentage proportionally among remaining assets.
- When rebalancing, follow the user's instruction (e.g. "equal" means split evenly).
- If the user asks something unrelated or you can't parse their intent, return the portfolio unchanged and explain in your reply.
- Keep asset names concise and use standard ticker symbols.
- If the portfolio would be empty after removal, return an empty array and note that in reply."""


def describe_portfolio(items: List[PortfolioItem]) -> str:
    """'Bitcoin (BTC): 60%, Ethereum: 40%' or the empty marker"""
    if not items:
        return "Empty portfolio (no assets)"
    return ", ".join(
        f"{item.name}{f' ({item.symbol})' if item.symbol else ''}: {item.percentage}%"
        for item in items
    )


class ChatEditService:
    """Natural-language portfolio editing"""

    def __init__(self, llm: Optional[LLMClient] = None, model: str = CHAT_MODEL):
        self.llm = llm or get_llm_client()
        self.model = model

    def edit(self, instruction: str, portfolio: List[PortfolioItem]) -> Tuple[str, List[PortfolioItem]]:
        """
        Returns:
            (reply, new portfolio); the new portfolio is empty when the
            user asked to remove everything

        Raises:
            UpstreamUnavailableError: the LLM could not be reached
        """
        system_prompt = SYSTEM_PROMPT.format(portfolio=describe_portfolio(portfolio))
        content = self.llm.complete_json(self.model, system_prompt, instruction)

        if not content:
            logger.warning("Empty chat reply from LLM", extra={'service': 'openai'})
            return UNPARSEABLE_REPLY, list(portfolio)

        try:
            parsed = json.loads(content)
        except ValueError:
            logger.warning("Chat reply was not JSON", extra={'service': 'openai'})
            return UNPARSEABLE_REPLY, list(portfolio)

        try:
            result = ChatReply.model_validate(parsed)
        except PydanticValidationError as e:
            logger.warning(
                f"Chat reply failed validation: {e.error_count()} errors",
                extra={'service': 'openai', 'error_code': 'UPSTREAM_DATA_INVALID'}
            )
            reply = parsed.get('reply') if isinstance(parsed, dict) else None
            if not isinstance(reply, str) or not reply.strip():
                reply = INVALID_PORTFOLIO_REPLY
            return reply, list(portfolio)

        percentages = rescale_percentages([item.percentage for item in result.portfolio])
        items = [
            PortfolioItem(name=item.name, symbol=item.symbol, percentage=pct)
            for item, pct in zip(result.portfolio, percentages)
        ]

        reply = result.reply.strip() or (CLEARED_REPLY if not items else "Portfolio updated.")
        logger.info(f"Chat edit produced {len(items)} items", extra={'service': 'chat_edit'})
        return reply, items
