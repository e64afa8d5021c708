"""
Personality Lookup Service

Asks the LLM which crypto assets a public figure is associated with,
normalizes the answer to whole percentages and records the search.
"""

import json
import logging
from datetime import datetime
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config.app_config import LOOKUP_MODEL, MAX_HOLDINGS
from ..exceptions import DatabaseError, UpstreamDataInvalidError
from ..models.database import Search
from ..models.lookup import LlmInvestmentsReply
from .llm_client import LLMClient, get_llm_client
from .normalization import normalize_weights

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a cryptocurrency research expert. Your task is to identify the top {limit} cryptocurrency assets that a given public figure (who has a large following on Twitter/X) is known to be invested in, has publicly endorsed, or has shown strong public support for during the period from {date_range}.

Consider publicly known information such as:
- Direct ownership or company holdings (e.g., Tesla holding Bitcoin)
- Public tweets or statements about specific crypto assets
- Known investments through their companies or funds
- Public endorsements or promotions of specific cryptocurrencies
- Meme coins or tokens they have promoted or are associated with

For each asset, estimate an exposure percentage based on the frequency and intensity of the person's positive public comments and endorsements on social media. The percentages for all assets MUST add up to exactly 100%.

You MUST always respond with a valid JSON object in this exact format:
{{"investments": [{{"name": "Bitcoin", "percentage": 40}}, {{"name": "Dogecoin", "percentage": 25}}, ...]}}

Always return at least the most well-known crypto associations for the person. Use full asset names (e.g., "Bitcoin", "Dogecoin", "Ethereum"). Never return an empty array for well-known crypto influencers. Percentages must be whole numbers that sum to 100."""

USER_PROMPT = (
    "What are the top {limit} crypto assets that {person_name} is invested in or has "
    "publicly supported? Include exposure percentages based on social media endorsement intensity."
)


def trailing_year_range(now: datetime) -> str:
    """'October 2025 through October 2026' for a date in October 2026"""
    try:
        year_ago = now.replace(year=now.year - 1)
    except ValueError:
        # Feb 29
        year_ago = now.replace(year=now.year - 1, day=28)
    return f"{year_ago.strftime('%B %Y')} through {now.strftime('%B %Y')}"


def parse_investments(content: Optional[str]) -> List[dict]:
    """
    Validate the model's reply and keep the first few investments.

    Raises:
        UpstreamDataInvalidError: content is not JSON or not the expected shape
    """
    try:
        parsed = json.loads(content or '{"investments": []}')
        reply = LlmInvestmentsReply.model_validate(parsed)
    except (ValueError, PydanticValidationError) as e:
        raise UpstreamDataInvalidError(service="openai", errors=[str(e)])

    top = reply.investments[:MAX_HOLDINGS]
    percentages = normalize_weights([inv.percentage for inv in top])
    return [
        {"name": inv.name, "percentage": pct}
        for inv, pct in zip(top, percentages)
    ]


class PersonalityLookupService:
    """Public figure -> top crypto exposures"""

    def __init__(self, db: Session, llm: Optional[LLMClient] = None, model: str = LOOKUP_MODEL):
        self.db = db
        self.llm = llm or get_llm_client()
        self.model = model

    def lookup(self, person_name: str, now: Optional[datetime] = None) -> dict:
        """
        Look up and record a person's crypto exposures.

        A reply that cannot be understood is logged and recorded as an
        empty result rather than failing the request.
        """
        now = now or datetime.now()
        system_prompt = SYSTEM_PROMPT.format(limit=MAX_HOLDINGS, date_range=trailing_year_range(now))
        user_prompt = USER_PROMPT.format(limit=MAX_HOLDINGS, person_name=person_name)

        content = self.llm.complete_json(self.model, system_prompt, user_prompt)
        logger.debug(f"LLM reply for {person_name!r}: {content}")

        try:
            investments = parse_investments(content)
        except UpstreamDataInvalidError as e:
            logger.warning(
                f"Discarding malformed lookup reply for {person_name!r}",
                extra={'service': 'openai', 'error_code': e.error_code}
            )
            investments = []

        search = self._save(person_name, investments)
        logger.info(
            f"Personality lookup for {person_name!r}: {len(investments)} assets",
            extra={'service': 'personality_lookup'}
        )
        return {"personName": search.person_name, "investments": search.investments}

    def get_history(self) -> List[Search]:
        """All recorded searches, newest first"""
        try:
            return self.db.query(Search).order_by(desc(Search.created_at), desc(Search.id)).all()
        except SQLAlchemyError as e:
            raise DatabaseError("read search history", e)

    def _save(self, person_name: str, investments: List[dict]) -> Search:
        search = Search(person_name=person_name, investments=investments)
        try:
            self.db.add(search)
            self.db.commit()
            self.db.refresh(search)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError("save search", e)
        return search
