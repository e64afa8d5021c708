"""
Personality Lookup Endpoints

Public figure -> top crypto exposures (LLM-backed), plus search history.
"""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from ..config.rate_limit_config import limiter, RateLimits
from ..database.config import get_database_session
from ..models.lookup import PersonalityLookupRequest, PersonalityLookupResponse, SearchHistoryEntry
from ..services.llm_client import LLMClient
from ..services.personality_service import PersonalityLookupService
from ..utils.inflight import inflight_guard
from .dependencies import get_client_id, get_llm, get_session_id
from .error_responses import STANDARD_ERRORS, UPSTREAM_ERRORS

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/lookup", response_model=PersonalityLookupResponse, responses=UPSTREAM_ERRORS)
@limiter.limit(RateLimits.EXPENSIVE)
def lookup_personality(
    request: Request,
    response: Response,
    body: PersonalityLookupRequest,
    db: Session = Depends(get_database_session),
    llm: LLMClient = Depends(get_llm),
    session_id: Optional[str] = Depends(get_session_id),
):
    """
    Top crypto assets a public figure is associated with.

    **Example Request Body:**
    ```json
    {"personName": "Elon Musk"}
    ```

    **Rate Limit:** 10 requests/minute (LLM call)
    """
    with inflight_guard.guard(get_client_id(request, session_id), "personality-lookup"):
        return PersonalityLookupService(db, llm).lookup(body.person_name)


@router.get("/history", response_model=List[SearchHistoryEntry], responses=STANDARD_ERRORS)
@limiter.limit(RateLimits.READ_ONLY)
def personality_history(
    request: Request,
    response: Response,
    db: Session = Depends(get_database_session),
):
    """Recorded personality lookups, newest first"""
    searches = PersonalityLookupService(db).get_history()
    return [
        {
            "id": s.id,
            "personName": s.person_name,
            "investments": s.investments,
            "createdAt": s.created_at,
        }
        for s in searches
    ]
