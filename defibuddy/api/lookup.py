"""
Unified Lookup Endpoint

One search box: wallet addresses go to the explorer, anything else is
treated as a person's name.
"""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session
from typing import Optional
import logging

from ..config.rate_limit_config import limiter, RateLimits
from ..database.config import get_database_session
from ..exceptions import ValidationError
from ..models.lookup import UnifiedLookupRequest, UnifiedLookupResponse
from ..services.llm_client import LLMClient
from ..services.personality_service import PersonalityLookupService
from ..services.wallet_service import WalletLookupService
from ..utils.data_providers import BaseExplorerProvider
from ..utils.inflight import inflight_guard
from ..validators.validators import classify_query, validate_person_name
from .dependencies import get_client_id, get_explorer, get_llm, get_session_id
from .error_responses import UPSTREAM_ERRORS

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=UnifiedLookupResponse, responses=UPSTREAM_ERRORS)
@limiter.limit(RateLimits.EXPENSIVE)
def unified_lookup(
    request: Request,
    response: Response,
    body: UnifiedLookupRequest,
    db: Session = Depends(get_database_session),
    llm: LLMClient = Depends(get_llm),
    explorer: BaseExplorerProvider = Depends(get_explorer),
    session_id: Optional[str] = Depends(get_session_id),
):
    """
    Dispatch on the query: `0x` + 40 hex characters is a wallet lookup,
    anything else a personality lookup.

    **Returns:** `{"type": "wallet" | "personality", "result": {...}}`
    """
    kind = classify_query(body.query)
    logger.debug(f"Unified lookup dispatched as {kind}")

    with inflight_guard.guard(get_client_id(request, session_id), f"{kind}-lookup"):
        if kind == "wallet":
            result = WalletLookupService(db, explorer).lookup(body.query)
        else:
            try:
                person_name = validate_person_name(body.query)
            except ValueError as e:
                raise ValidationError(str(e))
            result = PersonalityLookupService(db, llm).lookup(person_name)

    return {"type": kind, "result": result}
