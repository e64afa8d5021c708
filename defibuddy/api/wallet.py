"""
Wallet Lookup Endpoints

Ethereum address -> top token holdings (block explorer), plus history.
"""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from ..config.rate_limit_config import limiter, RateLimits
from ..database.config import get_database_session
from ..models.lookup import WalletHistoryEntry, WalletLookupRequest, WalletLookupResponse
from ..services.wallet_service import WalletLookupService
from ..utils.data_providers import BaseExplorerProvider
from ..utils.inflight import inflight_guard
from .dependencies import get_client_id, get_explorer, get_session_id
from .error_responses import STANDARD_ERRORS, UPSTREAM_ERRORS

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/lookup", response_model=WalletLookupResponse, responses=UPSTREAM_ERRORS)
@limiter.limit(RateLimits.EXPENSIVE)
def lookup_wallet(
    request: Request,
    response: Response,
    body: WalletLookupRequest,
    db: Session = Depends(get_database_session),
    explorer: BaseExplorerProvider = Depends(get_explorer),
    session_id: Optional[str] = Depends(get_session_id),
):
    """
    Five largest holdings of an address by USD value.

    **Example Request Body:**
    ```json
    {"address": "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"}
    ```

    **Errors:** 400 for a malformed or explorer-rejected address, 502
    when the explorer is unreachable.
    """
    with inflight_guard.guard(get_client_id(request, session_id), "wallet-lookup"):
        return WalletLookupService(db, explorer).lookup(body.address)


@router.get("/history", response_model=List[WalletHistoryEntry], responses=STANDARD_ERRORS)
@limiter.limit(RateLimits.READ_ONLY)
def wallet_history(
    request: Request,
    response: Response,
    db: Session = Depends(get_database_session),
):
    """Recorded wallet lookups, newest first"""
    searches = WalletLookupService(db).get_history()
    return [
        {
            "id": s.id,
            "address": s.address,
            "tokens": s.tokens,
            "createdAt": s.created_at,
        }
        for s in searches
    ]
