"""
Session Portfolio Endpoints

The portfolio a client has cloned (from a lookup, a pool, or by hand) is
kept per `X-Session-ID` and can be edited through natural-language chat.
"""

from fastapi import APIRouter, Depends, Request, Response
from typing import Optional
import logging

from ..config.rate_limit_config import limiter, RateLimits
from ..exceptions import InvalidParameterError, ResourceNotFoundError
from ..models.portfolio import ChatRequest, ChatResponse, Portfolio, PortfolioItem
from ..services.chat_service import ChatEditService
from ..services.llm_client import LLMClient
from ..services.normalization import rescale_percentages
from ..services.portfolio_store import PortfolioStore
from ..utils.inflight import inflight_guard
from .dependencies import get_client_id, get_llm, get_portfolio_store, get_session_id
from .error_responses import RESOURCE_ERRORS, UPSTREAM_ERRORS, VALIDATION_ERRORS

logger = logging.getLogger(__name__)

router = APIRouter()


def require_session(session_id: Optional[str] = Depends(get_session_id)) -> str:
    if not session_id:
        raise InvalidParameterError("X-Session-ID", None, "header is required")
    return session_id


@router.get("", response_model=Portfolio, responses=RESOURCE_ERRORS)
@limiter.limit(RateLimits.READ_ONLY)
def get_portfolio(
    request: Request,
    response: Response,
    session_id: str = Depends(require_session),
    store: PortfolioStore = Depends(get_portfolio_store),
):
    """The session's current portfolio; 404 when nothing has been cloned yet"""
    portfolio = store.get(session_id)
    if portfolio is None:
        raise ResourceNotFoundError("Portfolio", session_id, message="No portfolio for this session")
    return portfolio


@router.put("", response_model=Portfolio, responses=VALIDATION_ERRORS)
@limiter.limit(RateLimits.WRITE)
def replace_portfolio(
    request: Request,
    response: Response,
    body: Portfolio,
    session_id: str = Depends(require_session),
    store: PortfolioStore = Depends(get_portfolio_store),
):
    """
    Replace the session's portfolio wholesale.

    Percentages that do not add up to 100 are rescaled.

    **Example Request Body:**
    ```json
    {"source": "wallet", "items": [{"name": "Ethereum", "symbol": "ETH", "percentage": 60},
                                   {"name": "Uniswap", "symbol": "UNI", "percentage": 40}]}
    ```
    """
    percentages = rescale_percentages([item.percentage for item in body.items])
    items = [
        PortfolioItem(name=item.name, symbol=item.symbol, percentage=pct)
        for item, pct in zip(body.items, percentages)
    ]
    return store.save(session_id, Portfolio(source=body.source, items=items))


@router.delete("", response_model=Portfolio, responses=VALIDATION_ERRORS)
@limiter.limit(RateLimits.WRITE)
def clear_portfolio(
    request: Request,
    response: Response,
    session_id: str = Depends(require_session),
    store: PortfolioStore = Depends(get_portfolio_store),
):
    store.clear(session_id)
    return Portfolio()


@router.post("/chat", response_model=ChatResponse, responses=UPSTREAM_ERRORS)
@limiter.limit(RateLimits.EXPENSIVE)
def chat_edit(
    request: Request,
    response: Response,
    body: ChatRequest,
    llm: LLMClient = Depends(get_llm),
    session_id: Optional[str] = Depends(get_session_id),
    store: PortfolioStore = Depends(get_portfolio_store),
):
    """
    Edit a portfolio with a plain-English instruction.

    **Example Request Body:**
    ```json
    {"message": "Add 20% LINK", "portfolio": [{"name": "Ethereum", "symbol": "ETH", "percentage": 100}]}
    ```

    A reply the model got wrong leaves the portfolio unchanged. When a
    session id is sent, the stored portfolio follows the edit.
    """
    with inflight_guard.guard(get_client_id(request, session_id), "portfolio-chat"):
        reply, items = ChatEditService(llm).edit(body.message, body.portfolio)

    if session_id:
        if not items:
            store.clear(session_id)
        else:
            current = store.get(session_id)
            source = current.source if current else "chat"
            store.save(session_id, Portfolio(source=source, items=items))

    return {"reply": reply, "portfolio": items}
