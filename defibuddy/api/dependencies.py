"""
Shared FastAPI dependencies.

Upstream clients are provided through these functions so tests can swap
them with `app.dependency_overrides`.
"""

from typing import Optional

from fastapi import Header, Request

from ..services.dex_service import DexCatalogService
from ..services.llm_client import LLMClient, get_llm_client
from ..services.portfolio_store import PortfolioStore, portfolio_store
from ..utils.data_providers import BaseExplorerProvider, EthplorerProvider

_dex_catalog: Optional[DexCatalogService] = None


def get_llm() -> LLMClient:
    return get_llm_client()


def get_explorer() -> BaseExplorerProvider:
    return EthplorerProvider()


def get_dex_catalog() -> DexCatalogService:
    global _dex_catalog
    if _dex_catalog is None:
        _dex_catalog = DexCatalogService()
    return _dex_catalog


def get_portfolio_store() -> PortfolioStore:
    return portfolio_store


def get_session_id(x_session_id: Optional[str] = Header(default=None, alias="X-Session-ID")) -> Optional[str]:
    """Client session id, if the browser sent one"""
    if x_session_id is None:
        return None
    x_session_id = x_session_id.strip()[:128]
    return x_session_id or None


def get_client_id(request: Request, session_id: Optional[str]) -> str:
    """Identity used for duplicate-request guarding"""
    if session_id:
        return session_id
    return request.client.host if request.client else "unknown"
