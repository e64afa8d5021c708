"""
Session Portfolio Store

Holds the portfolio each client session has cloned, plus the NFT
contract address the session minted with. Backed by the cache service
so Redis deployments share state across workers.
"""

import logging
from typing import Optional

from ..cache import cache as default_cache, CacheService, SESSION_TTL
from ..models.portfolio import Portfolio

logger = logging.getLogger(__name__)


class PortfolioStore:
    """Last-writer-wins portfolio per session id"""

    def __init__(self, cache: Optional[CacheService] = None, ttl: int = SESSION_TTL):
        self.cache = cache or default_cache
        self.ttl = ttl

    @staticmethod
    def _portfolio_key(session_id: str) -> str:
        return f"session:{session_id}:portfolio"

    @staticmethod
    def _contract_key(session_id: str) -> str:
        return f"session:{session_id}:nft-contract"

    def get(self, session_id: str) -> Optional[Portfolio]:
        data = self.cache.get(self._portfolio_key(session_id))
        if data is None:
            return None
        return Portfolio.model_validate(data)

    def save(self, session_id: str, portfolio: Portfolio) -> Portfolio:
        """Replace the session's portfolio wholesale"""
        self.cache.set(self._portfolio_key(session_id), portfolio.model_dump(), ttl=self.ttl)
        logger.debug(
            f"Stored portfolio with {len(portfolio.items)} items",
            extra={'session_id': session_id}
        )
        return portfolio

    def clear(self, session_id: str) -> bool:
        return self.cache.delete(self._portfolio_key(session_id))

    def get_contract_address(self, session_id: str) -> Optional[str]:
        return self.cache.get(self._contract_key(session_id))

    def set_contract_address(self, session_id: str, address: str) -> None:
        self.cache.set(self._contract_key(session_id), address, ttl=self.ttl)


portfolio_store = PortfolioStore()
