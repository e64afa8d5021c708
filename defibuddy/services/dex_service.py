"""
DEX Catalog Service

Token availability against the Uniswap default list and pool discovery
from DefiLlama yields. Both upstream snapshots are cached.
"""

import logging
import re
from typing import Dict, List, Optional

from ..cache import cache as default_cache, CacheService
from ..config.app_config import (
    MAINNET_CHAIN_ID,
    POOL_MIN_TVL_USD,
    POOL_RESULT_LIMIT,
    POOLS_CACHE_TTL,
    TOKEN_LIST_CACHE_TTL,
)
from ..exceptions import UpstreamDataInvalidError
from ..utils.data_providers import (
    BasePoolsProvider,
    BaseTokenListProvider,
    DefiLlamaPoolsProvider,
    UniswapTokenListProvider,
)

logger = logging.getLogger(__name__)

TOKEN_LIST_CACHE_KEY = "dex:token-list"
POOLS_CACHE_KEY = "dex:pools"

POOL_SYMBOL_SEPARATOR = re.compile(r'[-/\s]+')


def split_pool_symbols(pool_name: str, strip_bridged: bool = False) -> List[str]:
    """
    'WETH-USDC' -> ['weth', 'usdc']

    With strip_bridged, a trailing '.e' (bridged token marker) is dropped.
    """
    symbols = [s.strip() for s in POOL_SYMBOL_SEPARATOR.split(pool_name.lower()) if s.strip()]
    if strip_bridged:
        symbols = [s[:-2] if s.endswith('.e') else s for s in symbols]
    return symbols


class DexCatalogService:
    """Answers 'can this symbol be swapped for?' and 'which pools hold it?'"""

    def __init__(
        self,
        token_list: Optional[BaseTokenListProvider] = None,
        pools: Optional[BasePoolsProvider] = None,
        cache: Optional[CacheService] = None
    ):
        self.token_list = token_list or UniswapTokenListProvider()
        self.pools = pools or DefiLlamaPoolsProvider()
        self.cache = cache or default_cache

    def _mainnet_tokens(self) -> List[dict]:
        tokens = self.cache.get(TOKEN_LIST_CACHE_KEY)
        if tokens is None:
            try:
                listed = self.token_list.get_tokens()
            except UpstreamDataInvalidError as e:
                logger.warning(
                    "Token list response was malformed; treating every token as unavailable",
                    extra={'service': e.details.get('service'), 'error_code': e.error_code}
                )
                return []
            tokens = [
                t for t in listed
                if isinstance(t, dict) and t.get('chainId') == MAINNET_CHAIN_ID
            ]
            self.cache.set(TOKEN_LIST_CACHE_KEY, tokens, ttl=TOKEN_LIST_CACHE_TTL)
            logger.info(f"Loaded {len(tokens)} mainnet tokens from the DEX token list")
        return tokens

    def check_tokens(self, symbols: List[str]) -> List[Dict]:
        """
        Availability for each requested symbol, in request order.

        Matching is case-insensitive; the first listed token wins.
        """
        by_symbol: Dict[str, dict] = {}
        for token in self._mainnet_tokens():
            symbol = str(token.get('symbol', '')).lower()
            if symbol and symbol not in by_symbol:
                by_symbol[symbol] = token

        results = []
        for symbol in symbols:
            token = by_symbol.get(symbol.lower())
            results.append({
                "symbol": symbol,
                "available": token is not None,
                "address": token.get('address') if token else None,
                "decimals": token.get('decimals') if token else None,
                "name": token.get('name') if token else None,
            })
        return results

    def find_token(self, symbol: str) -> Optional[Dict]:
        """Availability record for one symbol, or None when unlisted"""
        result = self.check_tokens([symbol])[0]
        return result if result["available"] and result["address"] else None

    def _pool_snapshot(self) -> List[dict]:
        pools = self.cache.get(POOLS_CACHE_KEY)
        if pools is None:
            pools = [
                p for p in self.pools.get_pools()
                if isinstance(p, dict)
                and 'uniswap' in str(p.get('project', ''))
                and p.get('chain') == 'Ethereum'
                and (p.get('tvlUsd') or 0) > POOL_MIN_TVL_USD
            ]
            self.cache.set(POOLS_CACHE_KEY, pools, ttl=POOLS_CACHE_TTL)
            logger.info(f"Loaded {len(pools)} Uniswap pools on Ethereum")
        return pools

    def find_pools(self, symbols: List[str]) -> List[Dict]:
        """
        Uniswap pools on Ethereum with TVL above the floor that contain
        any of the symbols, best APR first.
        """
        wanted = {s.lower() for s in symbols}
        matches = []

        for pool in self._pool_snapshot():
            pool_symbols = split_pool_symbols(str(pool.get('symbol', '')))
            if not wanted.intersection(pool_symbols):
                continue

            apy = pool.get('apy')
            apy_base = pool.get('apyBase')
            apr = apy if apy is not None else (apy_base if apy_base is not None else 0)

            matches.append({
                "id": pool.get('pool'),
                "name": pool.get('symbol'),
                "project": pool.get('project'),
                "chain": pool.get('chain'),
                "tvlUsd": pool.get('tvlUsd'),
                "apr": apr,
                "apyBase": apy_base if apy_base is not None else 0,
                "apyReward": pool.get('apyReward') if pool.get('apyReward') is not None else 0,
            })

        matches.sort(key=lambda p: p["apr"], reverse=True)
        return matches[:POOL_RESULT_LIMIT]
