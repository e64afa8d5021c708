"""
DEX Catalog Endpoints

Token availability on the Uniswap default list and Uniswap pool yields
from DefiLlama.
"""

from fastapi import APIRouter, Depends, Request, Response
import logging

from ..config.rate_limit_config import limiter, RateLimits
from ..models.dex import CheckTokensResponse, PoolsResponse, SymbolsRequest
from ..services.dex_service import DexCatalogService
from .dependencies import get_dex_catalog
from .error_responses import UPSTREAM_ERRORS

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/check-tokens", response_model=CheckTokensResponse, responses=UPSTREAM_ERRORS)
@limiter.limit(RateLimits.PUBLIC_API)
def check_tokens(
    request: Request,
    response: Response,
    body: SymbolsRequest,
    catalog: DexCatalogService = Depends(get_dex_catalog),
):
    """
    Whether each symbol is swappable on Ethereum mainnet.

    **Example Request Body:**
    ```json
    {"symbols": ["ETH", "UNI", "DOGE"]}
    ```

    Results come back in request order; matching is case-insensitive.
    """
    return {"tokens": catalog.check_tokens(body.symbols)}


@router.post("/pools", response_model=PoolsResponse, responses=UPSTREAM_ERRORS)
@limiter.limit(RateLimits.PUBLIC_API)
def find_pools(
    request: Request,
    response: Response,
    body: SymbolsRequest,
    catalog: DexCatalogService = Depends(get_dex_catalog),
):
    """Up to 20 Uniswap pools holding any of the symbols, highest APR first"""
    return {"pools": catalog.find_pools(body.symbols)}
