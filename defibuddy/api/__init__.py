"""
API Package

Routers for the DefiBuddy API, mounted under /api.
"""

from fastapi import APIRouter

from .crypto import router as crypto_router
from .wallet import router as wallet_router
from .lookup import router as lookup_router
from .uniswap import router as uniswap_router
from .buddies import router as buddies_router
from .portfolio import router as portfolio_router
from .nft import router as nft_router
from .errors import router as errors_router

api_router = APIRouter()

api_router.include_router(crypto_router, prefix="/crypto", tags=["personality"])
api_router.include_router(wallet_router, prefix="/wallet", tags=["wallet"])
api_router.include_router(lookup_router, prefix="/lookup", tags=["lookup"])
api_router.include_router(uniswap_router, prefix="/uniswap", tags=["uniswap"])
api_router.include_router(buddies_router, prefix="/buddies", tags=["buddies"])
api_router.include_router(portfolio_router, prefix="/portfolio", tags=["portfolio"])
api_router.include_router(nft_router, prefix="/nft", tags=["nft"])
api_router.include_router(errors_router, prefix="/errors", tags=["errors"])
