"""
NFT Report Endpoints

Stores ERC-721 metadata for report NFTs and serves it at the token URI.
"""

from fastapi import APIRouter, Depends, Path, Request, Response
from sqlalchemy.orm import Session
from typing import Any, Dict
import logging

from ..config.rate_limit_config import limiter, RateLimits
from ..database.config import get_database_session
from ..models.nft import MetadataCreate, MetadataSaved, ReportRequest, ReportResponse
from ..services.buddy_service import BuddyService
from ..services.report_service import ReportService, build_report
from .error_responses import RESOURCE_ERRORS, VALIDATION_ERRORS

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/metadata", response_model=MetadataSaved, responses=VALIDATION_ERRORS)
@limiter.limit(RateLimits.WRITE)
def save_metadata(
    request: Request,
    response: Response,
    body: MetadataCreate,
    db: Session = Depends(get_database_session),
):
    """Persist metadata and return the URL a token can point at"""
    return ReportService(db).save_metadata(body.wallet_address, body.metadata)


@router.get("/metadata/{metadata_id}", response_model=Dict[str, Any], responses=RESOURCE_ERRORS)
@limiter.limit(RateLimits.READ_ONLY)
def get_metadata(
    request: Request,
    response: Response,
    metadata_id: int = Path(..., ge=1),
    db: Session = Depends(get_database_session),
):
    """Stored metadata exactly as saved (this is the NFT's token URI)"""
    return ReportService(db).get_metadata(metadata_id)


@router.post("/report", response_model=ReportResponse, responses=VALIDATION_ERRORS)
@limiter.limit(RateLimits.WRITE)
def create_report(
    request: Request,
    response: Response,
    body: ReportRequest,
    db: Session = Depends(get_database_session),
):
    """
    Build a performance report from wallet holdings and the current buddy
    ledger, store it, and return it with its metadata URL.

    **Example Request Body:**
    ```json
    {"walletAddress": "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045",
     "holdings": [{"name": "Ethereum", "symbol": "ETH", "balanceUsd": 1500.0, "percentage": 100}]}
    ```
    """
    buddies = [
        {"name": b.name, "contribution": b.contribution}
        for b in BuddyService(db).list_buddies()
    ]
    holdings = [h.model_dump(by_alias=True) for h in body.holdings]
    metadata = build_report(body.wallet_address, holdings, buddies)

    saved = ReportService(db).save_metadata(body.wallet_address, metadata)
    return {**saved, "metadata": metadata}
