"""
Buddies Ledger Endpoints

Friends pooling money into one fund: list, add, remove, and the derived
ledger with each buddy's share.
"""

from fastapi import APIRouter, Depends, Path, Request, Response
from sqlalchemy.orm import Session
from typing import List
import logging

from ..config.rate_limit_config import limiter, RateLimits
from ..database.config import get_database_session
from ..models.buddy import BuddyCreate, BuddyLedger, BuddyResponse, DeleteResponse
from ..services.buddy_service import BuddyService, serialize_buddy
from .error_responses import RESOURCE_ERRORS, STANDARD_ERRORS, VALIDATION_ERRORS

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[BuddyResponse], responses=STANDARD_ERRORS)
@limiter.limit(RateLimits.READ_ONLY)
def list_buddies(
    request: Request,
    response: Response,
    db: Session = Depends(get_database_session),
):
    """All buddies in the order they joined"""
    return [serialize_buddy(b) for b in BuddyService(db).list_buddies()]


@router.get("/ledger", response_model=BuddyLedger, responses=STANDARD_ERRORS)
@limiter.limit(RateLimits.READ_ONLY)
def get_ledger(
    request: Request,
    response: Response,
    db: Session = Depends(get_database_session),
):
    """
    Fund total and each buddy's share of it.

    **Returns:**
    - buddies: id, name, contribution, share (one decimal) and percentage (integer, sums to 100)
    - totalFund: Sum of contributions as a two-decimal string
    """
    return BuddyService(db).get_ledger()


@router.post("", response_model=BuddyResponse, responses=VALIDATION_ERRORS)
@limiter.limit(RateLimits.WRITE)
def add_buddy(
    request: Request,
    response: Response,
    body: BuddyCreate,
    db: Session = Depends(get_database_session),
):
    """
    Add a buddy to the fund.

    **Example Request Body:**
    ```json
    {"name": "Alice", "contribution": "250.50"}
    ```
    """
    buddy = BuddyService(db).add_buddy(body.name, body.contribution)
    return serialize_buddy(buddy)


@router.delete("/{buddy_id}", response_model=DeleteResponse, responses=RESOURCE_ERRORS)
@limiter.limit(RateLimits.WRITE)
def delete_buddy(
    request: Request,
    response: Response,
    buddy_id: int = Path(..., ge=1),
    db: Session = Depends(get_database_session),
):
    """Remove a buddy; 404 when the id is unknown"""
    BuddyService(db).delete_buddy(buddy_id)
    return {"success": True}
