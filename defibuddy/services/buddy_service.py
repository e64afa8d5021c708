"""
Buddies Ledger Service

CRUD over contribution rows. The fund total and each buddy's share are
derived on every read and never stored.
"""

import logging
from decimal import Decimal
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import BuddyNotFoundError, DatabaseError
from ..models.database import Buddy
from ..validators.validators import validate_buddy_name, validate_contribution
from .normalization import contribution_shares, normalize_weights

logger = logging.getLogger(__name__)


def format_amount(amount) -> str:
    """NUMERIC(12,2) as its canonical string, e.g. '250.50'"""
    return f"{Decimal(amount):.2f}"


def serialize_buddy(buddy: Buddy) -> dict:
    return {
        "id": buddy.id,
        "name": buddy.name,
        "contribution": format_amount(buddy.contribution),
        "createdAt": buddy.created_at,
    }


class BuddyService:
    def __init__(self, db: Session):
        self.db = db

    def list_buddies(self) -> List[Buddy]:
        """Buddies in the order they joined"""
        try:
            return self.db.query(Buddy).order_by(Buddy.created_at, Buddy.id).all()
        except SQLAlchemyError as e:
            raise DatabaseError("list buddies", e)

    def add_buddy(self, name: str, contribution) -> Buddy:
        """
        Raises:
            ValueError: blank name or invalid contribution
        """
        buddy = Buddy(
            name=validate_buddy_name(name),
            contribution=validate_contribution(contribution),
        )
        try:
            self.db.add(buddy)
            self.db.commit()
            self.db.refresh(buddy)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError("add buddy", e)

        logger.info(f"Added buddy {buddy.id} ({format_amount(buddy.contribution)})")
        return buddy

    def delete_buddy(self, buddy_id: int) -> None:
        """Raises BuddyNotFoundError for an unknown id"""
        buddy = self.db.query(Buddy).filter(Buddy.id == buddy_id).first()
        if buddy is None:
            raise BuddyNotFoundError(buddy_id)

        try:
            self.db.delete(buddy)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError("delete buddy", e)

        logger.info(f"Removed buddy {buddy_id}")

    def get_ledger(self) -> dict:
        """
        Every buddy with their share of the fund.

        `share` is the exact one-decimal percentage; `percentage` is the
        whole-number share, which sums to 100 across a non-empty ledger.
        """
        buddies = self.list_buddies()
        amounts = [Decimal(b.contribution) for b in buddies]
        total = sum(amounts, Decimal("0"))

        shares = contribution_shares(amounts)
        percentages = normalize_weights(amounts)

        return {
            "buddies": [
                {
                    "id": b.id,
                    "name": b.name,
                    "contribution": format_amount(b.contribution),
                    "share": share,
                    "percentage": pct,
                }
                for b, share, pct in zip(buddies, shares, percentages)
            ],
            "totalFund": format_amount(total),
        }
