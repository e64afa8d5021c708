from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..validators.validators import validate_buddy_name, validate_contribution


class BuddyCreate(BaseModel):
    name: str
    # Accepts "250.50" or 250.5
    contribution: Union[str, float, int]

    @field_validator('name')
    @classmethod
    def check_name(cls, v: str) -> str:
        return validate_buddy_name(v)

    @field_validator('contribution')
    @classmethod
    def check_contribution(cls, v) -> Decimal:
        return validate_contribution(v)


class BuddyResponse(BaseModel):
    """Buddy row; contribution is the NUMERIC(12,2) value as a string"""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    contribution: str
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")


class LedgerEntry(BaseModel):
    id: int
    name: str
    contribution: str
    share: float  # exact one-decimal share of the fund
    percentage: int  # integer share, sums to 100 across the ledger


class BuddyLedger(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    buddies: List[LedgerEntry]
    total_fund: str = Field(alias="totalFund")


class DeleteResponse(BaseModel):
    success: bool = True
