"""
Lookup request/response models and the upstream schemas they are
validated against (LLM investments reply, Ethplorer getAddressInfo).
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..validators.validators import validate_person_name


class Investment(BaseModel):
    name: str
    percentage: int


class PersonalityLookupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    person_name: str = Field(alias="personName")

    @field_validator('person_name')
    @classmethod
    def check_person_name(cls, v: str) -> str:
        return validate_person_name(v)


class PersonalityLookupResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    person_name: str = Field(alias="personName")
    investments: List[Investment]


class SearchHistoryEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    person_name: str = Field(alias="personName")
    investments: List[Investment]
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")


class WalletToken(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    symbol: str
    balance: str
    balance_usd: float = Field(alias="balanceUsd")
    percentage: int


class WalletLookupRequest(BaseModel):
    # Format is checked by the service so the error carries the address
    address: str


class WalletLookupResponse(BaseModel):
    address: str
    tokens: List[WalletToken]


class WalletHistoryEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    address: str
    tokens: List[WalletToken]
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")


class UnifiedLookupRequest(BaseModel):
    query: str

    @field_validator('query')
    @classmethod
    def check_query(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Query cannot be empty")
        return v


class UnifiedLookupResponse(BaseModel):
    type: str  # wallet | personality
    result: Dict[str, Any]


# Upstream schemas

class LlmInvestment(BaseModel):
    name: str
    percentage: float = Field(ge=0, allow_inf_nan=False)


class LlmInvestmentsReply(BaseModel):
    investments: List[LlmInvestment]


class EthplorerPrice(BaseModel):
    rate: Optional[float] = None


class EthplorerEth(BaseModel):
    balance: Optional[float] = 0
    price: Union[EthplorerPrice, bool, None] = None


class EthplorerTokenInfo(BaseModel):
    name: Optional[str] = None
    symbol: Optional[str] = None
    decimals: Union[int, str, None] = 0
    type: Optional[str] = None
    # Ethplorer sends `false` when a token has no price
    price: Union[EthplorerPrice, bool, None] = None


class EthplorerToken(BaseModel):
    tokenInfo: Optional[EthplorerTokenInfo] = None
    balance: Optional[float] = 0


class EthplorerError(BaseModel):
    code: Optional[int] = None
    message: Optional[str] = None


class EthplorerAddressInfo(BaseModel):
    ETH: Optional[EthplorerEth] = None
    tokens: Optional[List[EthplorerToken]] = None
    error: Optional[EthplorerError] = None
