from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional

from ..validators.validators import validate_symbols


class SymbolsRequest(BaseModel):
    """Body of /api/uniswap/check-tokens and /api/uniswap/pools"""
    symbols: List[str]

    @field_validator('symbols')
    @classmethod
    def check_symbols(cls, v: List[str]) -> List[str]:
        return validate_symbols(v)


class TokenAvailability(BaseModel):
    symbol: str
    available: bool
    address: Optional[str] = None
    decimals: Optional[int] = None
    name: Optional[str] = None


class CheckTokensResponse(BaseModel):
    tokens: List[TokenAvailability]


class Pool(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    project: str
    chain: str
    tvl_usd: float = Field(alias="tvlUsd")
    apr: float
    apy_base: float = Field(default=0, alias="apyBase")
    apy_reward: float = Field(default=0, alias="apyReward")


class PoolsResponse(BaseModel):
    pools: List[Pool]
