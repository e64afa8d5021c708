from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReportHolding(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    symbol: str
    balance_usd: float = Field(alias="balanceUsd")
    percentage: int


class MetadataCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    wallet_address: str = Field(alias="walletAddress")
    metadata: Dict[str, Any]


class MetadataSaved(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    metadata_url: str = Field(alias="metadataUrl")


class ReportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    wallet_address: str = Field(alias="walletAddress")
    holdings: List[ReportHolding] = []


class ReportResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    metadata_url: str = Field(alias="metadataUrl")
    metadata: Dict[str, Any]


class MintResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    contract_address: str = Field(alias="contractAddress")
    token_id: Optional[int] = Field(default=None, alias="tokenId")
    tx_hash: Optional[str] = Field(default=None, alias="txHash")
    deployed_contract: bool = Field(default=False, alias="deployedContract")
