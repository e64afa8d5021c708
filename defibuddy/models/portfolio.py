from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional

from ..validators.validators import validate_chat_message


class PortfolioItem(BaseModel):
    """One allocation line; percentages of a non-empty portfolio sum to 100"""
    name: str
    symbol: Optional[str] = None
    percentage: int

    @property
    def ticker(self) -> str:
        """Symbol used for DEX lookups, falling back to the name"""
        return self.symbol or self.name


class Portfolio(BaseModel):
    """The allocation currently cloned into a client session"""
    source: str = "manual"
    items: List[PortfolioItem] = []


class ChatReplyItem(BaseModel):
    """Portfolio line as returned by the LLM (percentages may be fractional)"""
    name: str
    symbol: Optional[str] = None
    percentage: float = Field(ge=0, allow_inf_nan=False)


class ChatReply(BaseModel):
    """Expected JSON shape of a chat edit completion"""
    reply: str
    portfolio: List[ChatReplyItem]


class ChatRequest(BaseModel):
    message: str
    portfolio: List[PortfolioItem] = []

    @field_validator('message')
    @classmethod
    def check_message(cls, v: str) -> str:
        return validate_chat_message(v)


class ChatResponse(BaseModel):
    reply: str
    portfolio: List[PortfolioItem]


class DeploymentStep(BaseModel):
    """Outcome of one asset in a deployment run"""
    model_config = ConfigDict(populate_by_name=True)

    symbol: str
    status: str  # confirmed | skipped | failed
    amount_in_wei: Optional[int] = Field(default=None, alias="amountInWei")
    fee: Optional[int] = None
    tx_hash: Optional[str] = Field(default=None, alias="txHash")
    reason: Optional[str] = None


class DeploymentSummary(BaseModel):
    """Result of a portfolio or pool deployment"""
    model_config = ConfigDict(populate_by_name=True)

    status: str  # completed | aborted | halted | failed
    message: str
    success_count: int = Field(default=0, alias="successCount")
    attempted_count: int = Field(default=0, alias="attemptedCount")
    unavailable: List[str] = []
    steps: List[DeploymentStep] = []
