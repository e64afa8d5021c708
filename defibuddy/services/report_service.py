"""
Report / NFT Export Service

Builds the DefiBuddies performance report (ERC-721 metadata), stores it
so a token URI can point at it, and mints reports through an NFT
gateway that deploys the report contract once per session.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config.app_config import PUBLIC_BASE_URL
from ..exceptions import DatabaseError, MetadataNotFoundError
from ..models.database import NftMetadata
from ..models.nft import MintResult
from ..validators.validators import shorten_address, validate_eth_address
from .normalization import contribution_shares, round_half_up
from .portfolio_store import PortfolioStore, portfolio_store

logger = logging.getLogger(__name__)


def build_report(
    wallet_address: str,
    holdings: List[dict],
    buddies: Iterable[dict],
    now: Optional[datetime] = None
) -> dict:
    """
    Assemble report metadata.

    Args:
        wallet_address: Owner of the holdings
        holdings: [{name, symbol, balanceUsd, percentage}]
        buddies: [{name, contribution}]
        now: Report timestamp (UTC now by default)
    """
    now = now or datetime.now(timezone.utc)
    buddies = list(buddies)
    short_wallet = shorten_address(wallet_address)

    total_value = sum(float(h.get("balanceUsd", 0) or 0) for h in holdings)
    contributions = [Decimal(str(b["contribution"])) for b in buddies]
    total_fund = float(sum(contributions, Decimal("0")))
    shares = contribution_shares(contributions)

    return {
        "name": f"DefiBuddies Report - {now.month}/{now.day}/{now.year}",
        "description": (
            f"Performance report for wallet {short_wallet}. "
            f"Total portfolio value: ${total_value:.2f}. Generated by DefiBuddies."
        ),
        "image": "",
        "attributes": [
            {"trait_type": "Report Date", "value": now.date().isoformat()},
            {"trait_type": "Wallet", "value": short_wallet},
            {"trait_type": "Total Value", "value": round_half_up(total_value, 2)},
            {"trait_type": "Number of Holdings", "value": len(holdings)},
            {"trait_type": "Number of Buddies", "value": len(buddies)},
            {"trait_type": "Total Buddy Fund", "value": round_half_up(total_fund, 2)},
        ],
        "holdings": [
            {
                "name": h["name"],
                "symbol": h["symbol"],
                "balanceUsd": h["balanceUsd"],
                "percentage": h["percentage"],
            }
            for h in holdings
        ],
        "buddies": [
            {"name": b["name"], "contribution": float(amount), "percentage": share}
            for b, amount, share in zip(buddies, contributions, shares)
        ],
        "totalValue": total_value,
        "totalFund": total_fund,
        "reportDate": now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    }


def metadata_url(metadata_id: int) -> str:
    return f"{PUBLIC_BASE_URL}/api/nft/metadata/{metadata_id}"


class ReportService:
    """Persists report metadata and serves it back by id"""

    def __init__(self, db: Session):
        self.db = db

    def save_metadata(self, wallet_address: str, metadata: dict) -> dict:
        wallet_address = validate_eth_address(wallet_address)
        row = NftMetadata(wallet_address=wallet_address, metadata_json=metadata)
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError("save NFT metadata", e)

        logger.info(f"Stored NFT metadata {row.id}", extra={'address': wallet_address})
        return {"id": row.id, "metadataUrl": metadata_url(row.id)}

    def get_metadata(self, metadata_id: int) -> dict:
        row = self.db.query(NftMetadata).filter(NftMetadata.id == metadata_id).first()
        if row is None:
            raise MetadataNotFoundError(metadata_id)
        return row.metadata_json


class NftGateway(ABC):
    """Wallet-side access to the report NFT contract"""

    @abstractmethod
    def deploy_contract(self) -> str:
        """Deploy the report contract; returns its address"""

    @abstractmethod
    def mint(self, contract_address: str, recipient: str, token_uri: str) -> Tuple[Optional[int], str]:
        """Mint one token; returns (token id if the receipt exposed it, tx hash)"""


class NftMinter:
    """Mints report NFTs, deploying the contract only on a session's first mint"""

    def __init__(self, gateway: NftGateway, store: Optional[PortfolioStore] = None):
        self.gateway = gateway
        self.store = store or portfolio_store

    def mint(self, session_id: str, recipient: str, token_uri: str) -> dict:
        recipient = validate_eth_address(recipient)

        contract_address = self.store.get_contract_address(session_id)
        deployed = False
        if not contract_address:
            contract_address = self.gateway.deploy_contract()
            self.store.set_contract_address(session_id, contract_address)
            deployed = True
            logger.info(f"Deployed report contract {contract_address}", extra={'session_id': session_id})

        token_id, tx_hash = self.gateway.mint(contract_address, recipient, token_uri)
        logger.info(f"Minted report token {token_id}", extra={'session_id': session_id, 'address': recipient})

        return MintResult(
            contract_address=contract_address,
            token_id=token_id,
            tx_hash=tx_hash,
            deployed_contract=deployed,
        ).model_dump(by_alias=True)
