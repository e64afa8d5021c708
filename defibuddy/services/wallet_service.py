"""
Wallet Lookup Service

Reads an address's ETH and ERC-20 balances from the block explorer,
keeps the five largest by USD value and records the search.
"""

import logging
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config.app_config import MAX_HOLDINGS, MAX_TOKEN_DECIMALS
from ..exceptions import DatabaseError, UpstreamDataInvalidError, ValidationError
from ..models.database import WalletSearch
from ..models.lookup import EthplorerAddressInfo, EthplorerPrice
from ..utils.data_providers import BaseExplorerProvider, EthplorerProvider
from ..validators.validators import validate_eth_address
from .normalization import normalize_weights, round_half_up

logger = logging.getLogger(__name__)


def format_token_balance(balance: float) -> str:
    """Whole units above 1000, four decimals otherwise"""
    return f"{balance:.0f}" if balance > 1000 else f"{balance:.4f}"


def extract_holdings(info: EthplorerAddressInfo) -> List[dict]:
    """ETH plus every named ERC-20 token, in explorer order"""
    holdings = []

    if info.ETH is not None:
        eth_balance = info.ETH.balance or 0
        eth_rate = (info.ETH.price.rate if isinstance(info.ETH.price, EthplorerPrice) else None) or 0
        holdings.append({
            "name": "Ethereum",
            "symbol": "ETH",
            "balance": f"{eth_balance:.4f}",
            "balanceUsd": round_half_up(eth_balance * eth_rate, 2),
        })

    for token in info.tokens or []:
        token_info = token.tokenInfo
        if token_info is None or not token_info.name or not token_info.symbol:
            continue
        if token_info.type and token_info.type != "ERC-20":
            continue

        try:
            decimals = int(token_info.decimals or 0)
        except (TypeError, ValueError):
            decimals = 0
        # ERC-20 decimals is a uint8
        if not 0 <= decimals <= MAX_TOKEN_DECIMALS:
            continue
        balance = (token.balance or 0) / (10 ** decimals)
        rate = token_info.price.rate if isinstance(token_info.price, EthplorerPrice) else None

        holdings.append({
            "name": token_info.name,
            "symbol": token_info.symbol,
            "balance": format_token_balance(balance),
            "balanceUsd": round_half_up(balance * (rate or 0), 2),
        })

    return holdings


def top_holdings(holdings: List[dict], limit: int = MAX_HOLDINGS) -> List[dict]:
    """Largest holdings by USD value (ties keep explorer order), with percentages"""
    top = sorted(holdings, key=lambda h: h["balanceUsd"], reverse=True)[:limit]
    percentages = normalize_weights([h["balanceUsd"] for h in top])
    return [{**h, "percentage": pct} for h, pct in zip(top, percentages)]


class WalletLookupService:
    """Ethereum address -> top token holdings"""

    def __init__(self, db: Session, explorer: Optional[BaseExplorerProvider] = None):
        self.db = db
        self.explorer = explorer or EthplorerProvider()

    def lookup(self, address: str) -> dict:
        """
        Raises:
            InvalidAddressError: malformed address (400)
            ValidationError: the explorer rejected the address (400)
            UpstreamUnavailableError: the explorer could not be reached (502)
        """
        address = validate_eth_address(address)

        try:
            raw = self.explorer.get_address_info(address)
            info = EthplorerAddressInfo.model_validate(raw)
        except PydanticValidationError as e:
            info = None
            self._log_invalid(address, UpstreamDataInvalidError("ethplorer", [str(e)]))
        except UpstreamDataInvalidError as e:
            info = None
            self._log_invalid(address, e)

        if info is not None and info.error is not None:
            logger.warning(
                f"Explorer rejected address: {info.error.message}",
                extra={'address': address, 'service': 'ethplorer'}
            )
            raise ValidationError(
                message=info.error.message or "Invalid address",
                details={"address": address, "explorer_code": info.error.code}
            )

        tokens = top_holdings(extract_holdings(info)) if info is not None else []

        search = self._save(address, tokens)
        logger.info(
            f"Wallet lookup: {len(tokens)} tokens",
            extra={'address': address, 'service': 'wallet_lookup'}
        )
        return {"address": search.address, "tokens": search.tokens}

    def get_history(self) -> List[WalletSearch]:
        """All recorded wallet searches, newest first"""
        try:
            return self.db.query(WalletSearch).order_by(
                desc(WalletSearch.created_at), desc(WalletSearch.id)
            ).all()
        except SQLAlchemyError as e:
            raise DatabaseError("read wallet history", e)

    def _log_invalid(self, address: str, error: UpstreamDataInvalidError) -> None:
        logger.warning(
            "Discarding malformed explorer response",
            extra={'address': address, 'service': 'ethplorer', 'error_code': error.error_code}
        )

    def _save(self, address: str, tokens: List[dict]) -> WalletSearch:
        search = WalletSearch(address=address, tokens=tokens)
        try:
            self.db.add(search)
            self.db.commit()
            self.db.refresh(search)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError("save wallet search", e)
        return search
