"""
Deployment Orchestrator

Turns a portfolio into ETH -> token swaps through the Uniswap V3 swap
router, one asset at a time:

    availability check -> balance check -> per asset:
        estimate gas -> gas sufficiency -> swap -> confirmed | skipped | failed

Signing and submission live behind ChainGateway; this module only
decides amounts, order and when to stop.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from ..config.app_config import (
    DEFAULT_FEE_TIER,
    FALLBACK_GAS_PRICE_WEI,
    GAS_SAFETY_MARGIN_PERCENT,
    POOL_FEE_TIERS,
    SWAP_DEADLINE_SECONDS,
    SWAP_ROUTER_ADDRESS,
    WETH_ADDRESS,
)
from ..exceptions import (
    DeploymentError,
    GasEstimationError,
    InsufficientGasError,
    TransactionRejectedError,
    ValidationError,
)
from ..models.portfolio import DeploymentStep, DeploymentSummary, PortfolioItem
from .dex_service import DexCatalogService, split_pool_symbols

logger = logging.getLogger(__name__)

ETH_SYMBOLS = ('eth', 'weth')


@dataclass(frozen=True)
class SwapParams:
    """exactInputSingle arguments"""
    token_in: str
    token_out: str
    fee: int
    recipient: str
    deadline: int
    amount_in: int
    amount_out_minimum: int
    sqrt_price_limit_x96: int = 0


class ChainGateway(ABC):
    """Wallet-side access to the chain (balances, gas, signed swaps)"""

    router_address: str = SWAP_ROUTER_ADDRESS

    @abstractmethod
    def get_balance(self, address: str) -> int:
        """Native balance in wei"""

    @abstractmethod
    def get_gas_price(self) -> Optional[int]:
        """Current gas price in wei, or None when the node does not report one"""

    @abstractmethod
    def estimate_swap_gas(self, params: SwapParams, value: int) -> int:
        """Gas units for the swap; raises GasEstimationError"""

    @abstractmethod
    def submit_swap(self, params: SwapParams, value: int) -> str:
        """
        Sign, send and wait for the swap; returns the transaction hash.

        Raises TransactionRejectedError when the owner declines and
        SwapFailedError when the transaction reverts or is dropped.
        """


class SlippagePolicy(ABC):
    @abstractmethod
    def minimum_output(self, amount_in: int, token: dict) -> int:
        pass


class FixedMinimumOutput(SlippagePolicy):
    """Accept any output of at least `minimum` base units"""

    def __init__(self, minimum: int = 1):
        self.minimum = minimum

    def minimum_output(self, amount_in: int, token: dict) -> int:
        return self.minimum


def gas_cost_with_margin(gas_estimate: int, gas_price: int) -> int:
    return gas_estimate * gas_price * GAS_SAFETY_MARGIN_PERCENT // 100


class DeploymentOrchestrator:
    """Sequential portfolio and pool deployment"""

    def __init__(
        self,
        gateway: ChainGateway,
        catalog: DexCatalogService,
        slippage: Optional[SlippagePolicy] = None,
        clock: Callable[[], float] = time.time,
        weth_address: str = WETH_ADDRESS,
    ):
        self.gateway = gateway
        self.catalog = catalog
        self.slippage = slippage or FixedMinimumOutput()
        self.clock = clock
        self.weth_address = weth_address

    def _gas_price(self) -> int:
        return self.gateway.get_gas_price() or FALLBACK_GAS_PRICE_WEI

    def _swap_params(self, wallet: str, token: dict, fee: int, amount_in: int) -> SwapParams:
        return SwapParams(
            token_in=self.weth_address,
            token_out=token["address"],
            fee=fee,
            recipient=wallet,
            deadline=int(self.clock()) + SWAP_DEADLINE_SECONDS,
            amount_in=amount_in,
            amount_out_minimum=self.slippage.minimum_output(amount_in, token),
        )

    def deploy(self, wallet: str, items: List[PortfolioItem]) -> DeploymentSummary:
        """
        Swap the wallet's ETH into every portfolio asset by percentage.

        Nothing is swapped unless every asset is listed on the DEX. A
        swap that fails is recorded and the run moves on; running out
        of ETH for gas stops the run.
        """
        if not items:
            raise ValidationError("Portfolio is empty; clone a portfolio first")

        checks = self.catalog.check_tokens([item.ticker for item in items])
        missing = [c["symbol"] for c in checks if not c["available"] or not c["address"]]
        if missing:
            plural = "s" if len(missing) > 1 else ""
            logger.info(f"Deployment aborted, unavailable: {missing}")
            return DeploymentSummary(
                status="aborted",
                message=f"{len(missing)} asset{plural} not available on Uniswap: {', '.join(missing)}",
                unavailable=missing,
            )

        balance = self.gateway.get_balance(wallet)
        if balance == 0:
            return DeploymentSummary(
                status="aborted",
                message="Your wallet has 0 ETH. You need ETH to swap on Uniswap.",
            )

        total_pct = sum(item.percentage for item in items)
        divisor = total_pct if total_pct > 0 else 100

        steps: List[DeploymentStep] = []
        success_count = 0
        halted_by: Optional[InsufficientGasError] = None

        for item, token in zip(items, checks):
            symbol = token["symbol"]
            balance = self.gateway.get_balance(wallet)

            preliminary = balance * item.percentage // divisor
            if preliminary <= 0:
                steps.append(DeploymentStep(symbol=symbol, status="skipped", reason="allocation rounds to zero"))
                continue

            params = self._swap_params(wallet, token, DEFAULT_FEE_TIER, preliminary)
            try:
                gas_estimate = self.gateway.estimate_swap_gas(params, preliminary)
            except GasEstimationError as e:
                logger.warning(f"Skipping {symbol}: {e.message}", extra={'symbol': symbol})
                steps.append(DeploymentStep(symbol=symbol, status="skipped", reason=e.message))
                continue

            gas_cost = gas_cost_with_margin(gas_estimate, self._gas_price())
            if gas_cost >= balance:
                halted_by = InsufficientGasError(symbol, gas_cost, balance)
                logger.warning(halted_by.message, extra={'symbol': symbol})
                steps.append(DeploymentStep(symbol=symbol, status="failed", reason=halted_by.message))
                break

            amount_in = (balance - gas_cost) * item.percentage // divisor
            if amount_in <= 0:
                steps.append(DeploymentStep(symbol=symbol, status="skipped", reason="amount after gas rounds to zero"))
                continue

            final_params = replace(
                params,
                amount_in=amount_in,
                amount_out_minimum=self.slippage.minimum_output(amount_in, token),
            )
            try:
                tx_hash = self.gateway.submit_swap(final_params, amount_in)
            except DeploymentError as e:
                logger.warning(f"Swap failed for {symbol}: {e.message}", extra={'symbol': symbol})
                steps.append(DeploymentStep(symbol=symbol, status="failed", amount_in_wei=amount_in, reason=e.message))
                continue

            success_count += 1
            steps.append(DeploymentStep(
                symbol=symbol, status="confirmed", amount_in_wei=amount_in,
                fee=DEFAULT_FEE_TIER, tx_hash=tx_hash
            ))

        attempted = len(steps)
        if halted_by is not None:
            status, message = "halted", halted_by.message
        elif success_count > 0:
            status = "completed"
            message = f"Portfolio deployed! {success_count}/{attempted} swaps completed."
        else:
            status = "completed"
            message = "No swaps were completed. Transactions may have been rejected."

        logger.info(f"Deployment finished: {success_count}/{attempted} swaps")
        return DeploymentSummary(
            status=status,
            message=message,
            success_count=success_count,
            attempted_count=attempted,
            steps=steps,
        )

    def deploy_to_pool(self, wallet: str, pool_name: str, items: List[PortfolioItem]) -> DeploymentSummary:
        """
        Swap one portfolio allocation into the other side of a pool.

        The first pool symbol found in the portfolio decides how much ETH
        is used; the swap target is the pool's non-ETH counterpart. Fee
        tiers are tried in order until one swap succeeds.
        """
        pool_symbols = split_pool_symbols(pool_name, strip_bridged=True)

        matching_item: Optional[PortfolioItem] = None
        target_symbol: Optional[str] = None
        for ps in pool_symbols:
            found = next((i for i in items if i.ticker.lower() == ps), None)
            if found is not None:
                matching_item = found
                others = [s for s in pool_symbols if s != ps]
                target_symbol = next((s for s in others if s not in ETH_SYMBOLS), others[0] if others else None)
                break

        if matching_item is None or target_symbol is None:
            return DeploymentSummary(
                status="aborted",
                message=f"None of your portfolio assets match this pool ({pool_name}).",
            )

        if target_symbol in ETH_SYMBOLS:
            return DeploymentSummary(
                status="aborted",
                message="This pool pairs your asset with ETH; you already hold ETH in your wallet.",
            )

        token = self.catalog.find_token(target_symbol)
        if token is None:
            return DeploymentSummary(
                status="aborted",
                message=f"{target_symbol.upper()} is not available on Uniswap's token list.",
                unavailable=[target_symbol],
            )

        balance = self.gateway.get_balance(wallet)
        allocation_pct = matching_item.percentage
        symbol = token["symbol"]
        steps: List[DeploymentStep] = []
        last_error: Optional[DeploymentError] = None

        for fee in POOL_FEE_TIERS:
            preliminary = balance * allocation_pct // 100
            if preliminary <= 0:
                return DeploymentSummary(
                    status="aborted",
                    message=f"{allocation_pct}% allocation results in zero ETH to swap.",
                    attempted_count=1,
                    steps=steps,
                )

            params = self._swap_params(wallet, token, fee, preliminary)
            try:
                gas_estimate = self.gateway.estimate_swap_gas(params, preliminary)
            except GasEstimationError as e:
                last_error = e
                steps.append(DeploymentStep(symbol=symbol, status="skipped", fee=fee, reason=e.message))
                continue

            gas_cost = gas_cost_with_margin(gas_estimate, self._gas_price())
            if gas_cost >= balance:
                error = InsufficientGasError(symbol, gas_cost, balance)
                steps.append(DeploymentStep(symbol=symbol, status="failed", fee=fee, reason=error.message))
                return DeploymentSummary(status="halted", message=error.message, attempted_count=1, steps=steps)

            amount_in = (balance - gas_cost) * allocation_pct // 100
            if amount_in <= 0:
                return DeploymentSummary(
                    status="aborted",
                    message=f"After gas fees, {allocation_pct}% allocation results in zero ETH to swap.",
                    attempted_count=1,
                    steps=steps,
                )

            final_params = replace(
                params,
                amount_in=amount_in,
                amount_out_minimum=self.slippage.minimum_output(amount_in, token),
            )
            try:
                tx_hash = self.gateway.submit_swap(final_params, amount_in)
            except TransactionRejectedError as e:
                steps.append(DeploymentStep(symbol=symbol, status="failed", fee=fee, reason=e.message))
                return DeploymentSummary(status="aborted", message=e.message, attempted_count=1, steps=steps)
            except DeploymentError as e:
                last_error = e
                steps.append(DeploymentStep(symbol=symbol, status="failed", fee=fee, reason=e.message))
                continue

            steps.append(DeploymentStep(
                symbol=symbol, status="confirmed", amount_in_wei=amount_in, fee=fee, tx_hash=tx_hash
            ))
            return DeploymentSummary(
                status="completed",
                message=f"Swapped {allocation_pct}% of your ETH into {target_symbol.upper()} via {pool_name} pool.",
                success_count=1,
                attempted_count=1,
                steps=steps,
            )

        return DeploymentSummary(
            status="failed",
            message=last_error.message if last_error else "All fee tiers failed",
            attempted_count=1,
            steps=steps,
        )
