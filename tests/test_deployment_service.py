"""
Tests for the Deployment Orchestrator (defibuddy/services/deployment_service.py)

The chain is a FakeChain from conftest; swaps spend their value so each
step sees the balance left by the previous one.
"""

import pytest

from defibuddy.config.app_config import FALLBACK_GAS_PRICE_WEI, SWAP_DEADLINE_SECONDS, WETH_ADDRESS
from defibuddy.exceptions import (
    GasEstimationError,
    SwapFailedError,
    TransactionRejectedError,
    ValidationError,
)
from defibuddy.models.portfolio import PortfolioItem
from defibuddy.services.deployment_service import (
    DeploymentOrchestrator,
    SlippagePolicy,
    gas_cost_with_margin,
)

from conftest import FakeChain, VITALIK

ETHER = 10 ** 18
UNI = "0x1f9840a85d5aF5bf1D1762F925BDADdC4201F984"
LINK = "0x514910771AF9Ca656af840dff83E8264EcF986CA"
GAS_COST = 100_000 * 10 * 120 // 100


def items(*pairs):
    return [PortfolioItem(name=symbol, symbol=symbol, percentage=pct) for symbol, pct in pairs]


def orchestrator(chain, catalog, **kwargs):
    return DeploymentOrchestrator(chain, catalog, clock=lambda: 1_700_000_000, **kwargs)


class HalfSlippage(SlippagePolicy):
    def minimum_output(self, amount_in, token):
        return amount_in // 2


class FeeSensitiveChain(FakeChain):
    """Pool at the default fee tier has no liquidity"""

    def estimate_swap_gas(self, params, value):
        if params.fee == 3000:
            raise GasEstimationError(params.token_out, "no liquidity")
        return super().estimate_swap_gas(params, value)


class TestGasCost:

    def test_margin(self):
        assert gas_cost_with_margin(100_000, 10) == 1_200_000


class TestDeploy:

    def test_all_swaps_confirmed(self, dex_catalog):
        chain = FakeChain(balance=ETHER)

        summary = orchestrator(chain, dex_catalog).deploy(VITALIK, items(("UNI", 60), ("LINK", 40)))

        assert summary.status == "completed"
        assert summary.message == "Portfolio deployed! 2/2 swaps completed."
        assert summary.success_count == 2
        assert summary.attempted_count == 2
        assert [s.status for s in summary.steps] == ["confirmed", "confirmed"]
        assert [s.tx_hash for s in summary.steps] == ["0xtx1", "0xtx2"]

    def test_amounts_follow_the_running_balance(self, dex_catalog):
        chain = FakeChain(balance=ETHER)

        summary = orchestrator(chain, dex_catalog).deploy(VITALIK, items(("UNI", 60), ("LINK", 40)))

        first = (ETHER - GAS_COST) * 60 // 100
        second = (ETHER - first - GAS_COST) * 40 // 100
        assert [s.amount_in_wei for s in summary.steps] == [first, second]

    def test_swap_params(self, dex_catalog):
        chain = FakeChain(balance=ETHER)

        orchestrator(chain, dex_catalog).deploy(VITALIK, items(("UNI", 100)))

        params = chain.submitted[0]
        assert params.token_in == WETH_ADDRESS
        assert params.token_out == UNI
        assert params.fee == 3000
        assert params.recipient == VITALIK
        assert params.deadline == 1_700_000_000 + SWAP_DEADLINE_SECONDS
        assert params.amount_out_minimum == 1
        assert params.sqrt_price_limit_x96 == 0

    def test_slippage_policy_is_pluggable(self, dex_catalog):
        chain = FakeChain(balance=ETHER)

        orchestrator(chain, dex_catalog, slippage=HalfSlippage()).deploy(VITALIK, items(("UNI", 100)))

        params = chain.submitted[0]
        assert params.amount_out_minimum == params.amount_in // 2

    def test_fallback_gas_price(self, dex_catalog):
        chain = FakeChain(balance=ETHER, gas_price=None)

        summary = orchestrator(chain, dex_catalog).deploy(VITALIK, items(("UNI", 100)))

        gas_cost = 100_000 * FALLBACK_GAS_PRICE_WEI * 120 // 100
        assert summary.steps[0].amount_in_wei == ETHER - gas_cost

    def test_unavailable_asset_aborts_before_any_swap(self, dex_catalog):
        chain = FakeChain(balance=ETHER)

        summary = orchestrator(chain, dex_catalog).deploy(VITALIK, items(("UNI", 50), ("DOGE", 50)))

        assert summary.status == "aborted"
        assert summary.unavailable == ["DOGE"]
        assert summary.attempted_count == 0
        assert summary.message == "1 asset not available on Uniswap: DOGE"
        assert chain.submitted == []

    def test_empty_portfolio_rejected(self, dex_catalog):
        with pytest.raises(ValidationError):
            orchestrator(FakeChain(balance=ETHER), dex_catalog).deploy(VITALIK, [])

    def test_zero_balance_aborts(self, dex_catalog):
        summary = orchestrator(FakeChain(balance=0), dex_catalog).deploy(VITALIK, items(("UNI", 100)))

        assert summary.status == "aborted"
        assert "0 ETH" in summary.message

    def test_gas_estimation_failure_skips_asset(self, dex_catalog):
        chain = FakeChain(balance=ETHER, gas_failures=(UNI,))

        summary = orchestrator(chain, dex_catalog).deploy(VITALIK, items(("UNI", 50), ("LINK", 50)))

        assert [s.status for s in summary.steps] == ["skipped", "confirmed"]
        assert summary.message == "Portfolio deployed! 1/2 swaps completed."

    def test_insufficient_gas_halts(self, dex_catalog):
        chain = FakeChain(balance=GAS_COST - 1)

        summary = orchestrator(chain, dex_catalog).deploy(VITALIK, items(("UNI", 50), ("LINK", 50)))

        assert summary.status == "halted"
        assert summary.attempted_count == 1
        assert summary.steps[0].status == "failed"
        assert "Not enough ETH for gas" in summary.message
        assert chain.submitted == []

    def test_rejected_swap_moves_on(self, dex_catalog):
        chain = FakeChain(balance=ETHER, swap_errors={UNI: TransactionRejectedError()})

        summary = orchestrator(chain, dex_catalog).deploy(VITALIK, items(("UNI", 50), ("LINK", 50)))

        assert [s.status for s in summary.steps] == ["failed", "confirmed"]
        assert summary.steps[0].reason == "Transaction rejected by user"
        assert summary.success_count == 1

    def test_no_swaps_completed(self, dex_catalog):
        chain = FakeChain(balance=ETHER, swap_errors={UNI: SwapFailedError("UNI", "reverted")})

        summary = orchestrator(chain, dex_catalog).deploy(VITALIK, items(("UNI", 100)))

        assert summary.success_count == 0
        assert summary.message == "No swaps were completed. Transactions may have been rejected."


class TestDeployToPool:

    def test_swaps_into_counterpart(self, dex_catalog):
        chain = FakeChain(balance=ETHER)

        summary = orchestrator(chain, dex_catalog).deploy_to_pool(
            VITALIK, "WETH-UNI", items(("WETH", 50), ("UNI", 50))
        )

        assert summary.status == "completed"
        assert summary.message == "Swapped 50% of your ETH into UNI via WETH-UNI pool."
        assert chain.submitted[0].token_out == UNI
        assert chain.submitted[0].amount_in == (ETHER - GAS_COST) * 50 // 100
        assert summary.steps[-1].fee == 3000

    def test_bridged_suffix_matches_portfolio_symbol(self, dex_catalog):
        chain = FakeChain(balance=ETHER)

        summary = orchestrator(chain, dex_catalog).deploy_to_pool(
            VITALIK, "LINK/USDC.e", items(("USDC", 100))
        )

        assert summary.status == "completed"
        assert chain.submitted[0].token_out == LINK

    def test_no_matching_asset(self, dex_catalog):
        summary = orchestrator(FakeChain(balance=ETHER), dex_catalog).deploy_to_pool(
            VITALIK, "USDC-WETH", items(("UNI", 100))
        )

        assert summary.status == "aborted"
        assert "match this pool" in summary.message

    def test_eth_counterpart_refused(self, dex_catalog):
        summary = orchestrator(FakeChain(balance=ETHER), dex_catalog).deploy_to_pool(
            VITALIK, "USDC-WETH", items(("USDC", 100))
        )

        assert summary.status == "aborted"
        assert "already hold ETH" in summary.message

    def test_unlisted_counterpart(self, dex_catalog):
        summary = orchestrator(FakeChain(balance=ETHER), dex_catalog).deploy_to_pool(
            VITALIK, "DOGE-UNI", items(("UNI", 100))
        )

        assert summary.status == "aborted"
        assert summary.unavailable == ["doge"]

    def test_next_fee_tier_after_gas_failure(self, dex_catalog):
        chain = FeeSensitiveChain(balance=ETHER)

        summary = orchestrator(chain, dex_catalog).deploy_to_pool(
            VITALIK, "WETH-UNI", items(("WETH", 100))
        )

        assert summary.status == "completed"
        assert [(s.status, s.fee) for s in summary.steps] == [("skipped", 3000), ("confirmed", 500)]

    def test_rejection_stops_immediately(self, dex_catalog):
        chain = FakeChain(balance=ETHER, swap_errors={UNI: TransactionRejectedError()})

        summary = orchestrator(chain, dex_catalog).deploy_to_pool(
            VITALIK, "WETH-UNI", items(("WETH", 100))
        )

        assert summary.status == "aborted"
        assert len(summary.steps) == 1

    def test_every_fee_tier_failing(self, dex_catalog):
        chain = FakeChain(balance=ETHER, swap_errors={UNI: SwapFailedError("UNI", "reverted")})

        summary = orchestrator(chain, dex_catalog).deploy_to_pool(
            VITALIK, "WETH-UNI", items(("WETH", 100))
        )

        assert summary.status == "failed"
        assert [s.fee for s in summary.steps] == [3000, 500, 10000, 100]
        assert summary.message == "Swap failed for UNI: reverted"

    def test_insufficient_gas(self, dex_catalog):
        summary = orchestrator(FakeChain(balance=GAS_COST), dex_catalog).deploy_to_pool(
            VITALIK, "WETH-UNI", items(("WETH", 100))
        )

        assert summary.status == "halted"
