"""
Pytest Configuration and Fixtures

Provides shared fixtures and upstream fakes for testing DefiBuddy.
"""

import json
import os
import sys
import tempfile
from typing import Any, Dict, List, Optional, Tuple

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['LOG_LEVEL'] = 'ERROR'  # Reduce log noise in tests
os.environ['RATE_LIMIT_ENABLED'] = 'false'  # Disable rate limiting for tests
os.environ['REDIS_ENABLED'] = 'false'
os.environ.setdefault(
    'DATABASE_URL',
    'sqlite:///' + os.path.join(tempfile.gettempdir(), 'defibuddy_test.db')
)

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from defibuddy.cache.redis_cache import InMemoryCache
from defibuddy.exceptions import GasEstimationError
from defibuddy.models.database import Base
from defibuddy.services.deployment_service import ChainGateway, SwapParams
from defibuddy.services.dex_service import DexCatalogService
from defibuddy.services.portfolio_store import PortfolioStore
from defibuddy.services.report_service import NftGateway
from defibuddy.utils.data_providers import (
    BaseExplorerProvider,
    BasePoolsProvider,
    BaseTokenListProvider,
)

VITALIK = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"


# ============================================================================
# Upstream Fakes
# ============================================================================

class FakeLLM:
    """Returns queued JSON-mode replies and records every prompt"""

    def __init__(self, *replies: Optional[str]):
        self.replies = list(replies)
        self.calls: List[Dict[str, str]] = []

    def complete_json(self, model: str, system_prompt: str, user_prompt: str) -> Optional[str]:
        self.calls.append({"model": model, "system": system_prompt, "user": user_prompt})
        if not self.replies:
            return None
        return self.replies.pop(0)


class FakeExplorer(BaseExplorerProvider):
    def __init__(self, response: Dict[str, Any]):
        self.response = response
        self.requested: List[str] = []

    def get_address_info(self, address: str) -> Dict[str, Any]:
        self.requested.append(address)
        return self.response


class FakeTokenList(BaseTokenListProvider):
    def __init__(self, tokens: List[Dict[str, Any]]):
        self.tokens = tokens
        self.calls = 0

    def get_tokens(self) -> List[Dict[str, Any]]:
        self.calls += 1
        return self.tokens


class FakePools(BasePoolsProvider):
    def __init__(self, pools: List[Dict[str, Any]]):
        self.pools = pools
        self.calls = 0

    def get_pools(self) -> List[Dict[str, Any]]:
        self.calls += 1
        return self.pools


class FakeChain(ChainGateway):
    """
    Wallet with a fixed ETH balance. Swaps spend their value; tokens
    listed in `gas_failures` fail estimation, `swap_errors` maps a token
    address to the exception raised on submit.
    """

    def __init__(self, balance: int, gas_estimate: int = 100_000, gas_price: Optional[int] = 10,
                 gas_failures: Tuple[str, ...] = (), swap_errors: Optional[Dict[str, Exception]] = None):
        self.balance = balance
        self.gas_estimate = gas_estimate
        self.gas_price = gas_price
        self.gas_failures = gas_failures
        self.swap_errors = swap_errors or {}
        self.submitted: List[SwapParams] = []

    def get_balance(self, address: str) -> int:
        return self.balance

    def get_gas_price(self) -> Optional[int]:
        return self.gas_price

    def estimate_swap_gas(self, params: SwapParams, value: int) -> int:
        if params.token_out in self.gas_failures:
            raise GasEstimationError(params.token_out, "execution reverted")
        return self.gas_estimate

    def submit_swap(self, params: SwapParams, value: int) -> str:
        error = self.swap_errors.get(params.token_out)
        if error is not None:
            raise error
        self.submitted.append(params)
        self.balance -= value
        return f"0xtx{len(self.submitted)}"


class FakeNftGateway(NftGateway):
    def __init__(self):
        self.deployed = 0
        self.minted: List[Tuple[str, str, str]] = []

    def deploy_contract(self) -> str:
        self.deployed += 1
        return f"0xcontract{self.deployed}"

    def mint(self, contract_address: str, recipient: str, token_uri: str):
        self.minted.append((contract_address, recipient, token_uri))
        return len(self.minted), f"0xmint{len(self.minted)}"


def llm_json(payload: Any) -> str:
    return json.dumps(payload)


# ============================================================================
# Sample Data Fixtures
# ============================================================================

@pytest.fixture
def token_list() -> List[Dict[str, Any]]:
    """Slice of the Uniswap default list across chains"""
    return [
        {"chainId": 1, "symbol": "WETH", "name": "Wrapped Ether",
         "address": "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2", "decimals": 18},
        {"chainId": 1, "symbol": "UNI", "name": "Uniswap",
         "address": "0x1f9840a85d5aF5bf1D1762F925BDADdC4201F984", "decimals": 18},
        {"chainId": 1, "symbol": "LINK", "name": "ChainLink Token",
         "address": "0x514910771AF9Ca656af840dff83E8264EcF986CA", "decimals": 18},
        {"chainId": 1, "symbol": "USDC", "name": "USD Coin",
         "address": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48", "decimals": 6},
        {"chainId": 137, "symbol": "DOGE", "name": "Dogecoin (Polygon)",
         "address": "0x0000000000000000000000000000000000000d06", "decimals": 8},
    ]


@pytest.fixture
def pool_snapshot() -> List[Dict[str, Any]]:
    """DefiLlama /pools rows"""
    return [
        {"pool": "p1", "symbol": "USDC-WETH", "project": "uniswap-v3", "chain": "Ethereum",
         "tvlUsd": 250_000_000, "apy": 12.5, "apyBase": 12.5, "apyReward": None},
        {"pool": "p2", "symbol": "WETH-UNI", "project": "uniswap-v3", "chain": "Ethereum",
         "tvlUsd": 5_000_000, "apy": None, "apyBase": 18.0, "apyReward": 2.0},
        {"pool": "p3", "symbol": "LINK-WETH", "project": "uniswap-v2", "chain": "Ethereum",
         "tvlUsd": 50_000, "apy": 40.0, "apyBase": 40.0, "apyReward": 0},
        {"pool": "p4", "symbol": "USDC-WETH", "project": "uniswap-v3", "chain": "Arbitrum",
         "tvlUsd": 90_000_000, "apy": 30.0, "apyBase": 30.0, "apyReward": 0},
        {"pool": "p5", "symbol": "USDC-WETH", "project": "sushiswap", "chain": "Ethereum",
         "tvlUsd": 9_000_000, "apy": 22.0, "apyBase": 22.0, "apyReward": 0},
        {"pool": "p6", "symbol": "LINK/USDC.e", "project": "uniswap-v3", "chain": "Ethereum",
         "tvlUsd": 300_000, "apy": None, "apyBase": None, "apyReward": None},
    ]


@pytest.fixture
def explorer_response() -> Dict[str, Any]:
    """Ethplorer getAddressInfo payload"""
    return {
        "address": VITALIK.lower(),
        "ETH": {"balance": 2.5, "price": {"rate": 2000.0}},
        "tokens": [
            {"tokenInfo": {"name": "Uniswap", "symbol": "UNI", "decimals": "18", "type": "ERC-20",
                           "price": {"rate": 10.0}},
             "balance": 150 * 10 ** 18},
            {"tokenInfo": {"name": "USD Coin", "symbol": "USDC", "decimals": "6", "type": "ERC-20",
                           "price": {"rate": 1.0}},
             "balance": 2500 * 10 ** 6},
            {"tokenInfo": {"name": "Spam Airdrop", "symbol": "SPAM", "decimals": "18", "type": "ERC-20",
                           "price": False},
             "balance": 10 ** 24},
            {"tokenInfo": {"name": "", "symbol": "", "decimals": "0", "price": False},
             "balance": 1},
            {"tokenInfo": {"name": "CryptoPunks", "symbol": "PUNK", "decimals": "0", "type": "ERC-721",
                           "price": False},
             "balance": 3},
        ],
    }


# ============================================================================
# Database / Service Fixtures
# ============================================================================

@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite database shared across threads"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def memory_cache():
    return InMemoryCache()


@pytest.fixture
def dex_catalog(token_list, pool_snapshot, memory_cache):
    return DexCatalogService(
        token_list=FakeTokenList(token_list),
        pools=FakePools(pool_snapshot),
        cache=memory_cache,
    )


@pytest.fixture
def portfolio_store():
    return PortfolioStore(cache=InMemoryCache())


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def fake_explorer(explorer_response):
    return FakeExplorer(explorer_response)


# ============================================================================
# API Client Fixture
# ============================================================================

@pytest.fixture
def client(session_factory, fake_llm, fake_explorer, dex_catalog, portfolio_store):
    """TestClient with every upstream and the database swapped for fakes"""
    from fastapi.testclient import TestClient
    from defibuddy.main import app
    from defibuddy.database.config import get_database_session
    from defibuddy.api.dependencies import (
        get_dex_catalog,
        get_explorer,
        get_llm,
        get_portfolio_store,
    )

    def override_session():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_database_session] = override_session
    app.dependency_overrides[get_llm] = lambda: fake_llm
    app.dependency_overrides[get_explorer] = lambda: fake_explorer
    app.dependency_overrides[get_dex_catalog] = lambda: dex_catalog
    app.dependency_overrides[get_portfolio_store] = lambda: portfolio_store

    yield TestClient(app)

    app.dependency_overrides.clear()
