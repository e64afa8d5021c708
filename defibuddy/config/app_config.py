"""
Application Configuration for DefiBuddy

Single source of truth for upstream endpoints, LLM settings and the
constants shared by lookup, deployment and reporting code.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


# Upstream data providers
ETHPLORER_API_URL = os.getenv('ETHPLORER_API_URL', 'https://api.ethplorer.io')
ETHPLORER_API_KEY = os.getenv('ETHPLORER_API_KEY', 'freekey')
UNISWAP_TOKEN_LIST_URL = os.getenv('UNISWAP_TOKEN_LIST_URL', 'https://tokens.uniswap.org')
DEFILLAMA_POOLS_URL = os.getenv('DEFILLAMA_POOLS_URL', 'https://yields.llama.fi/pools')
UPSTREAM_TIMEOUT_SECONDS = _int_env('UPSTREAM_TIMEOUT_SECONDS', 20)

TOKEN_LIST_CACHE_TTL = _int_env('TOKEN_LIST_CACHE_TTL', 3600)  # 1 hour
POOLS_CACHE_TTL = _int_env('POOLS_CACHE_TTL', 600)  # 10 minutes

# LLM (OpenAI-compatible chat completions)
OPENAI_API_KEY = os.getenv('AI_INTEGRATIONS_OPENAI_API_KEY') or os.getenv('OPENAI_API_KEY')
OPENAI_BASE_URL = os.getenv('AI_INTEGRATIONS_OPENAI_BASE_URL') or os.getenv('OPENAI_BASE_URL')
LOOKUP_MODEL = os.getenv('LOOKUP_MODEL', 'gpt-4o')
CHAT_MODEL = os.getenv('CHAT_MODEL', 'gpt-4o')

# Lookups
MAX_HOLDINGS = 5
MAX_TOKEN_DECIMALS = 255
ETH_ADDRESS_PATTERN = r'^0x[a-fA-F0-9]{40}$'
MAINNET_CHAIN_ID = 1

# Pools
POOL_MIN_TVL_USD = 100_000
POOL_RESULT_LIMIT = 20

# Deployment (Sepolia testnet by default)
CHAIN_ID = _int_env('CHAIN_ID', 11155111)
SWAP_ROUTER_ADDRESS = os.getenv('SWAP_ROUTER_ADDRESS', '0x3bFA4769FB09eefC5a80d6E87c3B9C650f7Ae48E')
WETH_ADDRESS = os.getenv('WETH_ADDRESS', '0xfFf9976782d46CC05630D1f6eBAb18b2324d6B14')
DEFAULT_FEE_TIER = 3000
POOL_FEE_TIERS = (3000, 500, 10000, 100)
SWAP_DEADLINE_SECONDS = 1800
GAS_SAFETY_MARGIN_PERCENT = 120
FALLBACK_GAS_PRICE_WEI = 50_000_000_000  # 50 gwei

# Reports
PUBLIC_BASE_URL = os.getenv('PUBLIC_BASE_URL', 'http://localhost:8000').rstrip('/')
