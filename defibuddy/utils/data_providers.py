import logging

import requests
from typing import Any, Dict, List, Optional
from abc import ABC, abstractmethod

from ..config.app_config import (
    ETHPLORER_API_URL,
    ETHPLORER_API_KEY,
    UNISWAP_TOKEN_LIST_URL,
    DEFILLAMA_POOLS_URL,
    UPSTREAM_TIMEOUT_SECONDS,
)
from ..config.logging_config import PerformanceLogger
from ..exceptions import UpstreamUnavailableError, UpstreamDataInvalidError

logger = logging.getLogger(__name__)


def fetch_json(service: str, url: str, params: Optional[dict] = None, timeout: Optional[int] = None) -> Any:
    """
    GET a JSON document from a third-party API.

    Raises:
        UpstreamUnavailableError: network failure or non-2xx status
        UpstreamDataInvalidError: body is not JSON
    """
    try:
        with PerformanceLogger(logger, f"GET {service}", service=service):
            response = requests.get(url, params=params, timeout=timeout or UPSTREAM_TIMEOUT_SECONDS)
            response.raise_for_status()
    except requests.RequestException as e:
        raise UpstreamUnavailableError(service=service, original_error=e)

    try:
        return response.json()
    except ValueError as e:
        raise UpstreamDataInvalidError(service=service, errors=[str(e)])


class BaseExplorerProvider(ABC):
    """Block explorer returning an address's ETH and token balances"""

    @abstractmethod
    def get_address_info(self, address: str) -> Dict[str, Any]:
        pass


class EthplorerProvider(BaseExplorerProvider):
    """Ethplorer getAddressInfo (the public freekey is rate-limited)"""

    service = "ethplorer"

    def __init__(self, base_url: str = ETHPLORER_API_URL, api_key: str = ETHPLORER_API_KEY):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key

    def get_address_info(self, address: str) -> Dict[str, Any]:
        data = fetch_json(
            self.service,
            f"{self.base_url}/getAddressInfo/{address}",
            params={'apiKey': self.api_key},
        )
        if not isinstance(data, dict):
            raise UpstreamDataInvalidError(self.service, ["expected a JSON object"])
        return data


class BaseTokenListProvider(ABC):
    """Source of DEX-listed tokens"""

    @abstractmethod
    def get_tokens(self) -> List[Dict[str, Any]]:
        pass


class UniswapTokenListProvider(BaseTokenListProvider):
    """Uniswap default token list (all chains)"""

    service = "uniswap-token-list"

    def __init__(self, url: str = UNISWAP_TOKEN_LIST_URL):
        self.url = url

    def get_tokens(self) -> List[Dict[str, Any]]:
        data = fetch_json(self.service, self.url)
        tokens = data.get('tokens') if isinstance(data, dict) else None
        if not isinstance(tokens, list):
            raise UpstreamDataInvalidError(self.service, ["missing 'tokens' array"])
        return tokens


class BasePoolsProvider(ABC):
    """Source of liquidity pool yield snapshots"""

    @abstractmethod
    def get_pools(self) -> List[Dict[str, Any]]:
        pass


class DefiLlamaPoolsProvider(BasePoolsProvider):
    """DefiLlama yields /pools snapshot"""

    service = "defillama"

    def __init__(self, url: str = DEFILLAMA_POOLS_URL):
        self.url = url

    def get_pools(self) -> List[Dict[str, Any]]:
        data = fetch_json(self.service, self.url)
        if not isinstance(data, dict) or data.get('status') != 'success' or not isinstance(data.get('data'), list):
            raise UpstreamUnavailableError(
                service=self.service,
                message="Failed to fetch pool data"
            )
        return data['data']
