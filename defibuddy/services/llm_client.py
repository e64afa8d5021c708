"""
LLM Client

Thin wrapper over the OpenAI chat completions API in JSON mode. Works
with any OpenAI-compatible endpoint (OPENAI_BASE_URL).
"""

import logging
from typing import List, Optional

from openai import OpenAI, OpenAIError

from ..config.app_config import OPENAI_API_KEY, OPENAI_BASE_URL
from ..config.logging_config import PerformanceLogger
from ..exceptions import UpstreamUnavailableError

logger = logging.getLogger(__name__)


class LLMClient:
    """Sends a system + user prompt and returns the raw JSON-mode content"""

    service = "openai"

    def __init__(self, client: Optional[OpenAI] = None, api_key: Optional[str] = None,
                 base_url: Optional[str] = None):
        self._client = client
        self._api_key = api_key or OPENAI_API_KEY
        self._base_url = base_url or OPENAI_BASE_URL

    @property
    def client(self) -> OpenAI:
        # Created on first use so the app can start without credentials
        if self._client is None:
            if not self._api_key:
                raise UpstreamUnavailableError(
                    service=self.service,
                    message="LLM is not configured (set OPENAI_API_KEY)"
                )
            self._client = OpenAI(api_key=self._api_key, base_url=self._base_url)
        return self._client

    def complete_json(self, model: str, system_prompt: str, user_prompt: str) -> Optional[str]:
        """
        Run one JSON-mode chat completion.

        Returns:
            The message content, or None when the model returned nothing

        Raises:
            UpstreamUnavailableError: API error, timeout or missing credentials
        """
        messages: List[dict] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        try:
            with PerformanceLogger(logger, f"chat completion ({model})", service=self.service):
                response = self.client.chat.completions.create(
                    model=model,
                    messages=messages,
                    response_format={"type": "json_object"},
                )
        except OpenAIError as e:
            raise UpstreamUnavailableError(service=self.service, original_error=e)

        if not response.choices:
            return None
        return response.choices[0].message.content


_default_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    global _default_client
    if _default_client is None:
        _default_client = LLMClient()
    return _default_client
