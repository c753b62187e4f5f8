# reinvent/adapters/llm/anthropic_adapter.py
from typing import Optional

import anthropic
import httpx
from anthropic import AsyncAnthropic

from reinvent.core.domain.exceptions import ConfigurationError, ProviderError, TransportError, UpstreamError
from reinvent.core.domain.models import GenerationOptions


def map_anthropic_error(provider: str, error: anthropic.AnthropicError) -> ProviderError:
    if isinstance(error, anthropic.APIConnectionError):
        return TransportError(provider, f"{type(error).__name__}: {error}")
    if isinstance(error, anthropic.APIStatusError):
        return UpstreamError(provider, f"{type(error).__name__}: HTTP {error.status_code}", error.status_code)
    return UpstreamError(provider, f"{type(error).__name__}: {error}")


class AnthropicAdapter:
    """
    Driven Adapter for the Anthropic Messages API.
    Has no JSON mode; the prompts already demand bare JSON.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        timeout: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
        name: str = "anthropic",
    ):
        self.name = name
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._http_client = http_client
        self._client: Optional[AsyncAnthropic] = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> AsyncAnthropic:
        if not self.configured:
            raise ConfigurationError(self.name, "ANTHROPIC_API_KEY is not set")
        if self._client is None:
            self._client = AsyncAnthropic(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=0,
                http_client=self._http_client,
            )
        return self._client

    async def invoke(self, system: str, user: str, options: GenerationOptions) -> str:
        client = self._get_client()
        try:
            response = await client.messages.create(
                model=self.model,
                system=system,
                messages=[{"role": "user", "content": user}],
                max_tokens=options.max_tokens,
                temperature=min(options.temperature, 1.0),
            )
        except anthropic.AnthropicError as e:
            raise map_anthropic_error(self.name, e) from e

        text = "".join(
            getattr(block, "text", "") for block in response.content if getattr(block, "type", None) == "text"
        )
        if not text.strip():
            raise UpstreamError(self.name, "Message contained no text")
        return text
