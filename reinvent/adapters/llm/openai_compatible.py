# reinvent/adapters/llm/openai_compatible.py
"""
Chat adapter for every backend that speaks the OpenAI Chat Completions API.

One class, several instances: OpenAI itself, Groq and Together differ only in
base URL, credential and model name. SDK retries are disabled; switching to
the next provider is the orchestrator's job.
"""

from typing import Optional

import httpx
import openai
import structlog
from openai import AsyncOpenAI

from reinvent.core.domain.exceptions import ConfigurationError, ProviderError, TransportError, UpstreamError
from reinvent.core.domain.models import GenerationOptions

logger = structlog.get_logger()


def map_openai_error(provider: str, error: openai.OpenAIError) -> ProviderError:
    """Translates an `openai` SDK exception into the provider error taxonomy."""
    # APITimeoutError is a subclass of APIConnectionError
    if isinstance(error, openai.APIConnectionError):
        return TransportError(provider, f"{type(error).__name__}: {error}")
    if isinstance(error, openai.APIStatusError):
        return UpstreamError(provider, f"{type(error).__name__}: HTTP {error.status_code}", error.status_code)
    return UpstreamError(provider, f"{type(error).__name__}: {error}")


class OpenAISDKMixin:
    """Lazily builds one AsyncOpenAI client per adapter instance."""

    name: str
    api_key: Optional[str]
    base_url: Optional[str]
    timeout: float
    _http_client: Optional[httpx.AsyncClient]
    _client: Optional[AsyncOpenAI]

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self) -> AsyncOpenAI:
        if not self.configured:
            raise ConfigurationError(self.name, f"{self.name.upper()} API key is not set")
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
                http_client=self._http_client,
            )
        return self._client


class OpenAICompatibleAdapter(OpenAISDKMixin):
    def __init__(
        self,
        name: str,
        api_key: Optional[str],
        model: str,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        supports_json_mode: bool = True,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.name = name
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.supports_json_mode = supports_json_mode
        self._http_client = http_client
        self._client = None

    async def invoke(self, system: str, user: str, options: GenerationOptions) -> str:
        client = self.client

        kwargs = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
        }
        if options.json_output and self.supports_json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await client.chat.completions.create(**kwargs)
        except openai.OpenAIError as e:
            raise map_openai_error(self.name, e) from e

        if not response.choices:
            raise UpstreamError(self.name, "Completion contained no choices")
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise UpstreamError(self.name, "Completion was empty")

        logger.debug("chat_completion_received", provider=self.name, model=self.model, length=len(content))
        return content
