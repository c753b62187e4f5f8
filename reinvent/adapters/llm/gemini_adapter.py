# reinvent/adapters/llm/gemini_adapter.py
from typing import Optional

import google.generativeai as genai
import structlog
from google.api_core import exceptions as google_exceptions

from reinvent.core.domain.exceptions import ConfigurationError, TransportError, UpstreamError
from reinvent.core.domain.models import GenerationOptions

logger = structlog.get_logger()

_TRANSPORT_ERRORS = (google_exceptions.DeadlineExceeded, google_exceptions.ServiceUnavailable)


class GeminiAdapter:
    """
    Driven Adapter for Google Gemini.
    A missing key disables the adapter; it never crashes startup.
    """

    def __init__(self, api_key: Optional[str], model: str = "gemini-1.5-flash", name: str = "gemini"):
        self.name = name
        self.api_key = api_key
        self.model_name = model

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def invoke(self, system: str, user: str, options: GenerationOptions) -> str:
        if not self.configured:
            raise ConfigurationError(self.name, "GOOGLE_API_KEY is not set")

        genai.configure(api_key=self.api_key)
        model = genai.GenerativeModel(self.model_name, system_instruction=system)
        config = genai.types.GenerationConfig(
            temperature=options.temperature,
            max_output_tokens=options.max_tokens,
            response_mime_type="application/json" if options.json_output else None,
        )

        try:
            response = await model.generate_content_async(user, generation_config=config)
        except _TRANSPORT_ERRORS as e:
            raise TransportError(self.name, f"{type(e).__name__}: {e}") from e
        except google_exceptions.GoogleAPICallError as e:
            raise UpstreamError(self.name, f"{type(e).__name__}: {e.message}", e.code) from e
        except google_exceptions.GoogleAPIError as e:
            raise UpstreamError(self.name, f"{type(e).__name__}: {e}") from e

        try:
            text = response.text
        except ValueError as e:
            # Raised when the candidate was blocked or carries no text parts
            raise UpstreamError(self.name, f"Response had no text: {e}") from e

        if not text or not text.strip():
            raise UpstreamError(self.name, "Response was empty")
        return text
