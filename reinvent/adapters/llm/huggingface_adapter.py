# reinvent/adapters/llm/huggingface_adapter.py
from typing import Optional

import httpx

from reinvent.adapters.http import send
from reinvent.core.domain.exceptions import ConfigurationError, UpstreamError
from reinvent.core.domain.models import GenerationOptions


class HuggingFaceTextAdapter:
    """Text generation through the Hugging Face Inference API (plain HTTP)."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: Optional[str],
        model: str,
        base_url: str = "https://api-inference.huggingface.co/models",
        name: str = "huggingface",
    ):
        self.name = name
        self.client = client
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def invoke(self, system: str, user: str, options: GenerationOptions) -> str:
        if not self.configured:
            raise ConfigurationError(self.name, "HUGGING_FACE_API_KEY is not set")

        payload = {
            "inputs": f"{system}\n\n{user}",
            "parameters": {
                # the Inference API rejects a temperature of exactly 0
                "temperature": max(options.temperature, 0.01),
                "max_new_tokens": options.max_tokens,
                "return_full_text": False,
            },
        }
        response = await send(
            self.client,
            self.name,
            "POST",
            f"{self.base_url}/{self.model}",
            json=payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(self.name, "Response was not JSON", response.status_code) from e

        if isinstance(data, list) and data and isinstance(data[0], dict):
            text = data[0].get("generated_text")
        elif isinstance(data, dict):
            if data.get("error"):
                raise UpstreamError(self.name, str(data["error"])[:200], response.status_code)
            text = data.get("generated_text")
        else:
            text = None

        if not isinstance(text, str) or not text.strip():
            raise UpstreamError(self.name, "Response carried no generated_text", response.status_code)
        return text
