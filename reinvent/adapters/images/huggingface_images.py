# reinvent/adapters/images/huggingface_images.py
import base64
import uuid
from typing import Optional

import httpx

from reinvent.adapters.http import send
from reinvent.core.domain.exceptions import ConfigurationError, UpstreamError
from reinvent.core.domain.models import GeneratedImage, ImageOptions


class HuggingFaceImageAdapter:
    """
    Text-to-image through the Hugging Face Inference API.
    The API answers with raw image bytes, returned here as a data: URI.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: Optional[str],
        model: str = "black-forest-labs/FLUX.1-schnell",
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

    async def invoke(self, prompt: str, options: ImageOptions) -> GeneratedImage:
        if not self.configured:
            raise ConfigurationError(self.name, "HUGGING_FACE_API_KEY is not set")

        width, height = options.dimensions
        response = await send(
            self.client,
            self.name,
            "POST",
            f"{self.base_url}/{self.model}",
            json={"inputs": prompt, "parameters": {"width": width, "height": height}},
            headers={"Authorization": f"Bearer {self.api_key}", "Accept": "image/png"},
        )

        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        if not content_type.startswith("image/") or not response.content:
            raise UpstreamError(self.name, f"Expected image bytes, got '{content_type or 'nothing'}'", response.status_code)

        encoded = base64.b64encode(response.content).decode("ascii")
        return GeneratedImage(
            id=f"{self.name}_{uuid.uuid4().hex[:12]}",
            url=f"data:{content_type};base64,{encoded}",
            provider=self.name,
        )
