# reinvent/adapters/images/openai_images.py
import uuid
from typing import Optional

import httpx
import openai

from reinvent.adapters.llm.openai_compatible import OpenAISDKMixin, map_openai_error
from reinvent.core.domain.exceptions import UpstreamError
from reinvent.core.domain.models import GeneratedImage, ImageOptions

# DALL-E 3 only renders these; anything smaller is upscaled to the square size
DALLE3_SIZES = {"1024x1024", "1792x1024", "1024x1792"}


class OpenAIImageAdapter(OpenAISDKMixin):
    def __init__(
        self,
        api_key: Optional[str],
        model: str = "dall-e-3",
        timeout: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
        name: str = "openai",
    ):
        self.name = name
        self.api_key = api_key
        self.model = model
        self.base_url = None
        self.timeout = timeout
        self._http_client = http_client
        self._client = None

    def _size_for(self, options: ImageOptions) -> str:
        if self.model == "dall-e-3" and options.size not in DALLE3_SIZES:
            return "1024x1024"
        return options.size

    async def invoke(self, prompt: str, options: ImageOptions) -> GeneratedImage:
        client = self.client
        try:
            response = await client.images.generate(
                model=self.model,
                prompt=prompt,
                n=1,
                size=self._size_for(options),
                quality="standard",
            )
        except openai.OpenAIError as e:
            raise map_openai_error(self.name, e) from e

        if not response.data:
            raise UpstreamError(self.name, "Image response contained no data")
        item = response.data[0]
        if item.url:
            url = item.url
        elif item.b64_json:
            url = f"data:image/png;base64,{item.b64_json}"
        else:
            raise UpstreamError(self.name, "Image response had neither url nor b64_json")

        return GeneratedImage(id=f"{self.name}_{uuid.uuid4().hex[:12]}", url=url, provider=self.name)
