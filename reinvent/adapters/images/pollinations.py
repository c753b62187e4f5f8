# reinvent/adapters/images/pollinations.py
import random
import uuid
from typing import Callable, Optional
from urllib.parse import quote

import httpx

from reinvent.adapters.http import send
from reinvent.core.domain.models import GeneratedImage, ImageOptions


class PollinationsImageAdapter:
    """
    Keyless image backend: the image lives at a URL derived from the prompt.
    The URL is fetched once before being handed out, so a broken backend
    fails here and the orchestrator can move on.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = "https://image.pollinations.ai/prompt",
        seed: Optional[Callable[[], int]] = None,
        name: str = "pollinations",
    ):
        self.name = name
        self.client = client
        self.base_url = base_url.rstrip("/")
        self._seed = seed or (lambda: random.randint(0, 999_999))

    @property
    def configured(self) -> bool:
        return True

    def build_url(self, prompt: str, options: ImageOptions) -> str:
        width, height = options.dimensions
        return (
            f"{self.base_url}/{quote(prompt, safe='')}"
            f"?width={width}&height={height}&seed={self._seed()}&nologo=true"
        )

    async def invoke(self, prompt: str, options: ImageOptions) -> GeneratedImage:
        url = self.build_url(prompt, options)
        await send(self.client, self.name, "GET", url)
        return GeneratedImage(id=f"{self.name}_{uuid.uuid4().hex[:12]}", url=url, provider=self.name)
