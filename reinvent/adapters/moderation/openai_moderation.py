# reinvent/adapters/moderation/openai_moderation.py
from typing import Optional

import httpx
import openai

from reinvent.adapters.llm.openai_compatible import OpenAISDKMixin, map_openai_error
from reinvent.core.domain.exceptions import UpstreamError


class OpenAIModerationAdapter(OpenAISDKMixin):
    def __init__(
        self,
        api_key: Optional[str],
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
        name: str = "openai",
    ):
        self.name = name
        self.api_key = api_key
        self.base_url = None
        self.timeout = timeout
        self._http_client = http_client
        self._client = None

    async def is_flagged(self, text: str) -> bool:
        client = self.client
        try:
            response = await client.moderations.create(input=text)
        except openai.OpenAIError as e:
            raise map_openai_error(self.name, e) from e

        if not response.results:
            raise UpstreamError(self.name, "Moderation response contained no results")
        return bool(response.results[0].flagged)
