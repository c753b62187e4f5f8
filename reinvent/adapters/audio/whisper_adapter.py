# reinvent/adapters/audio/whisper_adapter.py
from typing import Optional

import httpx
import openai

from reinvent.adapters.llm.openai_compatible import OpenAISDKMixin, map_openai_error
from reinvent.core.domain.exceptions import UpstreamError
from reinvent.core.domain.models import AudioPayload


class WhisperAdapter(OpenAISDKMixin):
    """Whisper transcription over the OpenAI audio API (OpenAI or Groq)."""

    def __init__(
        self,
        name: str,
        api_key: Optional[str],
        model: str = "whisper-1",
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        language: str = "en",
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.name = name
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.language = language
        self._http_client = http_client
        self._client = None

    async def invoke(self, audio: AudioPayload) -> str:
        client = self.client
        try:
            transcription = await client.audio.transcriptions.create(
                model=self.model,
                file=(audio.filename, audio.content, audio.content_type),
                language=self.language,
            )
        except openai.OpenAIError as e:
            raise map_openai_error(self.name, e) from e

        text = getattr(transcription, "text", None)
        if text is None:
            raise UpstreamError(self.name, "Transcription response carried no text")
        return text
