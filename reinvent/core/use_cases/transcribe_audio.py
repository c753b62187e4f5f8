# reinvent/core/use_cases/transcribe_audio.py
import re
from typing import Optional, Sequence

import structlog

from reinvent.core.cache_keys import transcription_key
from reinvent.core.domain.exceptions import DomainError, ValidationError
from reinvent.core.domain.models import AudioPayload, TranscriptionResult
from reinvent.core.fallback import FallbackOrchestrator
from reinvent.core.ports.ai_providers import ITranscriber
from reinvent.core.ports.cache import ICacheNamespace
from reinvent.shared.observability import get_tracer

logger = structlog.get_logger()
tracer = get_tracer(__name__)

AUDIO_CONTENT_TYPE = re.compile(r"^audio/(wav|x-wav|mp3|mpeg|m4a|mp4|x-m4a|ogg|webm)$")


class TranscribeAudio:
    """Use Case: Speech-to-text for a short uploaded clip, cached by content hash."""

    def __init__(
        self,
        providers: Sequence[ITranscriber],
        orchestrator: FallbackOrchestrator,
        cache: ICacheNamespace,
        max_bytes: int = 25 * 1024 * 1024,
    ):
        self.providers = providers
        self.orchestrator = orchestrator
        self.cache = cache
        self.max_bytes = max_bytes

    async def execute(
        self,
        content: Optional[bytes],
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> TranscriptionResult:
        with tracer.start_as_current_span("use_case.transcribe") as span:
            if not content:
                raise ValidationError("An 'audio' file is required.", field="audio")
            media_type = (content_type or "").split(";")[0].strip().lower()
            if not AUDIO_CONTENT_TYPE.match(media_type):
                raise ValidationError("Only audio files are allowed.", field="audio")
            if len(content) > self.max_bytes:
                raise ValidationError(
                    f"Audio file exceeds the {self.max_bytes // (1024 * 1024)}MB limit.", field="audio"
                )

            key = transcription_key(content)
            hit = self.cache.get(key)
            if hit is not None:
                logger.info("cache_hit", operation="transcribe")
                span.set_attribute("app.cached", True)
                return TranscriptionResult(text=hit, cached=True)

            payload = AudioPayload(content=content, filename=filename or "audio.wav", content_type=media_type)
            logger.info("transcription_started", bytes=len(content), content_type=media_type)

            try:
                text = await self.orchestrator.run(self.providers, payload, operation="transcribe")
            except DomainError:
                raise
            except Exception as e:
                logger.error("transcription_failed", error=str(e), exc_info=True)
                raise DomainError("Failed to transcribe audio")

            text = (text or "").strip()
            self.cache.set(key, text)

            span.set_attribute("app.cached", False)
            logger.info("transcription_success", length=len(text))
            return TranscriptionResult(text=text, cached=False)
