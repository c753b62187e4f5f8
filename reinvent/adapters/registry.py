# reinvent/adapters/registry.py
"""
Builds the ordered provider lists from settings.

The order in the *_PROVIDERS settings is the fallback priority. Unknown names
are logged and skipped. Providers without a credential stay in the list: they
fail fast with ConfigurationError and the orchestrator moves on.
"""

from typing import Callable, Dict, List, Optional

import httpx
import structlog

from reinvent.adapters.audio.whisper_adapter import WhisperAdapter
from reinvent.adapters.images.huggingface_images import HuggingFaceImageAdapter
from reinvent.adapters.images.openai_images import OpenAIImageAdapter
from reinvent.adapters.images.pollinations import PollinationsImageAdapter
from reinvent.adapters.llm.anthropic_adapter import AnthropicAdapter
from reinvent.adapters.llm.gemini_adapter import GeminiAdapter
from reinvent.adapters.llm.huggingface_adapter import HuggingFaceTextAdapter
from reinvent.adapters.llm.openai_compatible import OpenAICompatibleAdapter
from reinvent.adapters.moderation.openai_moderation import OpenAIModerationAdapter
from reinvent.shared.config import Settings

logger = structlog.get_logger()


def _timeout(config: Settings) -> float:
    return config.PROVIDER_TIMEOUT_SEC or 60.0


def _build(kind: str, order: List[str], factories: Dict[str, Callable[[], object]]) -> List[object]:
    providers = []
    for name in order:
        factory = factories.get(name)
        if factory is None:
            logger.warning("unknown_provider_skipped", kind=kind, provider=name, known=sorted(factories))
            continue
        providers.append(factory())

    logger.info(
        "provider_chain_built",
        kind=kind,
        order=[p.name for p in providers],
        configured=[p.name for p in providers if p.configured],
    )
    return providers


def build_text_providers(config: Settings, http_client: httpx.AsyncClient) -> List[object]:
    timeout = _timeout(config)
    factories = {
        "openai": lambda: OpenAICompatibleAdapter(
            "openai", config.OPENAI_API_KEY, config.OPENAI_CHAT_MODEL, timeout=timeout
        ),
        "groq": lambda: OpenAICompatibleAdapter(
            "groq", config.GROQ_API_KEY, config.GROQ_CHAT_MODEL, base_url=config.GROQ_BASE_URL, timeout=timeout
        ),
        "together": lambda: OpenAICompatibleAdapter(
            "together",
            config.TOGETHER_API_KEY,
            config.TOGETHER_CHAT_MODEL,
            base_url=config.TOGETHER_BASE_URL,
            timeout=timeout,
        ),
        "anthropic": lambda: AnthropicAdapter(config.ANTHROPIC_API_KEY, config.ANTHROPIC_CHAT_MODEL, timeout=timeout),
        "gemini": lambda: GeminiAdapter(config.GOOGLE_API_KEY, config.GEMINI_CHAT_MODEL),
        "huggingface": lambda: HuggingFaceTextAdapter(
            http_client,
            config.HUGGING_FACE_API_KEY,
            config.HUGGING_FACE_CHAT_MODEL,
            base_url=config.HUGGING_FACE_BASE_URL,
        ),
    }
    return _build("text", config.text_provider_order, factories)


def build_image_providers(config: Settings, http_client: httpx.AsyncClient) -> List[object]:
    factories = {
        "openai": lambda: OpenAIImageAdapter(config.OPENAI_API_KEY, config.OPENAI_IMAGE_MODEL, timeout=_timeout(config)),
        "huggingface": lambda: HuggingFaceImageAdapter(
            http_client,
            config.HUGGING_FACE_API_KEY,
            config.HUGGING_FACE_IMAGE_MODEL,
            base_url=config.HUGGING_FACE_BASE_URL,
        ),
        "pollinations": lambda: PollinationsImageAdapter(http_client, base_url=config.POLLINATIONS_BASE_URL),
    }
    return _build("image", config.image_provider_order, factories)


def build_transcription_providers(config: Settings) -> List[object]:
    timeout = _timeout(config)
    factories = {
        "openai": lambda: WhisperAdapter(
            "openai", config.OPENAI_API_KEY, config.OPENAI_TRANSCRIPTION_MODEL, timeout=timeout
        ),
        "groq": lambda: WhisperAdapter(
            "groq",
            config.GROQ_API_KEY,
            config.GROQ_TRANSCRIPTION_MODEL,
            base_url=config.GROQ_BASE_URL,
            timeout=timeout,
        ),
    }
    return _build("transcription", config.transcription_provider_order, factories)


def build_moderator(config: Settings) -> Optional[OpenAIModerationAdapter]:
    if not config.MODERATION_ENABLED:
        logger.info("external_moderation_disabled")
        return None
    return OpenAIModerationAdapter(config.OPENAI_API_KEY)
