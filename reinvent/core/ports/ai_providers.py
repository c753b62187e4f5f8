# reinvent/core/ports/ai_providers.py
from typing import Protocol, runtime_checkable

from reinvent.core.domain.models import AudioPayload, GeneratedImage, GenerationOptions, ImageOptions


@runtime_checkable
class ITextGenerator(Protocol):
    """
    Port for chat-completion backends.
    Implementations:
    - OpenAICompatibleAdapter (OpenAI, Groq, Together)
    - AnthropicAdapter
    - GeminiAdapter
    - HuggingFaceTextAdapter
    """

    name: str

    @property
    def configured(self) -> bool:
        """True when the adapter's credential is present."""
        ...

    async def invoke(self, system: str, user: str, options: GenerationOptions) -> str:
        """
        Sends one system + user instruction pair and returns the raw completion text.

        Raises:
            ConfigurationError: The credential is absent (no network call is made).
            UpstreamError: The backend answered but rejected the call or returned no text.
            TransportError: Timeout, DNS or connection failure.
        """
        ...


@runtime_checkable
class IImageGenerator(Protocol):
    """Port for image backends (OpenAI Images, Hugging Face, Pollinations)."""

    name: str

    @property
    def configured(self) -> bool:
        ...

    async def invoke(self, prompt: str, options: ImageOptions) -> GeneratedImage:
        """Returns one image as an http(s) URL or a data: URI."""
        ...


@runtime_checkable
class ITranscriber(Protocol):
    """Port for speech-to-text backends."""

    name: str

    @property
    def configured(self) -> bool:
        ...

    async def invoke(self, audio: AudioPayload) -> str:
        ...


@runtime_checkable
class IModerator(Protocol):
    """Port for an external content moderation service."""

    name: str

    @property
    def configured(self) -> bool:
        ...

    async def is_flagged(self, text: str) -> bool:
        """Raises ProviderError when the service cannot give an answer."""
        ...
