# tests/adapters/test_registry.py
import httpx
import pytest

from reinvent.adapters.images.pollinations import PollinationsImageAdapter
from reinvent.adapters.llm.anthropic_adapter import AnthropicAdapter
from reinvent.adapters.llm.openai_compatible import OpenAICompatibleAdapter
from reinvent.adapters.moderation.openai_moderation import OpenAIModerationAdapter
from reinvent.adapters.registry import (
    build_image_providers,
    build_moderator,
    build_text_providers,
    build_transcription_providers,
)
from reinvent.core.ports.ai_providers import IImageGenerator, ITextGenerator, ITranscriber
from reinvent.shared.config import Settings


@pytest.fixture
def http_client():
    return httpx.AsyncClient()


def make(**overrides):
    values = dict(
        OPENAI_API_KEY=None,
        GROQ_API_KEY=None,
        TOGETHER_API_KEY=None,
        ANTHROPIC_API_KEY=None,
        GOOGLE_API_KEY=None,
        HUGGING_FACE_API_KEY=None,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_text_chain_follows_configured_order(http_client):
    chain = build_text_providers(make(TEXT_PROVIDERS="anthropic,groq", GROQ_API_KEY="gsk"), http_client)

    assert [p.name for p in chain] == ["anthropic", "groq"]
    assert isinstance(chain[0], AnthropicAdapter)
    assert isinstance(chain[1], OpenAICompatibleAdapter)
    assert [p.configured for p in chain] == [False, True]
    assert all(isinstance(p, ITextGenerator) for p in chain)


def test_default_text_chain_includes_every_backend(http_client):
    chain = build_text_providers(make(), http_client)
    assert [p.name for p in chain] == ["groq", "together", "openai", "anthropic", "gemini", "huggingface"]


def test_unknown_names_are_skipped(http_client):
    chain = build_text_providers(make(TEXT_PROVIDERS="groq,skynet"), http_client)
    assert [p.name for p in chain] == ["groq"]


def test_image_chain_ends_with_keyless_backend(http_client):
    chain = build_image_providers(make(), http_client)

    assert [p.name for p in chain] == ["openai", "huggingface", "pollinations"]
    assert isinstance(chain[-1], PollinationsImageAdapter)
    assert [p.configured for p in chain] == [False, False, True]
    assert all(isinstance(p, IImageGenerator) for p in chain)


def test_transcription_chain():
    chain = build_transcription_providers(make(OPENAI_API_KEY="sk"))

    assert [p.name for p in chain] == ["openai", "groq"]
    assert chain[1].base_url == Settings.model_fields["GROQ_BASE_URL"].default
    assert all(isinstance(p, ITranscriber) for p in chain)


def test_moderator_toggle():
    assert build_moderator(make(MODERATION_ENABLED=False)) is None
    assert isinstance(build_moderator(make(MODERATION_ENABLED=True, OPENAI_API_KEY="sk")), OpenAIModerationAdapter)
