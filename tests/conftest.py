# tests/conftest.py
import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from reinvent.main import create_app
from reinvent.shared.config import AppEnv, Settings
from reinvent.shared.container import Container
from tests.fakes import ScriptedProvider, image, scripted_text


@pytest.fixture(scope="function")
def test_settings():
    """Settings isolated from the host environment and any .env file."""
    return Settings(
        _env_file=None,
        APP_ENV=AppEnv.TESTING,
        LOG_FORMAT="console",
        OTEL_EXPORTER_OTLP_ENDPOINT=None,
        OPENAI_API_KEY=None,
        GROQ_API_KEY=None,
        TOGETHER_API_KEY=None,
        ANTHROPIC_API_KEY=None,
        GOOGLE_API_KEY=None,
        HUGGING_FACE_API_KEY=None,
        MODERATION_ENABLED=False,
        PROVIDER_TIMEOUT_SEC=5.0,
    )


@pytest.fixture(scope="function")
def text_provider():
    """A text provider that answers every prompt kind with valid content."""
    return ScriptedProvider("fake-text", [scripted_text])


@pytest.fixture(scope="function")
def image_provider():
    return ScriptedProvider("fake-image", [image()])


@pytest.fixture(scope="function")
def transcriber():
    return ScriptedProvider("fake-whisper", ["  hello from the past  "])


@pytest.fixture(scope="function")
def mock_moderator():
    """Returns a mock external moderator that never flags anything."""
    moderator = MagicMock()
    moderator.name = "fake-moderation"
    moderator.configured = True
    moderator.is_flagged = AsyncMock(return_value=False)
    return moderator


@pytest.fixture(scope="function")
def container(test_settings, text_provider, image_provider, transcriber):
    """
    Sets up the Dependency Injection Container for testing.
    Real provider chains are replaced with scripted doubles.
    """
    container = Container()
    container.settings.override(providers.Object(test_settings))
    container.text_providers.override(providers.Object([text_provider]))
    container.image_providers.override(providers.Object([image_provider]))
    container.transcription_providers.override(providers.Object([transcriber]))
    container.moderator.override(providers.Object(None))

    yield container

    container.unwire()
    container.reset_override()


@pytest.fixture
def client(container):
    """Returns a FastAPI TestClient bound to the overridden container."""
    app = create_app(container)
    with TestClient(app) as c:
        yield c
