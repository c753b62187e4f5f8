# tests/shared/test_config.py
from reinvent.shared.config import Settings


def make(**overrides):
    return Settings(_env_file=None, **overrides)


def test_provider_orders_are_normalised():
    config = make(TEXT_PROVIDERS=" Groq, OPENAI ,,gemini ", IMAGE_PROVIDERS="pollinations")

    assert config.text_provider_order == ["groq", "openai", "gemini"]
    assert config.image_provider_order == ["pollinations"]


def test_default_orders():
    config = make()

    assert config.text_provider_order[:3] == ["groq", "together", "openai"]
    assert config.image_provider_order[-1] == "pollinations"
    assert config.transcription_provider_order == ["openai", "groq"]


def test_rate_limits_by_bucket():
    config = make(RATE_LIMIT_SIMULATE=2)

    assert config.rate_limits == {"deconstruct": 10, "simulate": 2, "image": 3}


def test_values_come_from_environment(monkeypatch):
    monkeypatch.setenv("MAX_INVENTION_LENGTH", "40")
    monkeypatch.setenv("GROQ_API_KEY", "gsk-test")

    config = make()

    assert config.MAX_INVENTION_LENGTH == 40
    assert config.GROQ_API_KEY == "gsk-test"
