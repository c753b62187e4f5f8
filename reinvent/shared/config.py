# reinvent/shared/config.py
from enum import Enum
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppEnv(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


def _split_names(raw: str) -> List[str]:
    return [part.strip().lower() for part in raw.split(",") if part.strip()]


class Settings(BaseSettings):
    """
    Central Configuration Registry.
    Strictly typed and validated via Pydantic. Every credential is optional:
    a missing key disables that provider at call time, never at startup.
    """

    # --- Application Meta ---
    APP_NAME: str = "reverse-invention-generator"
    APP_VERSION: str = "1.0.0"
    APP_ENV: AppEnv = AppEnv.DEVELOPMENT
    DEBUG: bool = False
    API_PREFIX: str = "/api"

    # --- Logging & Observability ---
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    OTEL_SERVICE_NAME: str = "reinvent-backend"
    OTEL_EXPORTER_OTLP_ENDPOINT: Optional[str] = None

    # --- Provider Credentials ---
    OPENAI_API_KEY: Optional[str] = None
    GROQ_API_KEY: Optional[str] = None
    TOGETHER_API_KEY: Optional[str] = None
    ANTHROPIC_API_KEY: Optional[str] = None
    GOOGLE_API_KEY: Optional[str] = None
    HUGGING_FACE_API_KEY: Optional[str] = None

    # --- Provider Endpoints & Models ---
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"
    TOGETHER_BASE_URL: str = "https://api.together.xyz/v1"
    HUGGING_FACE_BASE_URL: str = "https://api-inference.huggingface.co/models"
    POLLINATIONS_BASE_URL: str = "https://image.pollinations.ai/prompt"

    OPENAI_CHAT_MODEL: str = "gpt-4o-mini"
    GROQ_CHAT_MODEL: str = "llama-3.1-8b-instant"
    TOGETHER_CHAT_MODEL: str = "meta-llama/Llama-3-8b-chat-hf"
    ANTHROPIC_CHAT_MODEL: str = "claude-3-5-haiku-latest"
    GEMINI_CHAT_MODEL: str = "gemini-1.5-flash"
    HUGGING_FACE_CHAT_MODEL: str = "mistralai/Mistral-7B-Instruct-v0.3"

    OPENAI_IMAGE_MODEL: str = "dall-e-3"
    HUGGING_FACE_IMAGE_MODEL: str = "black-forest-labs/FLUX.1-schnell"

    OPENAI_TRANSCRIPTION_MODEL: str = "whisper-1"
    GROQ_TRANSCRIPTION_MODEL: str = "whisper-large-v3"

    # --- Fallback Order (comma-separated, highest priority first) ---
    TEXT_PROVIDERS: str = "groq,together,openai,anthropic,gemini,huggingface"
    IMAGE_PROVIDERS: str = "openai,huggingface,pollinations"
    TRANSCRIPTION_PROVIDERS: str = "openai,groq"

    # 0 disables the per-attempt timeout (transport defaults still apply)
    PROVIDER_TIMEOUT_SEC: float = 60.0

    # --- Cache TTLs ---
    CACHE_TTL_DECONSTRUCTION_SEC: int = 3600
    CACHE_TTL_SIMULATION_SEC: int = 1800
    CACHE_TTL_IMAGE_SEC: int = 7200
    CACHE_TTL_TRANSCRIPTION_SEC: int = 600

    # --- Input Bounds ---
    MAX_INVENTION_LENGTH: int = 100
    MAX_ERA_LENGTH: int = 50
    MAX_PROMPT_LENGTH: int = 1000
    MAX_AUDIO_BYTES: int = 25 * 1024 * 1024
    DEFAULT_ERA: str = "1800s"

    # --- Moderation ---
    MODERATION_ENABLED: bool = True
    MODERATION_FAIL_OPEN: bool = True

    # --- Rate Limiting ---
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_WINDOW_SEC: int = 300
    RATE_LIMIT_DECONSTRUCT: int = 10
    RATE_LIMIT_SIMULATE: int = 5
    RATE_LIMIT_IMAGE: int = 3

    # --- Derived Values ---

    @property
    def text_provider_order(self) -> List[str]:
        return _split_names(self.TEXT_PROVIDERS)

    @property
    def image_provider_order(self) -> List[str]:
        return _split_names(self.IMAGE_PROVIDERS)

    @property
    def transcription_provider_order(self) -> List[str]:
        return _split_names(self.TRANSCRIPTION_PROVIDERS)

    @property
    def rate_limits(self) -> dict:
        """Bucket name -> max requests per window."""
        return {
            "deconstruct": self.RATE_LIMIT_DECONSTRUCT,
            "simulate": self.RATE_LIMIT_SIMULATE,
            "image": self.RATE_LIMIT_IMAGE,
        }

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
