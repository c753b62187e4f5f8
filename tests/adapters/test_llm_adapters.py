# tests/adapters/test_llm_adapters.py
import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from google.api_core import exceptions as google_exceptions

from reinvent.adapters.llm import gemini_adapter
from reinvent.adapters.llm.anthropic_adapter import AnthropicAdapter
from reinvent.adapters.llm.gemini_adapter import GeminiAdapter
from reinvent.adapters.llm.huggingface_adapter import HuggingFaceTextAdapter
from reinvent.adapters.llm.openai_compatible import OpenAICompatibleAdapter
from reinvent.core.domain.exceptions import ConfigurationError, TransportError, UpstreamError
from reinvent.core.domain.models import GenerationOptions

JSON_OPTIONS = GenerationOptions(temperature=0.2, max_tokens=1500, json_output=True)
TEXT_OPTIONS = GenerationOptions(temperature=0.6, max_tokens=800)


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def chat_completion(content):
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "llama-3.1-8b-instant",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
        ],
    }


@pytest.mark.asyncio
class TestOpenAICompatibleAdapter:

    async def test_request_shape_and_answer(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=chat_completion('{"name": "Loom"}'))

        adapter = OpenAICompatibleAdapter(
            "groq",
            "gsk-test",
            "llama-3.1-8b-instant",
            base_url="https://api.groq.test/openai/v1",
            http_client=mock_client(handler),
        )

        answer = await adapter.invoke("system text", "user text", JSON_OPTIONS)

        assert answer == '{"name": "Loom"}'
        assert seen["url"] == "https://api.groq.test/openai/v1/chat/completions"
        assert seen["auth"] == "Bearer gsk-test"
        assert seen["body"]["messages"] == [
            {"role": "system", "content": "system text"},
            {"role": "user", "content": "user text"},
        ]
        assert seen["body"]["max_tokens"] == 1500
        assert seen["body"]["response_format"] == {"type": "json_object"}

    async def test_no_json_mode_for_plain_text(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=chat_completion("Once upon a time."))

        adapter = OpenAICompatibleAdapter("openai", "sk-test", "gpt-4o-mini", http_client=mock_client(handler))
        await adapter.invoke("s", "u", TEXT_OPTIONS)

        assert "response_format" not in bodies[0]

    async def test_http_status_becomes_upstream_error(self):
        adapter = OpenAICompatibleAdapter(
            "together",
            "key",
            "model",
            http_client=mock_client(lambda r: httpx.Response(429, json={"error": {"message": "slow down"}})),
        )

        with pytest.raises(UpstreamError) as excinfo:
            await adapter.invoke("s", "u", TEXT_OPTIONS)

        assert excinfo.value.status_code == 429
        assert excinfo.value.provider == "together"

    async def test_connection_failure_becomes_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        adapter = OpenAICompatibleAdapter("openai", "sk-test", "gpt-4o-mini", http_client=mock_client(handler))

        with pytest.raises(TransportError):
            await adapter.invoke("s", "u", TEXT_OPTIONS)

    async def test_empty_completion(self):
        adapter = OpenAICompatibleAdapter(
            "openai", "sk-test", "gpt-4o-mini", http_client=mock_client(lambda r: httpx.Response(200, json=chat_completion("  ")))
        )
        with pytest.raises(UpstreamError):
            await adapter.invoke("s", "u", TEXT_OPTIONS)

    async def test_missing_key_fails_without_network(self):
        def handler(request):
            raise AssertionError("no request expected")

        adapter = OpenAICompatibleAdapter("groq", None, "model", http_client=mock_client(handler))

        assert adapter.configured is False
        with pytest.raises(ConfigurationError):
            await adapter.invoke("s", "u", TEXT_OPTIONS)


@pytest.mark.asyncio
class TestAnthropicAdapter:

    async def test_joins_text_blocks(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "id": "msg_1",
                    "type": "message",
                    "role": "assistant",
                    "model": "claude-3-5-haiku-latest",
                    "content": [{"type": "text", "text": '{"pathways": '}, {"type": "text", "text": "[]}"}],
                    "stop_reason": "end_turn",
                    "stop_sequence": None,
                    "usage": {"input_tokens": 10, "output_tokens": 5},
                },
            )

        adapter = AnthropicAdapter("sk-ant-test", "claude-3-5-haiku-latest", http_client=mock_client(handler))
        answer = await adapter.invoke("system text", "user text", GenerationOptions(temperature=0.9, max_tokens=2500))

        assert answer == '{"pathways": []}'
        assert seen["path"] == "/v1/messages"
        assert seen["body"]["system"] == "system text"
        assert seen["body"]["max_tokens"] == 2500

    async def test_status_error(self):
        adapter = AnthropicAdapter(
            "sk-ant-test",
            "model",
            http_client=mock_client(
                lambda r: httpx.Response(529, json={"type": "error", "error": {"type": "overloaded_error", "message": "busy"}})
            ),
        )
        with pytest.raises(UpstreamError) as excinfo:
            await adapter.invoke("s", "u", TEXT_OPTIONS)
        assert excinfo.value.status_code == 529

    async def test_missing_key(self):
        with pytest.raises(ConfigurationError):
            await AnthropicAdapter(None, "model").invoke("s", "u", TEXT_OPTIONS)


@pytest.mark.asyncio
class TestGeminiAdapter:

    @pytest.fixture
    def fake_model(self, monkeypatch):
        model = MagicMock()
        monkeypatch.setattr(gemini_adapter.genai, "configure", MagicMock())
        monkeypatch.setattr(gemini_adapter.genai, "GenerativeModel", MagicMock(return_value=model))
        return model

    async def test_missing_key(self):
        adapter = GeminiAdapter(None)
        assert adapter.configured is False
        with pytest.raises(ConfigurationError):
            await adapter.invoke("s", "u", TEXT_OPTIONS)

    async def test_returns_text(self, fake_model):
        fake_model.generate_content_async = AsyncMock(return_value=MagicMock(text='{"name": "Loom"}'))

        answer = await GeminiAdapter("g-key").invoke("s", "u", JSON_OPTIONS)

        assert answer == '{"name": "Loom"}'
        gemini_adapter.genai.GenerativeModel.assert_called_once_with("gemini-1.5-flash", system_instruction="s")

    async def test_unavailable_is_transport_error(self, fake_model):
        fake_model.generate_content_async = AsyncMock(side_effect=google_exceptions.ServiceUnavailable("down"))
        with pytest.raises(TransportError):
            await GeminiAdapter("g-key").invoke("s", "u", TEXT_OPTIONS)

    async def test_rejected_request_is_upstream_error(self, fake_model):
        fake_model.generate_content_async = AsyncMock(side_effect=google_exceptions.InvalidArgument("bad key"))
        with pytest.raises(UpstreamError) as excinfo:
            await GeminiAdapter("g-key").invoke("s", "u", TEXT_OPTIONS)
        assert excinfo.value.status_code == 400


@pytest.mark.asyncio
class TestHuggingFaceTextAdapter:

    async def test_generated_text_list(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=[{"generated_text": "Once upon a time."}])

        adapter = HuggingFaceTextAdapter(mock_client(handler), "hf-key", "org/model", base_url="https://hf.test/models/")
        answer = await adapter.invoke("sys", "usr", GenerationOptions(temperature=0.0, max_tokens=800))

        assert answer == "Once upon a time."
        assert seen["url"] == "https://hf.test/models/org/model"
        assert seen["body"]["inputs"] == "sys\n\nusr"
        assert seen["body"]["parameters"]["temperature"] == 0.01
        assert seen["body"]["parameters"]["max_new_tokens"] == 800

    async def test_model_loading_error(self):
        adapter = HuggingFaceTextAdapter(
            mock_client(lambda r: httpx.Response(503, json={"error": "Model is currently loading"})), "hf-key", "org/model"
        )
        with pytest.raises(UpstreamError) as excinfo:
            await adapter.invoke("s", "u", TEXT_OPTIONS)
        assert excinfo.value.status_code == 503

    async def test_error_payload_with_200(self):
        adapter = HuggingFaceTextAdapter(
            mock_client(lambda r: httpx.Response(200, json={"error": "quota"})), "hf-key", "org/model"
        )
        with pytest.raises(UpstreamError):
            await adapter.invoke("s", "u", TEXT_OPTIONS)

    async def test_network_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        adapter = HuggingFaceTextAdapter(mock_client(handler), "hf-key", "org/model")
        with pytest.raises(TransportError):
            await adapter.invoke("s", "u", TEXT_OPTIONS)
