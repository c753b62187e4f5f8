# tests/adapters/test_api_endpoints.py
from unittest.mock import AsyncMock, MagicMock

from dependency_injector import providers
from fastapi.testclient import TestClient

from reinvent.main import create_app
from tests.fakes import DECOMPOSITION, SIMULATION, failing


class TestDeconstruct:

    def test_success_then_cached(self, client, text_provider):
        first = client.post("/api/deconstruct", json={"invention": "Smartphone"})
        second = client.post("/api/deconstruct", json={"invention": "Smartphone"})

        assert first.status_code == 200
        assert first.json()["cached"] is False
        assert first.json()["decomposition"]["name"] == "Smartphone"
        assert second.json()["cached"] is True
        assert second.json()["decomposition"] == first.json()["decomposition"]
        assert len(text_provider.calls) == 1

    def test_missing_invention(self, client, text_provider):
        response = client.post("/api/deconstruct", json={})

        assert response.status_code == 400
        assert set(response.json()) <= {"error", "details"}
        assert text_provider.calls == []

    def test_too_long_invention(self, client):
        response = client.post("/api/deconstruct", json={"invention": "x" * 101})
        assert response.status_code == 400

    def test_malformed_body(self, client):
        response = client.post(
            "/api/deconstruct", content="{not json", headers={"content-type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body"

    def test_moderation_rejection(self, client):
        response = client.post("/api/deconstruct", json={"invention": "Explosive crossbow"})

        assert response.status_code == 400
        assert response.json() == {"error": "Content contains inappropriate material"}

    def test_fail_closed_moderation_outage(self, client, container):
        moderator = failing("openai", kind="transport")
        moderator.is_flagged = moderator.invoke
        container.moderator.override(providers.Object(moderator))
        container.settings.override(
            providers.Object(container.settings().model_copy(update={"MODERATION_FAIL_OPEN": False}))
        )

        response = client.post("/api/deconstruct", json={"invention": "Loom"})

        assert response.status_code == 503
        assert response.json()["error"] == "Content moderation is unavailable"


class TestSimulate:

    def test_smartphone_in_the_1800s(self, client):
        response = client.post("/api/simulate", json={"invention": "Smartphone", "era": "1800s"})

        assert response.status_code == 200
        body = response.json()
        assert body["cached"] is False
        pathways = body["simulations"]["pathways"]
        assert len(pathways) >= 1
        for pathway in pathways:
            assert pathway["title"]
            assert 0 <= pathway["feasibility_score"] <= 10
            assert pathway["technical_steps"] and all(isinstance(s, str) for s in pathway["technical_steps"])

    def test_all_providers_failed(self, client, container):
        container.text_providers.override(
            providers.Object([failing("groq", kind="config"), failing("openai", kind="upstream")])
        )

        response = client.post("/api/simulate", json={"invention": "Radio", "decomposition": DECOMPOSITION})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to generate simulations",
            "details": "UpstreamError from openai (HTTP 500)",
        }

    def test_rate_limit(self, client):
        body = {"invention": "Radio", "decomposition": DECOMPOSITION}
        statuses = [client.post("/api/simulate", json=body).status_code for _ in range(6)]

        assert statuses == [200] * 5 + [429]

        limited = client.post("/api/simulate", json=body)
        assert limited.json()["error"] == "Rate limit exceeded. Please try again later."
        assert limited.json()["retryAfter"] == 300
        assert limited.headers["retry-after"] == "300"

    def test_rate_limit_is_per_client(self, client):
        body = {"invention": "Radio", "decomposition": DECOMPOSITION}
        for _ in range(5):
            client.post("/api/simulate", json=body, headers={"x-forwarded-for": "10.0.0.1"})

        other = client.post("/api/simulate", json=body, headers={"x-forwarded-for": "10.0.0.2, 172.16.0.1"})
        assert other.status_code == 200

    def test_non_numeric_creativity(self, client):
        response = client.post("/api/simulate", json={"invention": "Radio", "creativity": "high"})
        assert response.status_code == 400


class TestImageAndNarrative:

    def test_generate_image(self, client, image_provider):
        response = client.post(
            "/api/generate-image",
            json={"prompt": "pocket telegraph", "pathwayData": SIMULATION["pathways"][0], "era": "1800s"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["cached"] is False
        assert body["images"][0]["provider"] == "fake-image"
        assert "The Brass Pocket Telegraph" in body["prompt"]

    def test_generate_image_invalid_size(self, client):
        response = client.post("/api/generate-image", json={"prompt": "loom", "size": "10x10"})
        assert response.status_code == 400

    def test_narrative(self, client):
        response = client.post(
            "/api/narrative", json={"pathwayData": SIMULATION["pathways"][0], "era": "1850s"}
        )

        assert response.status_code == 200
        assert response.json()["title"] == "The Brass Pocket Telegraph"
        assert response.json()["era"] == "1850s"
        assert response.json()["narrative"]

    def test_narrative_requires_pathway(self, client):
        assert client.post("/api/narrative", json={"era": "1850s"}).status_code == 400


class TestTranscribe:

    def test_upload(self, client):
        response = client.post("/api/transcribe", files={"audio": ("clip.wav", b"RIFF0000WAVE", "audio/wav")})

        assert response.status_code == 200
        assert response.json() == {"text": "hello from the past", "cached": False}

    def test_missing_file(self, client):
        response = client.post("/api/transcribe", files={"other": ("clip.wav", b"RIFF", "audio/wav")})
        assert response.status_code == 400

    def test_wrong_media_type(self, client):
        response = client.post("/api/transcribe", files={"audio": ("notes.txt", b"hello", "text/plain")})

        assert response.status_code == 400
        assert response.json()["error"] == "Only audio files are allowed."


class TestExport:

    def test_pptx_download(self, client):
        response = client.post(
            "/api/export",
            json={
                "title": "Pocket Telegraphs",
                "invention": "Smartphone",
                "era": "1800s",
                "decomposition": DECOMPOSITION,
                "simulations": SIMULATION,
                "narratives": {"pathway_1": "It began in Manchester."},
            },
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.presentationml.presentation"
        )
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="reverse_invention_Smartphone_1800s_')
        assert disposition.endswith('.pptx"')
        assert response.content[:2] == b"PK"

    def test_title_required(self, client):
        response = client.post("/api/export", json={"invention": "Smartphone"})

        assert response.status_code == 400
        assert response.json() == {"error": "Title and invention are required"}


class TestSystemEndpoints:

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["timestamp"]
        assert body["providers"]["text"] == [{"name": "fake-text", "configured": True}]

    def test_cache_stats_and_clear(self, client):
        client.post("/api/deconstruct", json={"invention": "Loom"})

        stats = client.get("/api/cache-stats").json()
        assert stats["decomposition"]["count"] == 1
        assert stats["simulation"]["count"] == 0

        assert client.delete("/api/cache").json() == {"status": "cleared"}
        assert client.get("/api/cache-stats").json()["decomposition"]["count"] == 0

    def test_preflight(self, client):
        response = client.options(
            "/api/simulate",
            headers={"Origin": "https://app.test", "Access-Control-Request-Method": "POST"},
        )

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert "content-type" in response.headers["access-control-allow-headers"]

    def test_cors_header_on_every_response(self, client):
        assert client.get("/api/health").headers["access-control-allow-origin"] == "*"
        error = client.post("/api/deconstruct", json={})
        assert error.headers["access-control-allow-origin"] == "*"

    def test_unknown_route_uses_error_envelope(self, client):
        response = client.get("/api/nope")

        assert response.status_code == 404
        assert "error" in response.json()

    def test_unhandled_error_keeps_cors_header(self, container):
        use_case = MagicMock()
        use_case.execute = AsyncMock(side_effect=RuntimeError("boom"))
        container.deconstruct_use_case.override(providers.Object(use_case))

        with TestClient(create_app(container), raise_server_exceptions=False) as client:
            response = client.post("/api/deconstruct", json={"invention": "Loom"})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal Server Error"}
        assert response.headers["access-control-allow-origin"] == "*"
