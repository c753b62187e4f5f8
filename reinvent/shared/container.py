# reinvent/shared/container.py
import httpx
from dependency_injector import containers, providers

from reinvent.adapters.cache.memory_cache import ResultCache
from reinvent.adapters.export.image_fetcher import HttpImageFetcher
from reinvent.adapters.export.pptx_renderer import PptxDeckRenderer
from reinvent.adapters.registry import (
    build_image_providers,
    build_moderator,
    build_text_providers,
    build_transcription_providers,
)
from reinvent.core.coercion import ResponseCoercer
from reinvent.core.domain.models import CacheNamespace
from reinvent.core.fallback import FallbackOrchestrator
from reinvent.core.use_cases.deconstruct_invention import DeconstructInvention
from reinvent.core.use_cases.export_deck import ExportDeck
from reinvent.core.use_cases.generate_image import GenerateImage
from reinvent.core.use_cases.input_guard import InputGuard
from reinvent.core.use_cases.simulate_pathways import SimulatePathways
from reinvent.core.use_cases.transcribe_audio import TranscribeAudio
from reinvent.core.use_cases.write_narrative import WriteNarrative
from reinvent.shared.config import Settings
from reinvent.shared.config import settings as default_settings
from reinvent.shared.resilience import SlidingWindowRateLimiter


def _http_client(config: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=config.PROVIDER_TIMEOUT_SEC or None)


def _cache_ttls(config: Settings) -> dict:
    return {
        CacheNamespace.DECOMPOSITION.value: config.CACHE_TTL_DECONSTRUCTION_SEC,
        CacheNamespace.SIMULATION.value: config.CACHE_TTL_SIMULATION_SEC,
        CacheNamespace.IMAGE.value: config.CACHE_TTL_IMAGE_SEC,
        CacheNamespace.TRANSCRIPTION.value: config.CACHE_TTL_TRANSCRIPTION_SEC,
    }


class Container(containers.DeclarativeContainer):
    """
    Dependency Injection Container.

    One container per application instance. Everything stateful (HTTP client,
    result cache, rate limiter, provider chains) is a Singleton scoped to that
    container, so two apps built in the same process never share state.
    """

    # 1. Configuration
    # Wrapped in a provider so tests can override it with their own Settings.
    settings = providers.Object(default_settings)

    # 2. Infrastructure
    http_client = providers.Singleton(_http_client, settings)

    result_cache = providers.Singleton(ResultCache, ttls=providers.Callable(_cache_ttls, settings))
    decomposition_cache = result_cache.provided.namespace.call(CacheNamespace.DECOMPOSITION.value)
    simulation_cache = result_cache.provided.namespace.call(CacheNamespace.SIMULATION.value)
    image_cache = result_cache.provided.namespace.call(CacheNamespace.IMAGE.value)
    transcription_cache = result_cache.provided.namespace.call(CacheNamespace.TRANSCRIPTION.value)

    rate_limiter = providers.Singleton(
        SlidingWindowRateLimiter,
        limits=settings.provided.rate_limits,
        window_seconds=settings.provided.RATE_LIMIT_WINDOW_SEC,
        enabled=settings.provided.RATE_LIMIT_ENABLED,
    )

    # 3. Provider Chains (ordered by priority)
    text_providers = providers.Singleton(build_text_providers, settings, http_client)
    image_providers = providers.Singleton(build_image_providers, settings, http_client)
    transcription_providers = providers.Singleton(build_transcription_providers, settings)
    moderator = providers.Singleton(build_moderator, settings)

    # 4. Core Services
    orchestrator = providers.Singleton(FallbackOrchestrator, timeout=settings.provided.PROVIDER_TIMEOUT_SEC)
    coercer = providers.Singleton(ResponseCoercer)
    input_guard = providers.Singleton(
        InputGuard,
        moderator=moderator,
        fail_open=settings.provided.MODERATION_FAIL_OPEN,
    )
    deck_renderer = providers.Singleton(PptxDeckRenderer)
    image_fetcher = providers.Singleton(HttpImageFetcher, client=http_client)

    # 5. Use Cases
    # Factory: a new instance per request, wired to the Singletons above.

    deconstruct_use_case = providers.Factory(
        DeconstructInvention,
        providers=text_providers,
        orchestrator=orchestrator,
        coercer=coercer,
        cache=decomposition_cache,
        guard=input_guard,
        max_length=settings.provided.MAX_INVENTION_LENGTH,
    )

    simulate_use_case = providers.Factory(
        SimulatePathways,
        providers=text_providers,
        orchestrator=orchestrator,
        coercer=coercer,
        cache=simulation_cache,
        guard=input_guard,
        deconstruct=deconstruct_use_case,
        max_length=settings.provided.MAX_INVENTION_LENGTH,
        max_era_length=settings.provided.MAX_ERA_LENGTH,
        default_era=settings.provided.DEFAULT_ERA,
    )

    generate_image_use_case = providers.Factory(
        GenerateImage,
        providers=image_providers,
        orchestrator=orchestrator,
        cache=image_cache,
        guard=input_guard,
        max_prompt_length=settings.provided.MAX_PROMPT_LENGTH,
        max_era_length=settings.provided.MAX_ERA_LENGTH,
    )

    narrative_use_case = providers.Factory(
        WriteNarrative,
        providers=text_providers,
        orchestrator=orchestrator,
        coercer=coercer,
        guard=input_guard,
        max_era_length=settings.provided.MAX_ERA_LENGTH,
    )

    transcribe_use_case = providers.Factory(
        TranscribeAudio,
        providers=transcription_providers,
        orchestrator=orchestrator,
        cache=transcription_cache,
        max_bytes=settings.provided.MAX_AUDIO_BYTES,
    )

    export_use_case = providers.Factory(
        ExportDeck,
        renderer=deck_renderer,
        fetcher=image_fetcher,
        default_era=settings.provided.DEFAULT_ERA,
    )
