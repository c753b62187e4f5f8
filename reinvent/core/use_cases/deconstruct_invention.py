# reinvent/core/use_cases/deconstruct_invention.py
from typing import Sequence

import structlog

from reinvent.core.cache_keys import deconstruction_key
from reinvent.core.coercion import ResponseCoercer
from reinvent.core.domain.exceptions import DomainError
from reinvent.core.domain.models import (
    DeconstructionResult,
    Decomposition,
    GenerationOptions,
    SchemaKind,
)
from reinvent.core.fallback import FallbackOrchestrator
from reinvent.core.ports.ai_providers import ITextGenerator
from reinvent.core.ports.cache import ICacheNamespace
from reinvent.core.prompts import build_deconstruction_prompt
from reinvent.core.use_cases.input_guard import InputGuard
from reinvent.shared.observability import get_tracer

logger = structlog.get_logger()
tracer = get_tracer(__name__)

DECONSTRUCT_OPTIONS = GenerationOptions(temperature=0.2, max_tokens=1500, json_output=True)


class DeconstructInvention:
    """
    Use Case: Breaks an invention down into functions, materials, sciences,
    subsystems and cultural drivers.

    Responsibilities:
    1. Validates and moderates the invention name.
    2. Serves repeated requests from the decomposition cache.
    3. Runs the text providers in priority order and coerces the answer.
    4. Caches parsed results (synthetic fallbacks are not cached).
    """

    def __init__(
        self,
        providers: Sequence[ITextGenerator],
        orchestrator: FallbackOrchestrator,
        coercer: ResponseCoercer,
        cache: ICacheNamespace,
        guard: InputGuard,
        max_length: int = 100,
    ):
        self.providers = providers
        self.orchestrator = orchestrator
        self.coercer = coercer
        self.cache = cache
        self.guard = guard
        self.max_length = max_length

    async def execute(self, invention) -> DeconstructionResult:
        with tracer.start_as_current_span("use_case.deconstruct") as span:
            name = self.guard.require_text(invention, "invention", self.max_length)
            await self.guard.moderate(name)
            span.set_attribute("app.invention", name)

            decomposition, cached = await self.resolve(name)
            span.set_attribute("app.cached", cached)
            return DeconstructionResult(decomposition=decomposition, cached=cached)

    async def resolve(self, invention: str):
        """
        Cache-then-generate lookup for an already validated invention name.
        Returns (decomposition, cached).
        """
        key = deconstruction_key(invention)
        hit = self.cache.get(key)
        if hit is not None:
            logger.info("cache_hit", operation="deconstruct", invention=invention)
            return hit, True

        logger.info("cache_miss", operation="deconstruct", invention=invention)
        prompt = build_deconstruction_prompt(invention)

        try:
            raw = await self.orchestrator.run(
                self.providers,
                prompt.system,
                prompt.user,
                DECONSTRUCT_OPTIONS,
                operation="deconstruct",
            )
            outcome = self.coercer.parse(raw, SchemaKind.DECOMPOSITION, {"name": invention})
        except DomainError:
            raise
        except Exception as e:
            logger.error("deconstruct_failed", invention=invention, error=str(e), exc_info=True)
            raise DomainError("Failed to deconstruct invention")

        decomposition: Decomposition = outcome.value
        if not outcome.fallback_used:
            self.cache.set(key, decomposition)

        logger.info("deconstruct_success", invention=invention, fallback=outcome.fallback_used)
        return decomposition, False
