# reinvent/core/use_cases/write_narrative.py
from typing import Any, Sequence

import structlog

from reinvent.core.coercion import ResponseCoercer
from reinvent.core.domain.exceptions import DomainError, ValidationError
from reinvent.core.domain.models import GenerationOptions, NarrativeResult, SchemaKind
from reinvent.core.fallback import FallbackOrchestrator
from reinvent.core.ports.ai_providers import ITextGenerator
from reinvent.core.prompts import build_narrative_prompt
from reinvent.core.use_cases.input_guard import InputGuard
from reinvent.shared.observability import get_tracer

logger = structlog.get_logger()
tracer = get_tracer(__name__)

NARRATIVE_OPTIONS = GenerationOptions(temperature=0.6, max_tokens=800)


class WriteNarrative:
    """Use Case: Writes an alternate-history textbook entry for one pathway. Not cached."""

    def __init__(
        self,
        providers: Sequence[ITextGenerator],
        orchestrator: FallbackOrchestrator,
        coercer: ResponseCoercer,
        guard: InputGuard,
        max_era_length: int = 50,
    ):
        self.providers = providers
        self.orchestrator = orchestrator
        self.coercer = coercer
        self.guard = guard
        self.max_era_length = max_era_length

    async def execute(self, pathway: Any, era) -> NarrativeResult:
        with tracer.start_as_current_span("use_case.narrative") as span:
            if not isinstance(pathway, dict) or not pathway:
                raise ValidationError("'pathwayData' is required and must be an object.", field="pathwayData")
            title = pathway.get("title")
            if not isinstance(title, str) or not title.strip():
                raise ValidationError("'pathwayData.title' is required.", field="pathwayData")
            era_text = self.guard.require_text(era, "era", self.max_era_length)
            title = title.strip()

            span.set_attribute("app.pathway_title", title)
            logger.info("narrative_started", title=title, era=era_text)

            prompt = build_narrative_prompt(pathway, era_text)
            try:
                raw = await self.orchestrator.run(
                    self.providers, prompt.system, prompt.user, NARRATIVE_OPTIONS, operation="narrative"
                )
            except DomainError:
                raise
            except Exception as e:
                logger.error("narrative_failed", title=title, error=str(e), exc_info=True)
                raise DomainError("Failed to generate narrative")

            outcome = self.coercer.parse(raw, SchemaKind.NARRATIVE, {"title": title, "era": era_text})
            span.set_attribute("app.coercion_fallback", outcome.fallback_used)
            logger.info("narrative_success", title=title, length=len(outcome.value))
            return NarrativeResult(narrative=outcome.value, era=era_text, title=title)
