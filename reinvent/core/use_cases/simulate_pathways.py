# reinvent/core/use_cases/simulate_pathways.py
from typing import Any, Mapping, Optional, Sequence

import structlog

from reinvent.core.cache_keys import simulation_key
from reinvent.core.coercion import ResponseCoercer
from reinvent.core.domain.exceptions import DomainError, ValidationError
from reinvent.core.domain.models import GenerationOptions, SchemaKind, SimulationOutcome
from reinvent.core.fallback import FallbackOrchestrator
from reinvent.core.ports.ai_providers import ITextGenerator
from reinvent.core.ports.cache import ICacheNamespace
from reinvent.core.prompts import build_simulation_prompt
from reinvent.core.use_cases.deconstruct_invention import DeconstructInvention
from reinvent.core.use_cases.input_guard import InputGuard
from reinvent.shared.observability import get_tracer

logger = structlog.get_logger()
tracer = get_tracer(__name__)

DEFAULT_CREATIVITY = 0.7
DEFAULT_DEPTH = 3


def _clamp_number(value: Any, field: str, default: float, low: float, high: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValidationError(f"'{field}' must be a number.", field=field)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"'{field}' must be a number.", field=field)
    return min(high, max(low, number))


class SimulatePathways:
    """
    Use Case: Imagines alternate pathways by which an invention could have
    appeared in a given era.

    The decomposition feeding the prompt comes from the request when supplied,
    otherwise from the decomposition cache, otherwise it is generated on demand
    through DeconstructInvention (which also fills that cache).
    """

    def __init__(
        self,
        providers: Sequence[ITextGenerator],
        orchestrator: FallbackOrchestrator,
        coercer: ResponseCoercer,
        cache: ICacheNamespace,
        guard: InputGuard,
        deconstruct: DeconstructInvention,
        max_length: int = 100,
        max_era_length: int = 50,
        default_era: str = "1800s",
    ):
        self.providers = providers
        self.orchestrator = orchestrator
        self.coercer = coercer
        self.cache = cache
        self.guard = guard
        self.deconstruct = deconstruct
        self.max_length = max_length
        self.max_era_length = max_era_length
        self.default_era = default_era

    async def execute(
        self,
        invention,
        era=None,
        creativity=None,
        depth=None,
        decomposition: Optional[Mapping[str, Any]] = None,
    ) -> SimulationOutcome:
        with tracer.start_as_current_span("use_case.simulate") as span:
            name = self.guard.require_text(invention, "invention", self.max_length)
            era_text = self.guard.optional_text(era, "era", self.max_era_length, self.default_era)
            creativity_value = _clamp_number(creativity, "creativity", DEFAULT_CREATIVITY, 0.0, 1.0)
            depth_value = int(round(_clamp_number(depth, "depth", DEFAULT_DEPTH, 1, 5)))
            if decomposition is not None and not isinstance(decomposition, Mapping):
                raise ValidationError("'decomposition' must be an object.", field="decomposition")

            await self.guard.moderate(name)

            span.set_attribute("app.invention", name)
            span.set_attribute("app.era", era_text)

            key = simulation_key(name, era_text, creativity_value, depth_value)
            hit = self.cache.get(key)
            if hit is not None:
                logger.info("cache_hit", operation="simulate", invention=name, era=era_text)
                span.set_attribute("app.cached", True)
                return SimulationOutcome(simulations=hit, cached=True)

            logger.info(
                "simulation_started",
                invention=name,
                era=era_text,
                creativity=creativity_value,
                depth=depth_value,
            )

            try:
                source = await self._decomposition_for(name, decomposition)
                prompt = build_simulation_prompt(name, era_text, source, creativity_value, depth_value)
                options = GenerationOptions(
                    temperature=0.7 + 0.2 * creativity_value,
                    max_tokens=2500,
                    json_output=True,
                )
                raw = await self.orchestrator.run(
                    self.providers, prompt.system, prompt.user, options, operation="simulate"
                )
                outcome = self.coercer.parse(raw, SchemaKind.SIMULATION, {"invention": name, "era": era_text})
            except DomainError:
                raise
            except Exception as e:
                logger.error("simulation_failed", invention=name, error=str(e), exc_info=True)
                raise DomainError("Failed to generate simulations")

            if not outcome.fallback_used:
                self.cache.set(key, outcome.value)

            span.set_attribute("app.cached", False)
            span.set_attribute("app.coercion_fallback", outcome.fallback_used)
            logger.info(
                "simulation_success",
                invention=name,
                pathways=len(outcome.value.pathways),
                fallback=outcome.fallback_used,
            )
            return SimulationOutcome(simulations=outcome.value, cached=False)

    async def _decomposition_for(self, invention: str, supplied: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
        if supplied:
            return dict(supplied)
        decomposition, _ = await self.deconstruct.resolve(invention)
        return decomposition.model_dump()
