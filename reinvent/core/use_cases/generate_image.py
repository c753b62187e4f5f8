# reinvent/core/use_cases/generate_image.py
from typing import Any, Mapping, Optional, Sequence

import structlog

from reinvent.core.cache_keys import image_key
from reinvent.core.domain.exceptions import DomainError, ValidationError
from reinvent.core.domain.models import ImageGenerationResult, ImageOptions
from reinvent.core.fallback import FallbackOrchestrator
from reinvent.core.ports.ai_providers import IImageGenerator
from reinvent.core.ports.cache import ICacheNamespace
from reinvent.core.prompts import build_visual_prompt
from reinvent.core.use_cases.input_guard import InputGuard
from reinvent.shared.observability import get_tracer

logger = structlog.get_logger()
tracer = get_tracer(__name__)

ALLOWED_SIZES = ("256x256", "512x512", "1024x1024", "1792x1024", "1024x1792")
DEFAULT_SIZE = "1024x1024"
DEFAULT_STYLE = "technical"


class GenerateImage:
    """
    Use Case: Produces one illustration for a prompt, optionally enriched with
    a pathway and an era. Returns the enhanced prompt alongside the image.
    """

    def __init__(
        self,
        providers: Sequence[IImageGenerator],
        orchestrator: FallbackOrchestrator,
        cache: ICacheNamespace,
        guard: InputGuard,
        max_prompt_length: int = 1000,
        max_era_length: int = 50,
    ):
        self.providers = providers
        self.orchestrator = orchestrator
        self.cache = cache
        self.guard = guard
        self.max_prompt_length = max_prompt_length
        self.max_era_length = max_era_length

    async def execute(
        self,
        prompt,
        style=None,
        size=None,
        pathway: Optional[Mapping[str, Any]] = None,
        era=None,
    ) -> ImageGenerationResult:
        with tracer.start_as_current_span("use_case.generate_image") as span:
            text = self.guard.require_text(prompt, "prompt", self.max_prompt_length)
            style_value = self.guard.optional_text(style, "style", 50, DEFAULT_STYLE)
            size_value = size or DEFAULT_SIZE
            if size_value not in ALLOWED_SIZES:
                raise ValidationError(
                    f"'size' must be one of: {', '.join(ALLOWED_SIZES)}.", field="size"
                )
            if pathway is not None and not isinstance(pathway, Mapping):
                raise ValidationError("'pathwayData' must be an object.", field="pathwayData")
            era_text = self.guard.optional_text(era, "era", self.max_era_length, "") or None

            title = str(pathway.get("title") or "") if pathway else None
            key = image_key(text, style_value, size_value, era_text, title)
            hit = self.cache.get(key)
            if hit is not None:
                logger.info("cache_hit", operation="generate_image")
                span.set_attribute("app.cached", True)
                return ImageGenerationResult(images=hit["images"], prompt=hit["prompt"], cached=True)

            enhanced = build_visual_prompt(text, style_value, pathway=pathway, era=era_text)
            logger.info("image_generation_started", size=size_value, style=style_value, era=era_text)

            try:
                image = await self.orchestrator.run(
                    self.providers,
                    enhanced,
                    ImageOptions(size=size_value, style=style_value),
                    operation="generate_image",
                )
            except DomainError:
                raise
            except Exception as e:
                logger.error("image_generation_failed", error=str(e), exc_info=True)
                raise DomainError("Failed to generate image")

            images = [image]
            self.cache.set(key, {"images": images, "prompt": enhanced})

            span.set_attribute("app.cached", False)
            span.set_attribute("app.provider", image.provider)
            logger.info("image_generation_success", provider=image.provider)
            return ImageGenerationResult(images=images, prompt=enhanced, cached=False)
