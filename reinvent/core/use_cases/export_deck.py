# reinvent/core/use_cases/export_deck.py
import re
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

import structlog

from reinvent.core.domain.exceptions import DomainError, ValidationError
from reinvent.core.domain.models import DeckSection, ExportedDeck
from reinvent.core.ports.exporter import IDeckRenderer, IImageFetcher
from reinvent.shared.observability import get_tracer

logger = structlog.get_logger()
tracer = get_tracer(__name__)

_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def _join(values: Any, sep: str = ", ") -> str:
    if isinstance(values, str):
        return values or "N/A"
    if not values:
        return "N/A"
    return sep.join(str(v) for v in values)


def _as_list(value: Any) -> List[Any]:
    """A lone string or object becomes a one-item list; other non-lists become empty."""
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, (str, Mapping)):
        return [value] if value else []
    return []


def format_decomposition(decomposition: Mapping[str, Any]) -> str:
    content = f"Core Functions:\n{_join(decomposition.get('core_functions'))}\n\n"
    content += f"Key Materials:\n{_join(decomposition.get('materials'))}\n\n"
    content += f"Enabling Sciences:\n{_join(decomposition.get('enabling_sciences'))}\n\n"

    subsystems = _as_list(decomposition.get("subsystems"))
    if subsystems:
        content += "Subsystems:\n"
        for sub in subsystems:
            if isinstance(sub, Mapping):
                deps = sub.get("dependencies", sub.get("dependency"))
                content += f"• {sub.get('name', 'Unnamed')}: {_join(deps)}\n"
            else:
                content += f"• {sub}\n"
    return content.rstrip()


def format_pathway(pathway: Mapping[str, Any]) -> str:
    content = f"{pathway.get('narrative') or ''}\n\n"

    steps = _as_list(pathway.get("technical_steps"))
    if steps:
        content += "Technical Steps:\n"
        for index, step in enumerate(steps, start=1):
            content += f"{index}. {step}\n"
        content += "\n"

    content += f"Prototype: {pathway.get('prototype_description') or 'N/A'}\n\n"

    if pathway.get("cultural_impact"):
        content += f"Cultural Impact: {pathway['cultural_impact']}"
    return content.strip()


def _pathways_of(simulations: Any) -> List[Mapping[str, Any]]:
    if isinstance(simulations, Mapping):
        simulations = simulations.get("pathways")
    if not isinstance(simulations, list):
        return []
    return [p for p in simulations if isinstance(p, Mapping)]


def _score(value: Any) -> Optional[float]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return None


def prepare_sections(
    decomposition: Optional[Mapping[str, Any]],
    simulations: Any,
    narratives: Any,
) -> List[DeckSection]:
    """Orders deck content: decomposition, one slide per pathway, then narratives."""
    sections: List[DeckSection] = []

    if isinstance(decomposition, Mapping) and decomposition:
        sections.append(
            DeckSection(
                title="Invention Deconstruction",
                content=format_decomposition(decomposition),
                kind="decomposition",
            )
        )

    pathways = _pathways_of(simulations)
    titles = {}
    for index, pathway in enumerate(pathways, start=1):
        pathway_id = str(pathway.get("id") or f"pathway_{index}")
        titles[pathway_id] = pathway.get("title") or pathway_id
        breakthroughs = _as_list(pathway.get("required_breakthroughs"))
        sections.append(
            DeckSection(
                title=f"Pathway {index}: {pathway.get('title') or 'Untitled'}",
                content=format_pathway(pathway),
                kind="pathway",
                image_key=pathway_id,
                feasibility_score=_score(pathway.get("feasibility_score")),
                required_breakthroughs=[str(b) for b in breakthroughs],
            )
        )

    if isinstance(narratives, str) and narratives.strip():
        sections.append(DeckSection(title="Historical Narrative", content=narratives.strip(), kind="narrative"))
    elif isinstance(narratives, Mapping):
        for key, text in narratives.items():
            if not isinstance(text, str) or not text.strip():
                continue
            label = titles.get(str(key), str(key))
            sections.append(
                DeckSection(title=f"Historical Narrative: {label}", content=text.strip(), kind="narrative")
            )

    return sections


def export_filename(invention: str, era: str, today: Optional[date] = None, extension: str = "pptx") -> str:
    stamp = (today or date.today()).isoformat()
    return f"reverse_invention_{_UNSAFE.sub('_', invention)}_{_UNSAFE.sub('_', era)}_{stamp}.{extension}"


class ExportDeck:
    """
    Use Case: Assembles previously generated results into a slide deck.

    Images referenced by pathway id are resolved through the image fetcher;
    an image that cannot be retrieved is logged and its slide is rendered
    without it.
    """

    def __init__(self, renderer: IDeckRenderer, fetcher: IImageFetcher, default_era: str = "1800s"):
        self.renderer = renderer
        self.fetcher = fetcher
        self.default_era = default_era

    async def execute(
        self,
        title,
        invention,
        era=None,
        decomposition: Optional[Mapping[str, Any]] = None,
        simulations: Any = None,
        narratives: Any = None,
        images: Optional[Mapping[str, str]] = None,
        today: Optional[date] = None,
    ) -> ExportedDeck:
        with tracer.start_as_current_span("use_case.export") as span:
            if not isinstance(title, str) or not title.strip() or not isinstance(invention, str) or not invention.strip():
                raise ValidationError("Title and invention are required")
            title = title.strip()
            invention = invention.strip()
            era_text = era.strip() if isinstance(era, str) and era.strip() else self.default_era

            sections = prepare_sections(decomposition, simulations, narratives)
            span.set_attribute("app.sections", len(sections))
            logger.info("export_started", title=title, sections=len(sections))

            try:
                image_bytes = await self._resolve_images(sections, images or {})
                content = self.renderer.render(title, sections, image_bytes)
            except DomainError:
                raise
            except Exception as e:
                logger.error("export_failed", title=title, error=str(e), exc_info=True)
                raise DomainError("Failed to export presentation")

            filename = export_filename(invention, era_text, today)
            logger.info("export_success", filename=filename, size=len(content), images=len(image_bytes))
            return ExportedDeck(filename=filename, content=content)

    async def _resolve_images(self, sections: List[DeckSection], images: Mapping[str, str]) -> Dict[str, bytes]:
        resolved: Dict[str, bytes] = {}
        for section in sections:
            key = section.image_key
            if not key or key in resolved:
                continue
            reference = images.get(key)
            if not isinstance(reference, str) or not reference:
                continue
            data = await self.fetcher.fetch(reference)
            if data is None:
                logger.warning("export_image_skipped", image_key=key)
                continue
            resolved[key] = data
        return resolved
