# reinvent/core/coercion.py
"""
Response coercion: turns free-form model output into validated domain models.

Stages, in order:
  1. Strict parse of the whole text (after removing markdown code fences).
  2. Parse of the first balanced top-level object/array found in the text.
  3. A schema-valid synthetic fallback with clearly-marked placeholder content.

The coercer never raises for bad model output. Stage 3 is logged as
`coercion_fallback_used` so it can be told apart from a real success.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Type

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from reinvent.core.domain.models import Decomposition, SchemaKind, SimulationResult

logger = structlog.get_logger()

PLACEHOLDER = "[placeholder: the model response could not be parsed]"

_FENCE_RE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n?(.*?)\n?```$", re.DOTALL)

_MODELS: Dict[SchemaKind, Type[BaseModel]] = {
    SchemaKind.DECOMPOSITION: Decomposition,
    SchemaKind.SIMULATION: SimulationResult,
}


@dataclass(frozen=True)
class CoercionResult:
    value: Any
    fallback_used: bool = False
    stage: str = "strict"


def strip_code_fences(text: str) -> str:
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    if match:
        return match.group(1).strip()
    return stripped


def find_balanced_json(text: str) -> Optional[str]:
    """
    Returns the first balanced {...} or [...] substring of `text`, or None.
    Brackets inside JSON string literals (including escaped quotes) are ignored.
    A mismatched closer restarts the scan just after the opener that began it.
    """
    pairs = {"{": "}", "[": "]"}
    offset = 0

    while True:
        start = None
        stack = []
        in_string = False
        escaped = False
        restart = None

        for index in range(offset, len(text)):
            char = text[index]
            if start is None:
                if char in pairs:
                    start = index
                    stack.append(pairs[char])
                continue

            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue

            if char == '"':
                in_string = True
            elif char in pairs:
                stack.append(pairs[char])
            elif char in ("}", "]"):
                if char != stack[-1]:
                    restart = start + 1
                    break
                stack.pop()
                if not stack:
                    return text[start:index + 1]

        if restart is None:
            return None
        offset = restart


# --- Synthetic Fallbacks ---

def fallback_decomposition(context: Mapping[str, Any]) -> Dict[str, Any]:
    name = str(context.get("name") or context.get("invention") or "Unknown invention")
    return {
        "name": name,
        "core_functions": [PLACEHOLDER],
        "materials": [PLACEHOLDER],
        "enabling_sciences": [PLACEHOLDER],
        "subsystems": [{"name": "Primary subsystem (placeholder)", "dependencies": [], "complexity": "medium"}],
        "cultural_drivers": [PLACEHOLDER],
        "min_tech_level": [{"technology": "Unknown (placeholder)", "notes": PLACEHOLDER}],
        "manufacturing_requirements": [PLACEHOLDER],
        "key_breakthroughs": [PLACEHOLDER],
    }


def fallback_simulation(context: Mapping[str, Any]) -> Dict[str, Any]:
    invention = str(context.get("invention") or "Invention")
    era = str(context.get("era") or "the chosen era")

    def pathway(index: int, title: str, approach: str, score: float) -> Dict[str, Any]:
        return {
            "id": f"pathway_{index}",
            "title": title,
            "narrative": f"{PLACEHOLDER} A {approach} route to {invention} in {era}.",
            "technical_steps": [
                "Survey the materials and techniques available in the era (placeholder)",
                "Assemble a working prototype from existing components (placeholder)",
                "Refine the design for practical use (placeholder)",
            ],
            "prototype_description": PLACEHOLDER,
            "feasibility_score": score,
            "required_breakthroughs": [PLACEHOLDER],
            "cultural_impact": PLACEHOLDER,
            "visual_description": f"{approach} {invention} drawn in the style of {era} (placeholder)",
        }

    return {
        "pathways": [
            pathway(1, f"Early {invention} - Mechanical Approach", "mechanical", 6),
            pathway(2, f"{invention} - Alternative Path", "alternative", 5),
            pathway(3, f"Revolutionary {invention} Concept", "revolutionary", 4),
        ]
    }


def fallback_narrative(context: Mapping[str, Any]) -> str:
    title = context.get("title") or "this invention"
    era = context.get("era") or "its era"
    return f"{PLACEHOLDER} No historical account of {title} in {era} is available yet."


# --- Coercer ---

class ResponseCoercer:
    """Single entry point for turning raw model text into structured results."""

    def parse(
        self,
        raw_text: Optional[str],
        kind: SchemaKind,
        context: Optional[Mapping[str, Any]] = None,
    ) -> CoercionResult:
        context = dict(context or {})

        if kind == SchemaKind.NARRATIVE:
            text = strip_code_fences(raw_text or "")
            if text:
                return CoercionResult(value=text)
            logger.warning("coercion_fallback_used", schema=kind.value, reason="empty_text")
            return CoercionResult(value=fallback_narrative(context), fallback_used=True, stage="fallback")

        model = _MODELS[kind]
        text = strip_code_fences(raw_text or "")

        parsed = self._validate(text, model, context)
        if parsed is not None:
            return CoercionResult(value=parsed)

        candidate = find_balanced_json(text)
        if candidate is not None and candidate != text:
            parsed = self._validate(candidate, model, context)
            if parsed is not None:
                logger.info("coercion_extracted_json", schema=kind.value)
                return CoercionResult(value=parsed, stage="extracted")

        logger.warning(
            "coercion_fallback_used",
            schema=kind.value,
            reason="unparseable",
            preview=text[:80],
        )
        builder = fallback_decomposition if kind == SchemaKind.DECOMPOSITION else fallback_simulation
        return CoercionResult(
            value=model.model_validate(builder(context)),
            fallback_used=True,
            stage="fallback",
        )

    def coerce(
        self,
        raw_text: Optional[str],
        kind: SchemaKind,
        context: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        return self.parse(raw_text, kind, context).value

    @staticmethod
    def _validate(text: str, model: Type[BaseModel], context: Mapping[str, Any]) -> Optional[BaseModel]:
        if not text:
            return None
        try:
            data = json.loads(text)
        except (ValueError, RecursionError):
            # RecursionError: nesting deeper than the json decoder allows
            return None

        if isinstance(data, dict) and model is Decomposition and context.get("name"):
            data.setdefault("name", context["name"])
            if not data.get("name"):
                data["name"] = context["name"]

        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            logger.debug("coercion_schema_mismatch", model=model.__name__, errors=e.error_count())
            return None
