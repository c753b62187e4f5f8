# reinvent/core/prompts.py
"""
reinvent/core/prompts.py

The Single Source of Truth for all LLM instructions.

Every builder is a pure function returning a PromptPair. Structured
operations (deconstruct, simulate) declare their JSON contract inline so the
coercion layer always parses against the same shape. User values are
interpolated as JSON string literals: quotes and newlines are escaped, the
text itself is never shortened or rewritten.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class PromptPair:
    system: str
    user: str


def _quote(value: Any) -> str:
    return json.dumps(str(value), ensure_ascii=False)


# ==============================================================================
# 1. DECONSTRUCTION (low creativity, structured analysis)
# ==============================================================================
DECONSTRUCTION_SCHEMA = """{
  "name": "<invention name>",
  "core_functions": ["primary functions this invention serves"],
  "materials": ["key materials required"],
  "enabling_sciences": ["scientific principles and discoveries required"],
  "subsystems": [
    {
      "name": "subsystem name",
      "dependencies": ["technologies or materials this subsystem requires"],
      "complexity": "low|medium|high"
    }
  ],
  "cultural_drivers": ["social, economic, or cultural needs that drove its development"],
  "min_tech_level": [
    {
      "technology": "required prerequisite technology",
      "notes": "why this is necessary"
    }
  ],
  "manufacturing_requirements": ["manufacturing processes or capabilities needed"],
  "key_breakthroughs": ["critical innovations that made this invention possible"]
}"""

DECONSTRUCTION_SYSTEM = f"""You are an expert historian-engineer who specializes in analyzing inventions and their technological dependencies. You deconstruct any given invention into its fundamental components.

Your analysis should be thorough, historically accurate, and consider both technical and cultural factors that enabled the invention.

Always respond with valid JSON only, no additional text, using exactly this structure:
{DECONSTRUCTION_SCHEMA}"""


def build_deconstruction_prompt(invention: str) -> PromptPair:
    user = f"""Deconstruct the invention: {_quote(invention)}

Analyze its core functions, required materials, enabling sciences, key subsystems, cultural drivers that led to its creation, the minimum technology level required, manufacturing requirements and key breakthroughs.

Use the invention name exactly as given for the "name" field. Return only valid JSON."""
    return PromptPair(system=DECONSTRUCTION_SYSTEM, user=user)


# ==============================================================================
# 2. SIMULATION (creative, alternate pathways)
# ==============================================================================
SIMULATION_SCHEMA = """{
  "pathways": [
    {
      "id": "unique_id",
      "title": "Creative name for this alternate invention",
      "narrative": "80-140 word story written as if this actually happened in that era",
      "technical_steps": ["ordered list of how existing technology/knowledge would be combined"],
      "prototype_description": "how the device would look, feel, and function using era-appropriate materials",
      "feasibility_score": 7,
      "required_breakthroughs": ["1-3 key innovations needed to make this work"],
      "cultural_impact": "how this would have changed society in that era",
      "visual_description": "detailed description for image generation, with era-appropriate aesthetics"
    }
  ]
}"""

SIMULATION_SYSTEM = f"""You are a speculative historian and systems engineer with expertise in technological development across different eras. You imagine plausible alternate technological pathways and understand how inventions could have emerged differently given different historical circumstances.

Your simulations are creative yet grounded in historical possibility, considering the materials, knowledge, and cultural context of the specified era.

Always respond with valid JSON only, no additional text, using exactly this structure:
{SIMULATION_SCHEMA}

"feasibility_score" is a number from 0 (impossible) to 10 (very plausible for the era)."""


def build_simulation_prompt(
    invention: str,
    era: str,
    decomposition: Optional[Mapping[str, Any]],
    creativity: float,
    depth: int,
) -> PromptPair:
    if decomposition:
        context = "Decomposition data:\n" + json.dumps(dict(decomposition), indent=2, ensure_ascii=False)
    else:
        context = f"For the invention {_quote(invention)}, consider its basic requirements."

    pathway_count = 3 if depth <= 3 else 4
    user = f"""{context}

Using the data above, imagine {pathway_count} alternate invention pathways that could plausibly have produced {_quote(invention)} during the {_quote(era)} era.

For each pathway:
- Create a compelling title
- Write an 80-140 word narrative as if it actually happened in that era, using period-appropriate language
- List 3-5 ordered technical steps describing how existing technology is combined
- Describe the prototype (appearance, materials, interface) for that era
- Give a feasibility score from 0 to 10 considering the technology available in that era
- List 1-3 required breakthroughs
- Describe the cultural impact and a visual description for illustration

Consider available materials and manufacturing techniques, scientific knowledge of the time, cultural and social context, economic factors and trade networks, and existing technological foundations.

Creativity level: {creativity:g} (0=conservative, 1=highly speculative)
Depth level: {depth} (1=overview, 5=exhaustive technical detail)

Return only valid JSON."""
    return PromptPair(system=SIMULATION_SYSTEM, user=user)


# ==============================================================================
# 3. NARRATIVE (alternate history textbook entry)
# ==============================================================================
NARRATIVE_SYSTEM = """You are a distinguished historian writing entries for an alternate history textbook. Write in a formal style appropriate for the historical era requested, with historically consistent language, terminology, and social context, and detailed analysis of technological and social impact."""


def build_narrative_prompt(pathway: Mapping[str, Any], era: str) -> PromptPair:
    steps = ", ".join(str(s) for s in pathway.get("technical_steps") or [])
    breakthroughs = ", ".join(str(b) for b in pathway.get("required_breakthroughs") or [])

    user = f"""Write a 250-350 word history book entry describing the invention of {_quote(pathway.get("title", ""))} during the {_quote(era)} era.

Include:
- The circumstances of its invention
- Key figures involved (fictional but plausible names and locations)
- Technical details of how it worked, appropriate for the era
- Its social and economic impact and how it changed daily life
- How it influenced subsequent technological development
- Challenges and limitations of the early versions

Write as if this invention actually existed and shaped history.

Context: {pathway.get("narrative", "")}
Technical details: {pathway.get("prototype_description", "")}
Technical steps: {steps}
Required breakthroughs: {breakthroughs}
Cultural impact: {pathway.get("cultural_impact", "")}"""
    return PromptPair(system=NARRATIVE_SYSTEM, user=user)


# ==============================================================================
# 4. VISUALIZATION (image generation prompt)
# ==============================================================================
ERA_STYLES: Dict[str, str] = {
    "1800s": "Victorian era, brass and wood construction, mechanical gears, hand-crafted details, ornate engravings",
    "1700s": "Colonial period, simple wooden construction, basic metalwork, candlelit workshops",
    "1600s": "Renaissance style, elaborate clockwork mechanisms, guild craftsmanship, parchment diagrams",
    "medieval": "Medieval manuscript illumination style, stone and metal construction, monastery workshop",
    "ancient": "Ancient civilization aesthetic, stone, bronze, and clay materials, hieroglyphic annotations",
}

_ERA_ALIASES = (
    (("1800", "victorian"), "1800s"),
    (("1700", "colonial"), "1700s"),
    (("1600", "renaissance"), "1600s"),
    (("medieval", "middle ages"), "medieval"),
    (("ancient", "classical"), "ancient"),
)


def era_style(era: str) -> str:
    """Maps a free-form era to a visual style description; unknown eras are used verbatim."""
    lowered = (era or "").strip().lower()
    if lowered in ERA_STYLES:
        return ERA_STYLES[lowered]
    for needles, key in _ERA_ALIASES:
        if any(needle in lowered for needle in needles):
            return ERA_STYLES[key]
    return era.strip()


def build_visual_prompt(
    prompt: str,
    style: str = "technical",
    pathway: Optional[Mapping[str, Any]] = None,
    era: Optional[str] = None,
) -> str:
    if pathway and era:
        title = pathway.get("title") or prompt
        prototype = pathway.get("prototype_description") or prompt
        text = f"""Create a detailed technical illustration of {_quote(title)} - {prototype}

Style: {era_style(era)}
Format: Technical blueprint/schematic with cross-section views
Details: Show internal mechanisms, materials, and construction methods appropriate for the {era} era
Quality: Detailed rendering with period-accurate materials and craftsmanship
Background: Neutral/white background suitable for documentation
Perspective: Isometric view with cutaway sections showing internal workings"""
        visual = pathway.get("visual_description")
        if visual:
            text += f"\n\nAdditional context: {visual}"
    elif era:
        text = (
            f"{era_style(era)} technical illustration of {prompt}. Vintage blueprint style, "
            "detailed schematic, era-appropriate materials and design, technical drawing, neutral background."
        )
    else:
        text = (
            f"Technical blueprint illustration of {prompt}. Detailed schematic drawing, cross-section view, "
            "technical annotations, high detail, neutral background."
        )

    if style and style != "technical":
        text += f"\nRendering style: {style}"
    return text
