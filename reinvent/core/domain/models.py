# reinvent/core/domain/models.py
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator, model_validator

# --- Enums ---

class SchemaKind(str, Enum):
    """Structured outputs the coercion layer knows how to parse."""
    DECOMPOSITION = "decomposition"
    SIMULATION = "simulation"
    NARRATIVE = "narrative"

class CacheNamespace(str, Enum):
    DECOMPOSITION = "decomposition"
    SIMULATION = "simulation"
    IMAGE = "image"
    TRANSCRIPTION = "transcription"

# --- Field Helpers ---

def _as_string_list(value: Any) -> Any:
    """Accepts a single string or a list of scalars and returns a list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        items = []
        for item in value:
            if isinstance(item, (str, int, float)) and not isinstance(item, bool):
                text = str(item).strip()
                if text:
                    items.append(text)
            else:
                # dicts/lists inside a string list are a schema violation
                return value
        return items
    return value


StringList = Annotated[List[str], BeforeValidator(_as_string_list)]

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")

# --- Decomposition ---

class Subsystem(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    dependencies: StringList = Field(default_factory=list)
    complexity: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _from_plain_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"name": data}
        return data

    @model_validator(mode="before")
    @classmethod
    def _legacy_dependency_key(cls, data: Any) -> Any:
        if isinstance(data, dict) and "dependencies" not in data and "dependency" in data:
            data = dict(data)
            data["dependencies"] = data.pop("dependency")
        return data

class TechRequirement(BaseModel):
    technology: str
    notes: str = ""

    @model_validator(mode="before")
    @classmethod
    def _from_plain_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"technology": data}
        return data

class Decomposition(BaseModel):
    """
    The fundamental dependencies of an invention: what it does, what it is
    made of, which sciences it needs and which social forces drove it.
    """
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1)
    core_functions: StringList = Field(default_factory=list)
    materials: StringList = Field(default_factory=list)
    enabling_sciences: StringList = Field(default_factory=list)
    subsystems: List[Subsystem] = Field(default_factory=list)
    cultural_drivers: StringList = Field(default_factory=list)
    min_tech_level: List[TechRequirement] = Field(default_factory=list)
    manufacturing_requirements: StringList = Field(default_factory=list)
    key_breakthroughs: StringList = Field(default_factory=list)

# --- Simulation ---

class Pathway(BaseModel):
    """One alternate route by which the invention could have emerged in an era."""
    model_config = ConfigDict(extra="allow")

    id: str = ""
    title: str = Field(..., min_length=1)
    narrative: str = ""
    technical_steps: StringList = Field(..., min_length=1)
    prototype_description: str = ""
    feasibility_score: float = Field(..., ge=0, le=10)
    required_breakthroughs: StringList = Field(default_factory=list)
    cultural_impact: str = ""
    visual_description: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("feasibility_score", mode="before")
    @classmethod
    def _parse_score(cls, value: Any) -> float:
        """Accepts 7, 7.5, "7", "7/10" or "about 6 out of 10"; clamps to [0, 10]."""
        if isinstance(value, bool):
            raise ValueError("feasibility_score must be numeric")
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            match = _NUMBER_RE.search(value)
            if not match:
                raise ValueError(f"feasibility_score is not numeric: {value!r}")
            number = float(match.group(0))
        else:
            raise ValueError("feasibility_score must be numeric")
        return min(10.0, max(0.0, number))

def _is_valid_pathway(item: Any) -> bool:
    try:
        Pathway.model_validate(item)
    except ValidationError:
        return False
    return True

class SimulationResult(BaseModel):
    """Invalid pathway items are dropped; at least one valid pathway must remain."""
    pathways: List[Pathway] = Field(..., min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _wrap_bare_list(cls, data: Any) -> Any:
        if isinstance(data, list):
            data = {"pathways": data}
        if isinstance(data, dict) and isinstance(data.get("pathways"), list):
            data = dict(data)
            data["pathways"] = [item for item in data["pathways"] if _is_valid_pathway(item)]
        return data

    @model_validator(mode="after")
    def _assign_missing_ids(self) -> "SimulationResult":
        for index, pathway in enumerate(self.pathways, start=1):
            if not pathway.id:
                pathway.id = f"pathway_{index}"
        return self

# --- Provider Request/Response Values ---

@dataclass(frozen=True)
class GenerationOptions:
    temperature: float = 0.3
    max_tokens: int = 1500
    json_output: bool = False

@dataclass(frozen=True)
class ImageOptions:
    size: str = "1024x1024"
    style: str = "technical"

    @property
    def dimensions(self) -> tuple:
        width, _, height = self.size.partition("x")
        return int(width), int(height)

@dataclass(frozen=True)
class AudioPayload:
    content: bytes
    filename: str = "audio.wav"
    content_type: str = "audio/wav"

class GeneratedImage(BaseModel):
    id: str
    url: str
    provider: str

# --- Use Case Results ---

class DeconstructionResult(BaseModel):
    decomposition: Decomposition
    cached: bool = False

class SimulationOutcome(BaseModel):
    simulations: SimulationResult
    cached: bool = False

class ImageGenerationResult(BaseModel):
    images: List[GeneratedImage]
    cached: bool = False
    prompt: str

class NarrativeResult(BaseModel):
    narrative: str
    era: str
    title: str

class TranscriptionResult(BaseModel):
    text: str
    cached: bool = False

@dataclass(frozen=True)
class ExportedDeck:
    filename: str
    content: bytes
    media_type: str = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

@dataclass
class DeckSection:
    """One content slide of an exported deck."""
    title: str
    content: str
    kind: str
    image_key: Optional[str] = None
    feasibility_score: Optional[float] = None
    required_breakthroughs: List[str] = field(default_factory=list)

CacheStats = Dict[str, Dict[str, float]]
