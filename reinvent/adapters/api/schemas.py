# reinvent/adapters/api/schemas.py
"""
Request bodies for the HTTP API.

Fields are mostly Optional[Any]. Presence, type and length rules live in the
use cases, which raise ValidationError (400) for every violation.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApiRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class DeconstructRequest(ApiRequest):
    invention: Optional[Any] = None


class SimulateRequest(ApiRequest):
    invention: Optional[Any] = None
    era: Optional[Any] = None
    creativity: Optional[Any] = None
    depth: Optional[Any] = None
    decomposition: Optional[Any] = None


class ImageRequest(ApiRequest):
    prompt: Optional[Any] = None
    style: Optional[Any] = None
    size: Optional[Any] = None
    pathway_data: Optional[Any] = Field(default=None, alias="pathwayData")
    era: Optional[Any] = None


class NarrativeRequest(ApiRequest):
    pathway_data: Optional[Any] = Field(default=None, alias="pathwayData")
    era: Optional[Any] = None


class ExportRequest(ApiRequest):
    title: Optional[Any] = None
    invention: Optional[Any] = None
    era: Optional[Any] = None
    decomposition: Optional[Dict[str, Any]] = None
    simulations: Optional[Any] = None
    narratives: Optional[Any] = None
    images: Optional[Dict[str, Any]] = None
