from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, computed_field, field_validator

from app.core.enums import ResourceType

from . import filters
from .filters import UnitOption


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ResourceLinkCreate(BaseModel):
    """Body of POST /resources. Presence of required fields is checked by the service so the
    caller gets one message naming everything that is missing."""

    title: Optional[str] = None
    description: Optional[str] = None
    subject_code: Optional[str] = None
    start_year: Optional[int] = None
    end_year: Optional[int] = None
    unit_number: Optional[int] = None
    external_url: Optional[str] = None
    resource_type: Optional[ResourceType] = None

    @field_validator("start_year", "end_year", "unit_number", "resource_type", mode="before")
    @classmethod
    def _empty_is_missing(cls, value):
        return _blank_to_none(value)


class ResourceFileCreate(BaseModel):
    """Metadata fields of POST /resources/file (multipart)."""

    title: Optional[str] = None
    description: Optional[str] = None
    subject_code: Optional[str] = None
    start_year: Optional[int] = None
    end_year: Optional[int] = None
    unit_number: Optional[int] = None
    resource_type: Optional[ResourceType] = None


class ResourceUpdate(BaseModel):
    """Patch for PUT /resources/{id}. Only title and description are editable."""

    title: Optional[str] = None
    description: Optional[str] = None

    def changes(self) -> Dict[str, str]:
        """Recognised fields that carry a non-blank value, stripped."""
        result: Dict[str, str] = {}
        if self.title and self.title.strip():
            result["title"] = self.title.strip()
        if self.description and self.description.strip():
            result["description"] = self.description.strip()
        return result


class ResourceResponse(BaseModel):
    id: UUID
    title: str
    description: str
    kind: str
    resource_type: Optional[str] = None
    subject_id: int
    subject_offering_id: Optional[int] = None
    unit_id: Optional[int] = None
    storage_path: Optional[str] = None
    external_url: Optional[str] = None
    contributor_id: UUID
    is_deleted: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ResourceListItem(BaseModel):
    """Resource joined with subject, academic year, unit and contributor for list views."""

    id: UUID
    title: str
    description: str
    kind: str
    resource_type: Optional[str] = None
    external_url: Optional[str] = None
    created_at: datetime
    contributor_id: UUID
    contributor_name: Optional[str] = None
    subject_id: int
    subject_code: str
    subject_name: str
    start_year: Optional[int] = None
    end_year: Optional[int] = None
    unit_id: Optional[int] = None
    unit_number: Optional[int] = None
    unit_title: Optional[str] = None

    @computed_field
    @property
    def course_name(self) -> str:
        return self.subject_name

    @computed_field
    @property
    def academic_year(self) -> Optional[int]:
        return self.start_year

    @computed_field
    @property
    def resource_type_label(self) -> str:
        return filters.resource_type_label(self.resource_type)

    class Config:
        from_attributes = True


class ResourceEnvelope(BaseModel):
    success: bool = True
    data: ResourceResponse


class ResourceListEnvelope(BaseModel):
    success: bool = True
    data: List[ResourceListItem]


class SignedUrlResponse(BaseModel):
    success: bool = True
    signedUrl: str
    expiresIn: int


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ResourceFacets(BaseModel):
    courses: List[str]
    units: List[UnitOption]
    academic_years: List[int]
    resource_types: List[str]


class ResourceFacetsEnvelope(BaseModel):
    success: bool = True
    data: ResourceFacets
